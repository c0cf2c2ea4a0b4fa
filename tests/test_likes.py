# tests/test_likes.py
"""
Testes do ciclo like/unlike
"""
import threading

import pytest
from sqlalchemy.exc import IntegrityError

from pinquest import create_app, db as _db
from pinquest.models import Post, PostLike, Notification
from pinquest.services.post_repository import PostRepository
from pinquest.utils.errors import ConflictError
from tests.conftest import make_user, make_post, refresh


class TestPostRepositoryLikes:
    """Testes do repositório de likes"""

    def test_like_increments_count(self, app_context, db, post, other_user):
        assert PostRepository.add_like(post.id, other_user.id) == 1
        assert refresh(db, post).likes_count == 1

    def test_duplicate_like_conflicts(self, app_context, post, other_user):
        PostRepository.add_like(post.id, other_user.id)
        with pytest.raises(ConflictError, match='already liked'):
            PostRepository.add_like(post.id, other_user.id)
        assert PostLike.query.filter_by(post_id=post.id).count() == 1

    def test_unlike_without_like_conflicts(self, app_context, post, other_user):
        with pytest.raises(ConflictError, match='not liked'):
            PostRepository.remove_like(post.id, other_user.id)

    def test_unlike_decrements_count(self, app_context, post, user, other_user):
        PostRepository.add_like(post.id, user.id)
        PostRepository.add_like(post.id, other_user.id)
        assert PostRepository.remove_like(post.id, other_user.id) == 1

    def test_count_never_negative(self, app_context, db, post, other_user):
        PostRepository.add_like(post.id, other_user.id)
        PostRepository.remove_like(post.id, other_user.id)
        with pytest.raises(ConflictError):
            PostRepository.remove_like(post.id, other_user.id)
        assert db.session.get(Post, post.id).likes_count == 0

    def test_unique_constraint_rejects_second_row(self, app_context, db, post, other_user):
        """Segunda inserção do mesmo par (post, usuário) é barrada pelo banco"""
        db.session.add(PostLike(post_id=post.id, user_id=other_user.id))
        db.session.commit()
        db.session.add(PostLike(post_id=post.id, user_id=other_user.id))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()
        assert PostLike.query.filter_by(post_id=post.id, user_id=other_user.id).count() == 1


class TestLikeRoutes:
    """Testes das rotas PUT /like e /unlike"""

    def test_like_requires_auth(self, client, post):
        resp = client.put(f'/api/v1/posts/{post.id}/like')
        assert resp.status_code == 401
        assert resp.get_json() == {'status': 'fail', 'message': 'Not authorized, no token'}

    def test_invalid_token(self, client, post):
        resp = client.put(f'/api/v1/posts/{post.id}/like',
                          headers={'Authorization': 'Bearer not-a-token'})
        assert resp.status_code == 401
        assert resp.get_json()['message'] == 'Not authorized, token failed'

    def test_like_then_duplicate(self, client, db, post, other_user, auth_headers):
        resp = client.put(f'/api/v1/posts/{post.id}/like', headers=auth_headers(other_user))
        assert resp.status_code == 200
        assert resp.get_json()['data']['likesCount'] == 1

        resp = client.put(f'/api/v1/posts/{post.id}/like', headers=auth_headers(other_user))
        assert resp.status_code == 400
        assert resp.get_json()['message'] == 'You have already liked this post'
        assert refresh(db, post).likes_count == 1

    def test_unlike_route(self, client, db, post, other_user, auth_headers):
        client.put(f'/api/v1/posts/{post.id}/like', headers=auth_headers(other_user))
        resp = client.put(f'/api/v1/posts/{post.id}/unlike', headers=auth_headers(other_user))
        assert resp.status_code == 200
        assert resp.get_json()['data']['likesCount'] == 0

        resp = client.put(f'/api/v1/posts/{post.id}/unlike', headers=auth_headers(other_user))
        assert resp.status_code == 400
        assert resp.get_json()['message'] == 'You have not liked this post yet'

    def test_like_notifies_owner(self, client, db, post, user, other_user, auth_headers):
        client.put(f'/api/v1/posts/{post.id}/like', headers=auth_headers(other_user))
        notification = Notification.query.filter_by(recipient_id=user.id).one()
        assert notification.type == 'like'
        assert notification.sender_id == other_user.id
        assert notification.post_id == post.id
        assert 'Other User' in notification.message

    def test_self_like_does_not_notify(self, client, db, post, user, auth_headers):
        resp = client.put(f'/api/v1/posts/{post.id}/like', headers=auth_headers(user))
        assert resp.status_code == 200
        assert Notification.query.count() == 0

    def test_like_unknown_post(self, client, other_user, auth_headers):
        resp = client.put('/api/v1/posts/9999/like', headers=auth_headers(other_user))
        assert resp.status_code == 404

    def test_post_lists_likers(self, client, post, other_user, auth_headers):
        client.put(f'/api/v1/posts/{post.id}/like', headers=auth_headers(other_user))
        data = client.get(f'/api/v1/posts/{post.id}').get_json()['data']
        assert data['likes'] == [other_user.id]
        assert data['likesCount'] == 1

    def test_n_distinct_likes(self, client, db, post, auth_headers):
        likers = [make_user(db, f'Liker {i}', f'liker{i}@test.com') for i in range(5)]
        for liker in likers:
            resp = client.put(f'/api/v1/posts/{post.id}/like', headers=auth_headers(liker))
            assert resp.status_code == 200

        data = client.get(f'/api/v1/posts/{post.id}').get_json()['data']
        assert data['likesCount'] == len(likers) == len(data['likes'])
        assert sorted(data['likes']) == sorted(liker.id for liker in likers)
        assert refresh(db, post).likes_count == PostLike.query.filter_by(post_id=post.id).count()


@pytest.fixture
def file_app(tmp_path):
    """App com SQLite em arquivo, compartilhado entre threads"""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'likes.db'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {'connect_args': {'timeout': 30, 'check_same_thread': False}},
        'SECRET_KEY': 'test-secret-key-for-testing',
        'EVENTS_ASYNC': False,
        'FIREBASE_PROJECT_ID': None,
        'SMTP_PASSWORD': '',
    })
    with app.app_context():
        _db.create_all()
        owner = make_user(_db, 'Owner', 'owner@test.com')
        liker = make_user(_db, 'Liker', 'liker@test.com')
        post = make_post(_db, owner, 'Eiffel Tower')
        ids = {'post': post.id, 'liker': liker.id}
        _db.session.remove()

    yield app, ids

    with app.app_context():
        _db.session.remove()
        _db.drop_all()
        _db.engine.dispose()


class TestConcurrentLikes:
    """Likes simultâneos do mesmo usuário"""

    THREADS = 8

    def test_same_user_racing_leaves_one_like(self, file_app):
        app, ids = file_app
        barrier = threading.Barrier(self.THREADS)
        results = []
        lock = threading.Lock()

        def like():
            with app.app_context():
                barrier.wait()
                try:
                    outcome = PostRepository.add_like(ids['post'], ids['liker'])
                except ConflictError:
                    outcome = 'conflict'
                finally:
                    _db.session.remove()
                with lock:
                    results.append(outcome)

        threads = [threading.Thread(target=like) for _ in range(self.THREADS)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        assert len(results) == self.THREADS
        assert results.count(1) == 1
        assert results.count('conflict') == self.THREADS - 1

        with app.app_context():
            assert PostLike.query.filter_by(post_id=ids['post']).count() == 1
            assert _db.session.get(Post, ids['post']).likes_count == 1
