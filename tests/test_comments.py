# tests/test_comments.py
"""
Testes de comentários, respostas e likes em comentários
"""
import pytest

from pinquest.models import Comment, CommentLike, Notification
from tests.conftest import make_post


def add_comment(client, post, author, auth_headers, text='Great spot!'):
    return client.post(f'/api/v1/posts/{post.id}/comments', json={'text': text},
                       headers=auth_headers(author))


class TestAddComment:
    """Testes de POST /comments"""

    def test_add_comment(self, client, post, other_user, auth_headers):
        resp = add_comment(client, post, other_user, auth_headers)
        assert resp.status_code == 201
        data = resp.get_json()['data']
        assert data['text'] == 'Great spot!'
        assert data['user'] == {'id': other_user.id, 'name': 'Other User', 'avatar': None}
        assert data['replies'] == []

    def test_same_user_can_comment_twice(self, client, post, other_user, auth_headers):
        add_comment(client, post, other_user, auth_headers, 'first')
        resp = add_comment(client, post, other_user, auth_headers, 'second')
        assert resp.status_code == 201
        assert Comment.query.filter_by(post_id=post.id).count() == 2

    def test_empty_text(self, client, post, other_user, auth_headers):
        resp = add_comment(client, post, other_user, auth_headers, '   ')
        assert resp.status_code == 400
        assert resp.get_json()['message'] == 'Comment text is required'

    def test_html_is_stripped(self, client, post, other_user, auth_headers):
        resp = add_comment(client, post, other_user, auth_headers, '<b>nice</b> view')
        assert resp.get_json()['data']['text'] == 'nice view'

    def test_notifies_owner(self, client, post, user, other_user, auth_headers):
        add_comment(client, post, other_user, auth_headers)
        notification = Notification.query.filter_by(recipient_id=user.id).one()
        assert notification.type == 'comment'
        assert notification.comment_id is not None

    def test_owner_comment_does_not_notify(self, client, post, user, auth_headers):
        add_comment(client, post, user, auth_headers)
        assert Notification.query.count() == 0

    def test_list_comments_newest_first(self, client, post, other_user, auth_headers):
        add_comment(client, post, other_user, auth_headers, 'first')
        add_comment(client, post, other_user, auth_headers, 'second')
        resp = client.get(f'/api/v1/posts/{post.id}/comments')
        assert [c['text'] for c in resp.get_json()['data']] == ['second', 'first']

    def test_post_detail_includes_comments(self, client, post, other_user, auth_headers):
        add_comment(client, post, other_user, auth_headers)
        data = client.get(f'/api/v1/posts/{post.id}').get_json()['data']
        assert data['commentsCount'] == 1
        assert data['comments'][0]['text'] == 'Great spot!'


class TestEditDeleteComment:
    """Testes de edição e remoção"""

    def test_author_can_edit(self, client, post, other_user, auth_headers):
        comment_id = add_comment(client, post, other_user, auth_headers).get_json()['data']['id']
        resp = client.put(f'/api/v1/posts/{post.id}/comments/{comment_id}',
                          json={'text': 'edited'}, headers=auth_headers(other_user))
        assert resp.status_code == 200
        assert resp.get_json()['data']['text'] == 'edited'
        assert resp.get_json()['data']['edited'] is True

    def test_other_user_cannot_edit(self, client, post, user, other_user, auth_headers):
        comment_id = add_comment(client, post, other_user, auth_headers).get_json()['data']['id']
        resp = client.put(f'/api/v1/posts/{post.id}/comments/{comment_id}',
                          json={'text': 'hacked'}, headers=auth_headers(user))
        assert resp.status_code == 401

    def test_post_owner_can_delete(self, client, post, user, other_user, auth_headers):
        comment_id = add_comment(client, post, other_user, auth_headers).get_json()['data']['id']
        resp = client.delete(f'/api/v1/posts/{post.id}/comments/{comment_id}',
                             headers=auth_headers(user))
        assert resp.status_code == 200
        assert Comment.query.count() == 0

    def test_comment_from_other_post(self, client, db, post, user, other_user, auth_headers):
        other_post = make_post(db, user, 'Louvre')
        comment_id = add_comment(client, post, other_user, auth_headers).get_json()['data']['id']
        resp = client.put(f'/api/v1/posts/{other_post.id}/comments/{comment_id}',
                          json={'text': 'x'}, headers=auth_headers(other_user))
        assert resp.status_code == 404


class TestReplies:
    """Testes de respostas"""

    def test_reply_is_nested(self, client, post, user, other_user, auth_headers):
        comment_id = add_comment(client, post, other_user, auth_headers).get_json()['data']['id']
        resp = client.post(f'/api/v1/posts/{post.id}/comments/{comment_id}/replies',
                           json={'text': 'Thanks!'}, headers=auth_headers(user))
        assert resp.status_code == 201
        assert resp.get_json()['data']['parentId'] == comment_id

        comments = client.get(f'/api/v1/posts/{post.id}/comments').get_json()['data']
        assert len(comments) == 1
        assert [r['text'] for r in comments[0]['replies']] == ['Thanks!']

    def test_reply_notifies_comment_author(self, client, post, user, other_user, auth_headers):
        comment_id = add_comment(client, post, other_user, auth_headers).get_json()['data']['id']
        client.post(f'/api/v1/posts/{post.id}/comments/{comment_id}/replies',
                    json={'text': 'Thanks!'}, headers=auth_headers(user))
        notification = Notification.query.filter_by(recipient_id=other_user.id).one()
        assert notification.type == 'reply'

    def test_deleting_comment_removes_replies(self, client, post, user, other_user, auth_headers):
        comment_id = add_comment(client, post, other_user, auth_headers).get_json()['data']['id']
        client.post(f'/api/v1/posts/{post.id}/comments/{comment_id}/replies',
                    json={'text': 'Thanks!'}, headers=auth_headers(user))
        client.delete(f'/api/v1/posts/{post.id}/comments/{comment_id}',
                      headers=auth_headers(other_user))
        assert Comment.query.count() == 0


class TestCommentLikes:
    """Testes de likes em comentários"""

    def test_like_and_unlike(self, client, post, user, other_user, auth_headers):
        comment_id = add_comment(client, post, other_user, auth_headers).get_json()['data']['id']
        url = f'/api/v1/posts/{post.id}/comments/{comment_id}'

        resp = client.put(f'{url}/like', headers=auth_headers(user))
        assert resp.status_code == 200
        assert resp.get_json()['data']['likesCount'] == 1

        resp = client.put(f'{url}/like', headers=auth_headers(user))
        assert resp.status_code == 400

        resp = client.put(f'{url}/unlike', headers=auth_headers(user))
        assert resp.get_json()['data']['likesCount'] == 0
        assert CommentLike.query.count() == 0

    def test_unlike_without_like(self, client, post, user, other_user, auth_headers):
        comment_id = add_comment(client, post, other_user, auth_headers).get_json()['data']['id']
        resp = client.put(f'/api/v1/posts/{post.id}/comments/{comment_id}/unlike',
                          headers=auth_headers(user))
        assert resp.status_code == 400
        assert resp.get_json()['status'] == 'fail'
