# tests/test_analytics.py
"""
Testes de analytics, feed pessoal e trilha de auditoria
"""
from datetime import datetime, timedelta

from pinquest.models import ActivityLog, SavedLocation, RecentLocation
from pinquest.services.account_service import AccountService
from pinquest.services.activity_service import ActivityService
from pinquest.services.analytics_service import AnalyticsService
from pinquest.services.post_repository import PostRepository
from tests.conftest import make_user, make_post


class TestTopPosts:
    """Ranking por likes + comentários"""

    def test_ordered_by_engagement(self, client, db, user, other_user, auth_headers):
        quiet = make_post(db, user, 'Quiet')
        liked = make_post(db, user, 'Liked')
        busy = make_post(db, user, 'Busy')
        PostRepository.add_like(liked.id, other_user.id)
        PostRepository.add_comment(busy, other_user.id, 'Nice')
        PostRepository.add_comment(busy, user.id, 'Thanks')

        resp = client.get('/api/v1/analytics/top-posts', headers=auth_headers(user))
        assert resp.status_code == 200
        ranking = resp.get_json()['data']
        assert [item['id'] for item in ranking] == [busy.id, liked.id, quiet.id]
        assert ranking[0]['commentsCount'] == 2
        assert ranking[0]['engagement'] == 2
        assert ranking[1]['likesCount'] == 1
        assert ranking[0]['author'] == 'Test User'

    def test_excludes_old_and_unpublished(self, app_context, db, user):
        make_post(db, user, 'Old', date_posted=datetime.utcnow() - timedelta(days=40))
        make_post(db, user, 'Pending', status='pending')
        recent = make_post(db, user, 'Recent')
        assert [item['id'] for item in AnalyticsService.top_posts(days=30)] == [recent.id]

    def test_limit(self, client, db, user, auth_headers):
        for index in range(4):
            make_post(db, user, f'Post {index}')
        resp = client.get('/api/v1/analytics/top-posts?limit=2', headers=auth_headers(user))
        assert len(resp.get_json()['data']) == 2

    def test_requires_auth(self, client, db):
        assert client.get('/api/v1/analytics/top-posts').status_code == 401


class TestUserAnalytics:
    """Engajamento diário e linha do tempo do usuário"""

    def test_engagement_grouped_by_day(self, app_context, db, user, other_user):
        yesterday = datetime.utcnow() - timedelta(days=1)
        first = make_post(db, user, 'First', date_posted=yesterday)
        make_post(db, user, 'Second', date_posted=yesterday)
        today = make_post(db, user, 'Today')
        make_post(db, other_user, 'Not mine')
        PostRepository.add_like(first.id, other_user.id)
        PostRepository.add_comment(today, other_user.id, 'Hello')

        daily = AnalyticsService.user_engagement(user, days=7)
        assert [day['date'] for day in daily] == [yesterday.date().isoformat(),
                                                  datetime.utcnow().date().isoformat()]
        assert daily[0]['posts'] == 2
        assert daily[0]['likes'] == 1
        assert daily[1]['comments'] == 1
        assert daily[1]['totalEngagement'] == 1

    def test_activity_timeline_newest_first(self, client, db, user, other_user, auth_headers):
        own = make_post(db, user, 'Mine', date_posted=datetime.utcnow() - timedelta(days=2))
        theirs = make_post(db, other_user, 'Theirs')
        PostRepository.add_comment(theirs, user.id, 'Great spot')
        PostRepository.add_like(theirs.id, user.id)

        resp = client.get('/api/v1/analytics/activity-timeline', headers=auth_headers(user))
        timeline = resp.get_json()['data']
        assert {item['type'] for item in timeline} == {'post', 'comment', 'like'}
        assert timeline[-1] == {'type': 'post', 'postId': own.id, 'title': 'Mine',
                                'date': own.date_posted.isoformat(), 'action': 'created post'}
        dates = [item['date'] for item in timeline]
        assert dates == sorted(dates, reverse=True)

    def test_user_summary(self, client, db, user, other_user, post, auth_headers):
        PostRepository.add_like(post.id, other_user.id)
        data = client.get('/api/v1/analytics/user', headers=auth_headers(other_user)).get_json()['data']
        assert data['postsCreated'] == 0
        assert data['postsLiked'] == 1
        assert data['recentlyLiked'][0]['id'] == post.id


class TestAnalyticsAccess:
    """Quem pode ver cada relatório"""

    def test_post_analytics_owner(self, client, user, post, auth_headers):
        resp = client.get(f'/api/v1/analytics/post/{post.id}', headers=auth_headers(user))
        assert resp.status_code == 200
        assert resp.get_json()['data']['postId'] == post.id

    def test_post_analytics_other_user(self, client, other_user, post, auth_headers):
        resp = client.get(f'/api/v1/analytics/post/{post.id}', headers=auth_headers(other_user))
        assert resp.status_code == 401
        assert resp.get_json()['message'] == 'Not authorized to view this post analytics'

    def test_post_analytics_admin(self, client, admin_user, post, auth_headers):
        resp = client.get(f'/api/v1/analytics/post/{post.id}', headers=auth_headers(admin_user))
        assert resp.status_code == 200

    def test_platform_admin_only(self, client, user, admin_user, post, auth_headers):
        assert client.get('/api/v1/analytics/platform', headers=auth_headers(user)).status_code == 403
        resp = client.get('/api/v1/analytics/platform', headers=auth_headers(admin_user))
        assert resp.status_code == 200
        assert resp.get_json()['data']['totalPosts'] == 1


class TestPersonalFeed:
    """GET /feed/personal"""

    def test_created_and_liked(self, client, db, user, other_user, auth_headers):
        pending = make_post(db, user, 'Draft', status='pending')
        theirs = make_post(db, other_user, 'Theirs')
        hidden = make_post(db, other_user, 'Rejected', status='rejected')
        PostRepository.add_like(theirs.id, user.id)
        PostRepository.add_like(hidden.id, user.id)

        resp = client.get('/api/v1/feed/personal', headers=auth_headers(user))
        assert resp.status_code == 200
        data = resp.get_json()['data']
        assert [p['id'] for p in data['posts']['created']] == [pending.id]
        assert [p['id'] for p in data['posts']['liked']] == [theirs.id]
        assert data['counts'] == {'totalCreated': 1, 'totalLiked': 1}

    def test_requires_auth(self, client, db):
        assert client.get('/api/v1/feed/personal').status_code == 401


class TestActivityLog:
    """Trilha de auditoria"""

    def test_login_success_and_failure(self, client, user):
        client.post('/api/v1/auth/login', json={'email': 'user@test.com', 'password': 'wrong'})
        client.post('/api/v1/auth/login', json={'email': 'user@test.com', 'password': 'TestPass123'})
        logs = ActivityService.query(user.id).all()
        assert [(log.action, log.success) for log in logs] == [('login', True), ('login_failure', False)]

    def test_unknown_email_not_logged(self, client, db):
        client.post('/api/v1/auth/login', json={'email': 'ghost@test.com', 'password': 'whatever'})
        assert ActivityLog.query.count() == 0

    def test_unknown_action_is_ignored(self, app_context, user):
        assert ActivityService.record(user.id, 'teleport') is None
        assert ActivityLog.query.count() == 0

    def test_admin_ban_recorded(self, client, admin_user, other_user, auth_headers):
        client.put(f'/api/v1/admin/users/{other_user.id}/ban', json={'reason': 'spam'},
                   headers=auth_headers(admin_user))
        log = ActivityService.query(admin_user.id, 'user_management').one()
        assert log.details == {'operation': 'ban', 'targetUserId': other_user.id}

    def test_activity_logs_route_filters(self, client, admin_user, user, auth_headers):
        ActivityService.record(user.id, 'login')
        ActivityService.record(admin_user.id, 'admin_panel_access')
        headers = auth_headers(admin_user)

        resp = client.get(f'/api/v1/admin/activity-logs?userId={user.id}', headers=headers)
        logs = resp.get_json()['data']['logs']
        assert [(log['userId'], log['action']) for log in logs] == [(user.id, 'login')]

        resp = client.get('/api/v1/admin/activity-logs?action=admin_panel_access', headers=headers)
        assert [log['userId'] for log in resp.get_json()['data']['logs']] == [admin_user.id]

        resp = client.get('/api/v1/admin/activity-logs?action=teleport', headers=headers)
        assert resp.status_code == 400

    def test_activity_logs_admin_only(self, client, user, auth_headers):
        resp = client.get('/api/v1/admin/activity-logs', headers=auth_headers(user))
        assert resp.status_code == 403


class TestAccountDeletionCleanup:
    """Excluir a conta remove lugares e auditoria do usuário"""

    def test_delete_user_removes_locations_and_logs(self, app_context, db):
        doomed = make_user(db, 'Doomed', 'doomed@test.com')
        db.session.add(SavedLocation(user_id=doomed.id, location_id='a', name='A'))
        db.session.add(RecentLocation(user_id=doomed.id, location_id='b', title='B'))
        db.session.commit()
        ActivityService.record(doomed.id, 'login')

        AccountService.delete_user(doomed)
        assert SavedLocation.query.count() == 0
        assert RecentLocation.query.count() == 0
        assert ActivityLog.query.count() == 0
