# pinquest/routes/analytics.py
from flask import Blueprint, g
from flask_login import login_required, current_user

from pinquest.models import Post
from pinquest.services.analytics_service import AnalyticsService
from pinquest.utils.auth import admin_required
from pinquest.utils.errors import AuthorizationError
from pinquest.utils.helpers import get_or_404, parse_int
from pinquest.utils.responses import success

bp = Blueprint('analytics', __name__, url_prefix='/api/v1/analytics')

MAX_DAYS = 365
MAX_TOP_POSTS = 50


def _bounded(name, default, maximum):
    return min(max(parse_int(g.params, name, default), 1), maximum)


@bp.route('/platform', methods=['GET'])
@login_required
@admin_required
def platform():
    return success(AnalyticsService.platform_stats())


@bp.route('/user', methods=['GET'])
@login_required
def user_analytics():
    return success(AnalyticsService.user_summary(current_user))


@bp.route('/post/<int:post_id>', methods=['GET'])
@login_required
def post_analytics(post_id):
    post = get_or_404(Post, post_id, 'Post not found')
    if not (post.is_owned_by(current_user) or current_user.is_admin):
        raise AuthorizationError('Not authorized to view this post analytics')
    return success(AnalyticsService.post_summary(post))


@bp.route('/top-posts', methods=['GET'])
@login_required
def top_posts():
    days = _bounded('days', 30, MAX_DAYS)
    limit = _bounded('limit', 10, MAX_TOP_POSTS)
    return success(AnalyticsService.top_posts(days, limit))


@bp.route('/user-engagement', methods=['GET'])
@login_required
def user_engagement():
    return success(AnalyticsService.user_engagement(current_user, _bounded('days', 7, MAX_DAYS)))


@bp.route('/activity-timeline', methods=['GET'])
@login_required
def activity_timeline():
    return success(AnalyticsService.activity_timeline(current_user, _bounded('days', 30, MAX_DAYS)))
