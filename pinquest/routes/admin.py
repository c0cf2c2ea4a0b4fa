# pinquest/routes/admin.py
import logging
from datetime import datetime, timedelta

from flask import Blueprint, g
from flask_login import login_required, current_user
from sqlalchemy import or_

from pinquest import db
from pinquest.models import User, Post, Comment, Report, ROLES, POST_STATUSES, ACTIVITY_ACTIONS
from pinquest.services.account_service import AccountService
from pinquest.services.activity_service import ActivityService
from pinquest.services.events import outbox
from pinquest.services.post_query_service import _like_pattern
from pinquest.utils.auth import admin_required
from pinquest.utils.errors import ValidationError
from pinquest.utils.helpers import get_or_404, get_page_args, paginate, parse_int, parse_str
from pinquest.utils.responses import success

bp = Blueprint('admin', __name__, url_prefix='/api/v1/admin')
logger = logging.getLogger(__name__)


def _get_other_user(user_id, action):
    user = get_or_404(User, user_id, 'User not found')
    if user.id == current_user.id:
        raise ValidationError(f'You cannot {action} your own account')
    return user


@bp.route('/stats', methods=['GET'])
@login_required
@admin_required
def stats():
    """Estatísticas gerais da plataforma"""
    ActivityService.record(current_user.id, 'admin_panel_access')
    week_ago = datetime.utcnow() - timedelta(days=7)
    return success({
        'users': {
            'total': User.query.count(),
            'admins': User.query.filter_by(role='admin').count(),
            'banned': User.query.filter_by(is_banned=True).count(),
            'newThisWeek': User.query.filter(User.created_at >= week_ago).count(),
        },
        'posts': {
            'total': Post.query.count(),
            'byStatus': {status: Post.query.filter_by(status=status).count()
                         for status in POST_STATUSES},
            'newThisWeek': Post.query.filter(Post.date_posted >= week_ago).count(),
        },
        'comments': Comment.query.count(),
        'reports': {
            'total': Report.query.count(),
            'pending': Report.query.filter_by(status='pending').count(),
        },
    })


@bp.route('/users', methods=['GET'])
@login_required
@admin_required
def list_users():
    query = User.query
    search = g.params.get('q')
    if search:
        pattern = _like_pattern(search)
        query = query.filter(or_(User.name.ilike(pattern, escape='\\'),
                                 User.email.ilike(pattern, escape='\\')))
    if g.params.get('role'):
        query = query.filter_by(role=g.params['role'])
    if g.params.get('banned') in ('true', 'false'):
        query = query.filter_by(is_banned=g.params['banned'] == 'true')

    page, limit = get_page_args(g.params)
    users, pagination = paginate(query.order_by(User.created_at.desc(), User.id.desc()), page, limit)
    return success({'users': [user.to_dict(private=True) for user in users], 'pagination': pagination})


@bp.route('/users/<int:user_id>/ban', methods=['PUT'])
@login_required
@admin_required
def ban_user(user_id):
    user = _get_other_user(user_id, 'ban')
    user.is_banned = True
    user.ban_reason = parse_str(g.payload, 'reason') or None
    db.session.commit()
    logger.info(f"Admin {current_user.id} baniu o usuário {user.id}")
    ActivityService.record(current_user.id, 'user_management', operation='ban', targetUserId=user.id)
    return success(user.to_dict(private=True), message='User banned')


@bp.route('/users/<int:user_id>/unban', methods=['PUT'])
@login_required
@admin_required
def unban_user(user_id):
    user = get_or_404(User, user_id, 'User not found')
    user.is_banned = False
    user.ban_reason = None
    db.session.commit()
    logger.info(f"Admin {current_user.id} desbaniu o usuário {user.id}")
    ActivityService.record(current_user.id, 'user_management', operation='unban', targetUserId=user.id)
    return success(user.to_dict(private=True), message='User unbanned')


@bp.route('/users/<int:user_id>/role', methods=['PUT'])
@login_required
@admin_required
def change_role(user_id):
    role = parse_str(g.payload, 'role')
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")
    user = _get_other_user(user_id, 'change the role of')
    user.role = role
    db.session.commit()
    ActivityService.record(current_user.id, 'user_management', operation='role',
                           targetUserId=user.id, role=role)
    return success(user.to_dict(private=True), message='Role updated')


@bp.route('/users/<int:user_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_user(user_id):
    user = _get_other_user(user_id, 'delete')
    AccountService.delete_user(user)
    logger.info(f"Admin {current_user.id} removeu o usuário {user_id}")
    ActivityService.record(current_user.id, 'user_management', operation='delete',
                           targetUserId=user_id)
    return success(None, message='User deleted')


@bp.route('/posts/<int:post_id>/status', methods=['PUT'])
@login_required
@admin_required
def moderate_post(post_id):
    """Muda o status do post e avisa o autor"""
    status = parse_str(g.payload, 'status')
    if status not in POST_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(POST_STATUSES)}")

    post = get_or_404(Post, post_id, 'Post not found')
    post.status = status
    db.session.commit()
    ActivityService.record(current_user.id, 'post_management', postId=post.id, status=status)

    outbox.notify(post.posted_by_id, current_user.id, 'moderation', post_id=post.id,
                  title=post.title, status=status)
    return success(post.to_dict(), message='Post status updated')


@bp.route('/activity-logs', methods=['GET'])
@login_required
@admin_required
def activity_logs():
    """Trilha de auditoria, filtrável por userId e action"""
    action = g.params.get('action')
    if action and action not in ACTIVITY_ACTIONS:
        raise ValidationError(f"action must be one of: {', '.join(ACTIVITY_ACTIONS)}")
    query = ActivityService.query(parse_int(g.params, 'userId'), action)

    page, limit = get_page_args(g.params)
    logs, pagination = paginate(query, page, limit)
    return success({'logs': [log.to_dict() for log in logs], 'pagination': pagination})
