# pinquest/routes/notifications.py
from flask import Blueprint, g
from flask_login import login_required, current_user

from pinquest import db
from pinquest.models import Notification
from pinquest.services.notification_service import NotificationService
from pinquest.utils.errors import ValidationError, NotFoundError
from pinquest.utils.helpers import get_page_args, paginate
from pinquest.utils.responses import success

bp = Blueprint('notifications', __name__, url_prefix='/api/v1/notifications')

READ_FILTERS = ('all', 'read', 'unread')


def _get_own_notification(notification_id):
    notification = db.session.get(Notification, notification_id)
    if notification is None or notification.recipient_id != current_user.id:
        raise NotFoundError('Notification not found')
    return notification


@bp.route('', methods=['GET'])
@login_required
def list_notifications():
    read_filter = g.params.get('read') or 'all'
    if read_filter not in READ_FILTERS:
        raise ValidationError(f"read must be one of: {', '.join(READ_FILTERS)}")

    query = Notification.query.filter_by(recipient_id=current_user.id)
    if read_filter != 'all':
        query = query.filter_by(read=read_filter == 'read')
    query = query.order_by(Notification.date.desc(), Notification.id.desc())

    page, limit = get_page_args(g.params)
    notifications, pagination = paginate(query, page, limit)
    return success({
        'notifications': [notification.to_dict() for notification in notifications],
        'unreadCount': NotificationService.unread_count(current_user.id),
        'pagination': pagination,
    })


@bp.route('/unread-count', methods=['GET'])
@login_required
def unread_count():
    return success({'count': NotificationService.unread_count(current_user.id)})


@bp.route('/read-all', methods=['PUT'])
@login_required
def mark_all_read():
    updated = Notification.query.filter_by(recipient_id=current_user.id, read=False) \
        .update({'read': True}, synchronize_session=False)
    db.session.commit()
    return success({'updated': updated}, message='All notifications marked as read')


@bp.route('/<int:notification_id>/read', methods=['PUT'])
@login_required
def mark_read(notification_id):
    notification = _get_own_notification(notification_id)
    notification.read = True
    db.session.commit()
    return success(notification.to_dict())


@bp.route('/<int:notification_id>', methods=['DELETE'])
@login_required
def delete_notification(notification_id):
    notification = _get_own_notification(notification_id)
    db.session.delete(notification)
    db.session.commit()
    return success(None, message='Notification deleted')
