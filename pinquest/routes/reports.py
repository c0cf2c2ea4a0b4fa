# pinquest/routes/reports.py
import logging
from datetime import datetime

from flask import Blueprint, g
from flask_login import login_required, current_user
from sqlalchemy.exc import IntegrityError

from pinquest import db
from pinquest.models import User, Post, Report, REPORT_REASONS, REPORT_STATUSES
from pinquest.models.report import MAX_REPORT_DESCRIPTION
from pinquest.services.activity_service import ActivityService
from pinquest.services.events import outbox
from pinquest.utils.auth import admin_required
from pinquest.utils.errors import ValidationError, ConflictError, NotFoundError, AuthorizationError
from pinquest.utils.helpers import get_or_404, get_page_args, paginate, parse_str
from pinquest.utils.responses import success

bp = Blueprint('reports', __name__, url_prefix='/api/v1/reports')
logger = logging.getLogger(__name__)


def _reports_page(query):
    page, limit = get_page_args(g.params)
    reports, pagination = paginate(query.order_by(Report.date_reported.desc(), Report.id.desc()),
                                   page, limit)
    return success({'reports': [report.to_dict() for report in reports], 'pagination': pagination})


@bp.route('', methods=['POST'])
@login_required
def create_report():
    payload = g.payload
    post_id = payload.get('postId')
    reason = parse_str(payload, 'reason')
    description = parse_str(payload, 'description') or ''

    if not post_id or not reason:
        raise ValidationError('Post ID and reason are required')
    if reason not in REPORT_REASONS:
        raise ValidationError(f"reason must be one of: {', '.join(REPORT_REASONS)}")
    if len(description) > MAX_REPORT_DESCRIPTION:
        raise ValidationError(f'Description cannot be longer than {MAX_REPORT_DESCRIPTION} characters')

    post = get_or_404(Post, post_id, 'Post not found')
    report = Report(reporter_id=current_user.id, post_id=post.id, reason=reason,
                    description=description)
    db.session.add(report)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError('You have already reported this post')
    logger.info(f"Denúncia {report.id} ({reason}) no post {post.id}")

    # Todos os admins recebem a notificação
    for admin in User.query.filter_by(role='admin').all():
        outbox.notify(admin.id, current_user.id, 'report', post_id=post.id,
                      reason=reason, title=post.title)

    return success(report.to_dict(), 201)


@bp.route('/my-reports', methods=['GET'])
@login_required
def my_reports():
    return _reports_page(Report.query.filter_by(reporter_id=current_user.id))


@bp.route('', methods=['GET'])
@login_required
@admin_required
def list_reports():
    query = Report.query
    status = g.params.get('status')
    reason = g.params.get('reason')
    if status:
        query = query.filter_by(status=status)
    if reason:
        query = query.filter_by(reason=reason)
    return _reports_page(query)


@bp.route('/<int:report_id>', methods=['GET'])
@login_required
def get_report(report_id):
    report = db.session.get(Report, report_id)
    if report is None:
        raise NotFoundError('Report not found')
    if report.reporter_id != current_user.id and not current_user.is_admin:
        raise AuthorizationError('Not authorized to view this report')
    return success(report.to_dict())


@bp.route('/<int:report_id>', methods=['PUT'])
@login_required
@admin_required
def update_report(report_id):
    payload = g.payload
    status = parse_str(payload, 'status')
    if status not in REPORT_STATUSES:
        raise ValidationError(f"Valid status is required ({', '.join(REPORT_STATUSES)})")

    report = db.session.get(Report, report_id)
    if report is None:
        raise NotFoundError('Report not found')

    report.status = status
    report.reviewed_by_id = current_user.id
    report.reviewed_at = datetime.utcnow()
    if 'resolutionNote' in payload:
        report.resolution_note = parse_str(payload, 'resolutionNote')
    db.session.commit()
    ActivityService.record(current_user.id, 'report_management', reportId=report.id, status=status)

    outbox.notify(report.reporter_id, current_user.id, 'post_update', post_id=report.post_id,
                  title=report.post.title if report.post else 'Untitled', status=status)
    return success(report.to_dict(), message='Report updated')
