# pinquest/models/report.py
from datetime import datetime

from pinquest import db

REPORT_REASONS = (
    'spam',
    'inappropriate_content',
    'harassment',
    'hate_speech',
    'misinformation',
    'copyright_violation',
    'other',
)
REPORT_STATUSES = ('pending', 'reviewed', 'resolved', 'dismissed')
MAX_REPORT_DESCRIPTION = 500


class Report(db.Model):
    __tablename__ = 'reports'

    id = db.Column(db.Integer, primary_key=True)
    reporter_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    post_id = db.Column(db.Integer, db.ForeignKey('posts.id'), nullable=False, index=True)
    reason = db.Column(db.String(50), nullable=False)
    description = db.Column(db.String(MAX_REPORT_DESCRIPTION), default='')
    status = db.Column(db.String(20), default='pending', nullable=False, index=True)
    reviewed_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    reviewed_at = db.Column(db.DateTime)
    resolution_note = db.Column(db.Text)
    date_reported = db.Column(db.DateTime, default=datetime.utcnow)

    reporter = db.relationship('User', foreign_keys=[reporter_id])
    reviewed_by = db.relationship('User', foreign_keys=[reviewed_by_id])
    post = db.relationship('Post')

    # Uma denúncia por (usuário, post)
    __table_args__ = (db.UniqueConstraint('reporter_id', 'post_id', name='uq_report_reporter_post'),)

    def to_dict(self):
        return {
            'id': self.id,
            'reporter': self.reporter.to_public_dict() if self.reporter else None,
            'post': {
                'id': self.post.id,
                'title': self.post.title,
                'description': self.post.description,
                'postedBy': self.post.posted_by_id,
            } if self.post else None,
            'reason': self.reason,
            'description': self.description,
            'status': self.status,
            'reviewedBy': self.reviewed_by.to_public_dict() if self.reviewed_by else None,
            'reviewedAt': self.reviewed_at.isoformat() if self.reviewed_at else None,
            'resolutionNote': self.resolution_note,
            'dateReported': self.date_reported.isoformat() if self.date_reported else None,
        }

    def __repr__(self):
        return f'<Report {self.reason} - {self.status}>'
