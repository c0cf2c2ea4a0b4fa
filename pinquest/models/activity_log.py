from datetime import datetime

from pinquest import db

ACTIVITY_ACTIONS = (
    'login',
    'login_failure',
    'password_change',
    'admin_panel_access',
    'user_management',
    'post_management',
    'report_management',
)


class ActivityLog(db.Model):
    """Trilha de auditoria de login, troca de senha e ações de admin"""
    __tablename__ = 'activity_logs'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    action = db.Column(db.String(30), nullable=False, index=True)
    ip = db.Column(db.String(45))
    user_agent = db.Column(db.String(255))
    # "metadata" é reservado no declarative do SQLAlchemy
    details = db.Column('metadata', db.JSON, default=dict)
    success = db.Column(db.Boolean, default=True, nullable=False)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'action': self.action,
            'ip': self.ip,
            'userAgent': self.user_agent,
            'metadata': self.details or {},
            'success': bool(self.success),
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }

    def __repr__(self):
        return f'<ActivityLog {self.action} de {self.user_id}>'
