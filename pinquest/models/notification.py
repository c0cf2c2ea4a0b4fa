from datetime import datetime

from pinquest import db

NOTIFICATION_TYPES = (
    'like',
    'comment',
    'follow',
    'mention',
    'reply',
    'post_update',
    'report',
    'new_user',
    'moderation',
    'system_alert',
    'admin_notification',
    'message',
)


class Notification(db.Model):
    __tablename__ = 'notifications'

    id = db.Column(db.Integer, primary_key=True)
    recipient_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    sender_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    type = db.Column(db.String(30), nullable=False)
    post_id = db.Column(db.Integer, db.ForeignKey('posts.id'))
    comment_id = db.Column(db.Integer, db.ForeignKey('comments.id'))
    message = db.Column(db.String(500), nullable=False)
    read = db.Column(db.Boolean, default=False, nullable=False)
    date = db.Column(db.DateTime, default=datetime.utcnow)

    sender = db.relationship('User', foreign_keys=[sender_id])
    post = db.relationship('Post')

    __table_args__ = (
        db.Index('ix_notifications_recipient_date', 'recipient_id', 'date'),
        db.Index('ix_notifications_recipient_read', 'recipient_id', 'read'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'recipient': self.recipient_id,
            'sender': self.sender.to_public_dict() if self.sender else None,
            'type': self.type,
            'post': {'id': self.post.id, 'title': self.post.title} if self.post else None,
            'comment': self.comment_id,
            'message': self.message,
            'read': bool(self.read),
            'date': self.date.isoformat() if self.date else None,
        }

    def __repr__(self):
        return f'<Notification {self.id} type {self.type}>'
