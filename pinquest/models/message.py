from datetime import datetime

from pinquest import db

MAX_MESSAGE_LENGTH = 1000


def build_conversation_id(user_a, user_b):
    """Id determinístico da conversa: ids dos participantes ordenados"""
    first, second = sorted([int(user_a), int(user_b)])
    return f'conv_{first}_{second}'


class Message(db.Model):
    __tablename__ = 'messages'

    id = db.Column(db.Integer, primary_key=True)
    sender_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    recipient_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    conversation_id = db.Column(db.String(64), nullable=False, index=True)
    content = db.Column(db.String(MAX_MESSAGE_LENGTH), nullable=False)
    read = db.Column(db.Boolean, default=False, nullable=False)
    read_at = db.Column(db.DateTime)
    date = db.Column(db.DateTime, default=datetime.utcnow)

    sender = db.relationship('User', foreign_keys=[sender_id])
    recipient = db.relationship('User', foreign_keys=[recipient_id])

    __table_args__ = (db.Index('ix_messages_conversation_date', 'conversation_id', 'date'),)

    def mark_read(self):
        if not self.read:
            self.read = True
            self.read_at = datetime.utcnow()

    def to_dict(self):
        return {
            'id': self.id,
            'conversationId': self.conversation_id,
            'sender': self.sender.to_public_dict() if self.sender else self.sender_id,
            'recipient': self.recipient.to_public_dict() if self.recipient else self.recipient_id,
            'content': self.content,
            'read': bool(self.read),
            'readAt': self.read_at.isoformat() if self.read_at else None,
            'date': self.date.isoformat() if self.date else None,
        }

    def __repr__(self):
        return f'<Message {self.id} {self.conversation_id}>'
