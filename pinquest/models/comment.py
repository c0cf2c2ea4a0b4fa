from datetime import datetime

from pinquest import db


class CommentLike(db.Model):
    __tablename__ = 'comment_likes'

    id = db.Column(db.Integer, primary_key=True)
    comment_id = db.Column(db.Integer, db.ForeignKey('comments.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (db.UniqueConstraint('comment_id', 'user_id', name='uq_comment_like'),)


class Comment(db.Model):
    __tablename__ = 'comments'

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey('posts.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    # Respostas são comentários com parent
    parent_id = db.Column(db.Integer, db.ForeignKey('comments.id'), index=True)
    text = db.Column(db.Text, nullable=False)
    likes_count = db.Column(db.Integer, default=0, nullable=False)
    date = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime)

    # Relacionamentos
    post = db.relationship('Post', back_populates='comments')
    user = db.relationship('User')
    parent = db.relationship('Comment', remote_side=[id], back_populates='replies')
    replies = db.relationship('Comment', back_populates='parent', cascade='all, delete-orphan',
                              order_by='Comment.date')
    likes = db.relationship('CommentLike', lazy='dynamic', cascade='all, delete-orphan')

    def to_dict(self, include_replies=True):
        data = {
            'id': self.id,
            'postId': self.post_id,
            'parentId': self.parent_id,
            'text': self.text,
            'user': self.user.to_public_dict() if self.user else None,
            'likesCount': self.likes_count or 0,
            'likes': [like.user_id for like in self.likes],
            'date': self.date.isoformat() if self.date else None,
            'edited': self.updated_at is not None,
        }
        if include_replies:
            data['replies'] = [reply.to_dict(include_replies=False) for reply in self.replies]
        return data

    def __repr__(self):
        return f'<Comment {self.id} on post {self.post_id}>'
