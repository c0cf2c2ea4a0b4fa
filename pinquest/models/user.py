from datetime import datetime

import bcrypt
from flask_login import UserMixin

from pinquest import db

ROLES = ('user', 'admin')

# Preferências conhecidas e seus valores padrão
DEFAULT_PREFERENCES = {
    'emailNotifications': True,
    'pushNotifications': True,
    'distanceUnit': 'km',
    'defaultRadius': 10,
}


class Follow(db.Model):
    __tablename__ = 'follows'

    id = db.Column(db.Integer, primary_key=True)
    follower_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    followed_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (db.UniqueConstraint('follower_id', 'followed_id', name='uq_follow'),)

    def __repr__(self):
        return f'<Follow {self.follower_id} -> {self.followed_id}>'


class Favorite(db.Model):
    __tablename__ = 'favorites'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    post_id = db.Column(db.Integer, db.ForeignKey('posts.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    post = db.relationship('Post')

    __table_args__ = (db.UniqueConstraint('user_id', 'post_id', name='uq_favorite'),)


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    password_hash = db.Column(db.String(128))
    google_id = db.Column(db.String(100), unique=True)
    firebase_uid = db.Column(db.String(128), unique=True)
    avatar = db.Column(db.String(500))
    bio = db.Column(db.Text)
    role = db.Column(db.String(20), default='user', nullable=False)
    preferences = db.Column(db.JSON, default=dict)

    # Status
    is_verified = db.Column(db.Boolean, default=False)
    is_banned = db.Column(db.Boolean, default=False)
    ban_reason = db.Column(db.String(255))

    # Reset de senha (hash do token + expiração)
    reset_password_token = db.Column(db.String(128), index=True)
    reset_password_expires = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    # Relacionamentos
    posts = db.relationship('Post', back_populates='author', lazy='dynamic')
    following = db.relationship('Follow', foreign_keys=[Follow.follower_id], lazy='dynamic')
    followers = db.relationship('Follow', foreign_keys=[Follow.followed_id], lazy='dynamic')
    favorites = db.relationship('Favorite', lazy='dynamic', order_by='Favorite.created_at.desc()')
    saved_locations = db.relationship('SavedLocation', lazy='dynamic',
                                      order_by='SavedLocation.id.desc()')
    # Reabrir um lugar recria a linha, então id maior = visto por último
    recent_locations = db.relationship('RecentLocation', lazy='dynamic',
                                       order_by='RecentLocation.id.desc()')

    def set_password(self, password):
        self.password_hash = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

    def check_password(self, password):
        if not self.password_hash or password is None:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))
        except ValueError:
            return False

    @property
    def is_admin(self):
        return self.role == 'admin'

    def update_last_login(self):
        self.last_login = datetime.utcnow()

    def is_following(self, user_id):
        return self.following.filter_by(followed_id=user_id).first() is not None

    def has_favorite(self, post_id):
        return self.favorites.filter_by(post_id=post_id).first() is not None

    def get_preferences(self):
        """Padrões + o que o usuário já alterou"""
        return {**DEFAULT_PREFERENCES, **(self.preferences or {})}

    def to_public_dict(self):
        """Campos denormalizados usados em posts, comentários e mensagens"""
        return {
            'id': self.id,
            'name': self.name,
            'avatar': self.avatar,
        }

    def to_dict(self, private=False):
        data = {
            'id': self.id,
            'name': self.name,
            'avatar': self.avatar,
            'bio': self.bio,
            'role': self.role,
            'isVerified': bool(self.is_verified),
            'followersCount': self.followers.count(),
            'followingCount': self.following.count(),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
        if private:
            data.update({
                'email': self.email,
                'isBanned': bool(self.is_banned),
                'favoritesCount': self.favorites.count(),
                'lastLogin': self.last_login.isoformat() if self.last_login else None,
            })
        return data

    def __repr__(self):
        return f'<User {self.email}>'
