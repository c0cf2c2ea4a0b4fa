"""
Serviço de contas: cadastro, login, reset de senha, seguidores, favoritos
e remoção em cascata.
"""
import logging
import re
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError

from pinquest import db
from pinquest.models import (User, Follow, Favorite, PostLike, PostRating, Comment,
                             CommentLike, Notification, Message, Report, SavedLocation,
                             RecentLocation, ActivityLog, DEFAULT_PREFERENCES)
from pinquest.services.activity_service import ActivityService
from pinquest.utils.errors import (ValidationError, ConflictError, AuthenticationError,
                                   ForbiddenError, NotFoundError)
from pinquest.utils.security import generate_secure_token, hash_token

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MIN_PASSWORD_LENGTH = 6


class AccountService:
    """Operações sobre usuários"""

    @staticmethod
    def validate_password(password):
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters long')

    @staticmethod
    def register(name, email, password):
        if not name or not email or not password:
            raise ValidationError('Name, email and password are required')
        if not all(isinstance(value, str) for value in (name, email, password)):
            raise ValidationError('Name, email and password must be strings')
        email = email.lower()
        if not EMAIL_RE.match(email):
            raise ValidationError('Please provide a valid email')
        AccountService.validate_password(password)
        if User.query.filter_by(email=email).first():
            raise ConflictError('User already exists with this email')

        user = User(name=name, email=email)
        user.set_password(password)
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError('User already exists with this email')
        logger.info(f"Novo usuário cadastrado: {user.id}")
        return user

    @staticmethod
    def login(email, password):
        if not email or not password:
            raise ValidationError('Email and password are required')
        if not isinstance(email, str) or not isinstance(password, str):
            raise ValidationError('Email and password must be strings')
        user = User.query.filter_by(email=email.lower()).first()
        if not user or not user.check_password(password):
            if user:
                ActivityService.record(user.id, 'login_failure', success=False)
            raise AuthenticationError('Invalid email or password')
        if user.is_banned:
            raise ForbiddenError('Your account has been banned')
        user.update_last_login()
        db.session.commit()
        ActivityService.record(user.id, 'login')
        return user

    @staticmethod
    def provision_firebase_user(uid, email=None, name=None, avatar=None, verified=False):
        """Usuário do Firebase: busca por uid, depois por email, senão cria"""
        user = User.query.filter_by(firebase_uid=uid).first()
        if user:
            return user

        if email:
            user = User.query.filter_by(email=email.lower()).first()
            if user:
                user.firebase_uid = uid
                db.session.commit()
                return user

        if not email:
            logger.info(f"Token Firebase sem email para uid {uid}")
            return None

        user = User(
            email=email.lower(),
            name=name or email.split('@')[0],
            avatar=avatar,
            firebase_uid=uid,
            is_verified=bool(verified),
        )
        db.session.add(user)
        db.session.commit()
        logger.info(f"Usuário {user.id} criado no primeiro login Firebase")
        return user

    @staticmethod
    def change_password(user, current_password, new_password):
        if user.password_hash and not user.check_password(current_password):
            raise AuthenticationError('Current password is incorrect')
        AccountService.validate_password(new_password)
        user.set_password(new_password)
        db.session.commit()
        ActivityService.record(user.id, 'password_change')

    @staticmethod
    def update_preferences(user, preferences):
        """Mescla as preferências enviadas com as atuais; só chaves conhecidas"""
        if not isinstance(preferences, dict):
            raise ValidationError('preferences must be an object')
        for key, value in preferences.items():
            if key not in DEFAULT_PREFERENCES:
                raise ValidationError(f'Unknown preference: {key}')
            AccountService._validate_preference(key, value)

        # Coluna JSON: atribuir um dict novo para o SQLAlchemy detectar a mudança
        user.preferences = {**(user.preferences or {}), **preferences}
        db.session.commit()
        return user.get_preferences()

    @staticmethod
    def _validate_preference(key, value):
        if key in ('emailNotifications', 'pushNotifications'):
            valid = isinstance(value, bool)
        elif key == 'distanceUnit':
            valid = value in ('km', 'mi')
        else:
            valid = isinstance(value, (int, float)) and not isinstance(value, bool) and 0 < value <= 500
        if not valid:
            raise ValidationError(f'Invalid value for preference {key}')

    # Reset de senha

    @staticmethod
    def create_reset_token(user):
        """Gera o token em claro (vai por email) e guarda só o hash"""
        token = generate_secure_token()
        user.reset_password_token = hash_token(token)
        user.reset_password_expires = datetime.utcnow() + timedelta(
            seconds=current_app.config['RESET_TOKEN_EXPIRES_IN'])
        db.session.commit()
        return token

    @staticmethod
    def reset_password(token, new_password):
        user = User.query.filter(
            User.reset_password_token == hash_token(token or ''),
            User.reset_password_expires > datetime.utcnow(),
        ).first()
        if not user:
            raise ValidationError('Password reset token is invalid or has expired')
        AccountService.validate_password(new_password)
        user.set_password(new_password)
        user.reset_password_token = None
        user.reset_password_expires = None
        db.session.commit()
        ActivityService.record(user.id, 'password_change', via='reset')
        return user

    # Seguidores

    @staticmethod
    def follow(follower, target):
        if follower.id == target.id:
            raise ValidationError('You cannot follow yourself')
        try:
            db.session.add(Follow(follower_id=follower.id, followed_id=target.id))
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError('You are already following this user')

    @staticmethod
    def unfollow(follower, target):
        deleted = Follow.query.filter_by(follower_id=follower.id, followed_id=target.id) \
            .delete(synchronize_session=False)
        if not deleted:
            db.session.rollback()
            raise ConflictError('You are not following this user')
        db.session.commit()

    # Favoritos

    @staticmethod
    def add_favorite(user, post):
        try:
            db.session.add(Favorite(user_id=user.id, post_id=post.id))
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError('Post is already in favorites')

    @staticmethod
    def remove_favorite(user, post_id):
        deleted = Favorite.query.filter_by(user_id=user.id, post_id=post_id) \
            .delete(synchronize_session=False)
        if not deleted:
            db.session.rollback()
            raise NotFoundError('Post is not in favorites')
        db.session.commit()

    # Remoção (admin)

    @staticmethod
    def delete_user(user):
        """Remove o usuário, seus posts e tudo que referencia a conta"""
        user_id = user.id
        from pinquest.services.post_repository import PostRepository

        for post in user.posts.all():
            PostRepository.delete_post(post, commit=False)

        # Likes/avaliações em posts de terceiros: recalcular contadores
        liked_post_ids = [row.post_id for row in PostLike.query.filter_by(user_id=user.id).all()]
        rated_post_ids = [row.post_id for row in PostRating.query.filter_by(user_id=user.id).all()]
        PostLike.query.filter_by(user_id=user.id).delete(synchronize_session=False)
        PostRating.query.filter_by(user_id=user.id).delete(synchronize_session=False)
        CommentLike.query.filter_by(user_id=user.id).delete(synchronize_session=False)

        for comment in Comment.query.filter_by(user_id=user.id).all():
            ids = [comment.id] + [reply.id for reply in comment.replies]
            CommentLike.query.filter(CommentLike.comment_id.in_(ids)).delete(synchronize_session=False)
            Notification.query.filter(Notification.comment_id.in_(ids)) \
                .update({'comment_id': None}, synchronize_session=False)
            db.session.delete(comment)

        Follow.query.filter((Follow.follower_id == user.id) | (Follow.followed_id == user.id)) \
            .delete(synchronize_session=False)
        Favorite.query.filter_by(user_id=user.id).delete(synchronize_session=False)
        SavedLocation.query.filter_by(user_id=user.id).delete(synchronize_session=False)
        RecentLocation.query.filter_by(user_id=user.id).delete(synchronize_session=False)
        ActivityLog.query.filter_by(user_id=user.id).delete(synchronize_session=False)
        Notification.query.filter((Notification.recipient_id == user.id) |
                                  (Notification.sender_id == user.id)) \
            .delete(synchronize_session=False)
        Message.query.filter((Message.sender_id == user.id) | (Message.recipient_id == user.id)) \
            .delete(synchronize_session=False)
        Report.query.filter_by(reporter_id=user.id).delete(synchronize_session=False)
        Report.query.filter_by(reviewed_by_id=user.id) \
            .update({'reviewed_by_id': None}, synchronize_session=False)

        db.session.delete(user)
        db.session.flush()

        from pinquest.services.post_repository import refresh_post_aggregates
        for post_id in set(liked_post_ids + rated_post_ids):
            refresh_post_aggregates(post_id)
        db.session.commit()
        logger.info(f"Usuário {user_id} removido com posts e referências")
