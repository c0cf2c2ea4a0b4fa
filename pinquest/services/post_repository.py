"""
Operações atômicas sobre o agregado Post.

Likes e avaliações são linhas próprias com restrição de unicidade; os contadores
em cache são recalculados por um único UPDATE com subquery, sem ler-modificar-
salvar o documento inteiro.
"""
import logging
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from pinquest import db
from pinquest.models import (Post, PostLike, PostRating, Comment, CommentLike,
                             Favorite, Notification, Report)
from pinquest.utils.errors import ConflictError, ValidationError

logger = logging.getLogger(__name__)


class PostRepository:
    """Repositório de posts, likes, comentários e avaliações"""

    @staticmethod
    def _refresh_likes_count(post_id):
        count = select(func.count(PostLike.id)).where(PostLike.post_id == post_id).scalar_subquery()
        db.session.execute(
            update(Post).where(Post.id == post_id).values(likes_count=count)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def _refresh_ratings(post_id):
        average = select(func.coalesce(func.avg(PostRating.value), 0)) \
            .where(PostRating.post_id == post_id).scalar_subquery()
        total = select(func.count(PostRating.id)).where(PostRating.post_id == post_id).scalar_subquery()
        db.session.execute(
            update(Post).where(Post.id == post_id)
            .values(average_rating=average, total_ratings=total)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def _likes_count(post_id):
        return db.session.scalar(select(Post.likes_count).where(Post.id == post_id)) or 0

    @staticmethod
    def add_like(post_id, user_id):
        """
        Registra o like de user_id em post_id

        Returns:
            int: likes_count atualizado

        Raises:
            ConflictError: usuário já curtiu o post
        """
        try:
            db.session.add(PostLike(post_id=post_id, user_id=user_id))
            db.session.flush()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError('You have already liked this post')

        PostRepository._refresh_likes_count(post_id)
        db.session.commit()
        return PostRepository._likes_count(post_id)

    @staticmethod
    def remove_like(post_id, user_id):
        """Remove o like; ConflictError se o usuário não tinha curtido"""
        result = db.session.execute(
            PostLike.__table__.delete().where(
                PostLike.post_id == post_id,
                PostLike.user_id == user_id,
            )
        )
        if result.rowcount == 0:
            db.session.rollback()
            raise ConflictError('You have not liked this post yet')

        PostRepository._refresh_likes_count(post_id)
        db.session.commit()
        return PostRepository._likes_count(post_id)

    @staticmethod
    def upsert_rating(post_id, user_id, value):
        """Cria ou atualiza a avaliação (1..5) e recalcula média/total"""
        if not isinstance(value, int) or isinstance(value, bool) or not 1 <= value <= 5:
            raise ValidationError('Rating must be an integer between 1 and 5')

        rating = PostRating.query.filter_by(post_id=post_id, user_id=user_id).first()
        if rating:
            rating.value = value
        else:
            db.session.add(PostRating(post_id=post_id, user_id=user_id, value=value))
        db.session.flush()

        PostRepository._refresh_ratings(post_id)
        db.session.commit()
        return db.session.get(Post, post_id)

    # Comentários

    @staticmethod
    def add_comment(post, user_id, text, parent=None):
        if not text:
            raise ValidationError('Comment text is required')
        comment = Comment(post_id=post.id, user_id=user_id, text=text,
                          parent_id=parent.id if parent else None)
        db.session.add(comment)
        db.session.commit()
        return comment

    @staticmethod
    def update_comment(comment, text):
        if not text:
            raise ValidationError('Comment text is required')
        comment.text = text
        comment.updated_at = datetime.utcnow()
        db.session.commit()
        return comment

    @staticmethod
    def delete_comment(comment):
        ids = [comment.id] + [reply.id for reply in comment.replies]
        CommentLike.query.filter(CommentLike.comment_id.in_(ids)).delete(synchronize_session=False)
        Notification.query.filter(Notification.comment_id.in_(ids)) \
            .update({'comment_id': None}, synchronize_session=False)
        db.session.delete(comment)
        db.session.commit()

    @staticmethod
    def _refresh_comment_likes(comment_id):
        count = select(func.count(CommentLike.id)) \
            .where(CommentLike.comment_id == comment_id).scalar_subquery()
        db.session.execute(
            update(Comment).where(Comment.id == comment_id).values(likes_count=count)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def add_comment_like(comment_id, user_id):
        try:
            db.session.add(CommentLike(comment_id=comment_id, user_id=user_id))
            db.session.flush()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError('You have already liked this comment')
        PostRepository._refresh_comment_likes(comment_id)
        db.session.commit()
        return db.session.scalar(select(Comment.likes_count).where(Comment.id == comment_id))

    @staticmethod
    def remove_comment_like(comment_id, user_id):
        result = db.session.execute(
            CommentLike.__table__.delete().where(
                CommentLike.comment_id == comment_id,
                CommentLike.user_id == user_id,
            )
        )
        if result.rowcount == 0:
            db.session.rollback()
            raise ConflictError('You have not liked this comment yet')
        PostRepository._refresh_comment_likes(comment_id)
        db.session.commit()
        return db.session.scalar(select(Comment.likes_count).where(Comment.id == comment_id))

    # Remoção

    @staticmethod
    def delete_post(post, commit=True):
        """Remove o post e tudo que aponta para ele"""
        post_id = post.id
        comment_ids = [c.id for c in Comment.query.filter_by(post_id=post.id).all()]
        if comment_ids:
            CommentLike.query.filter(CommentLike.comment_id.in_(comment_ids)) \
                .delete(synchronize_session=False)
        Favorite.query.filter_by(post_id=post.id).delete(synchronize_session=False)
        Report.query.filter_by(post_id=post.id).delete(synchronize_session=False)
        Notification.query.filter_by(post_id=post.id) \
            .update({'post_id': None, 'comment_id': None}, synchronize_session=False)
        # Respostas primeiro, depois comentários raiz
        Comment.query.filter(Comment.post_id == post.id, Comment.parent_id.isnot(None)) \
            .delete(synchronize_session=False)
        Comment.query.filter_by(post_id=post.id).delete(synchronize_session=False)
        db.session.delete(post)
        if commit:
            db.session.commit()
        logger.info(f"Post {post_id} removido")


def refresh_post_aggregates(post_id):
    """Recalcula likes_count, average_rating e total_ratings do post"""
    PostRepository._refresh_likes_count(post_id)
    PostRepository._refresh_ratings(post_id)
