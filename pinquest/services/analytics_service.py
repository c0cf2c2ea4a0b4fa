# pinquest/services/analytics_service.py
"""
Estatísticas de engajamento: plataforma, usuário, post, ranking e linha do tempo
"""
from datetime import datetime, timedelta

from sqlalchemy import func

from pinquest import db
from pinquest.models import User, Post, PostLike, Comment, Message, Report


def _since(days):
    return datetime.utcnow() - timedelta(days=days)


def _iso(value):
    return value.isoformat() if value else None


def _comment_counts():
    """Subquery post_id -> número de comentários (inclui respostas)"""
    return db.select(Comment.post_id, func.count(Comment.id).label('comments')) \
        .group_by(Comment.post_id).subquery()


class AnalyticsService:
    """Consultas agregadas; nada aqui escreve no banco"""

    @staticmethod
    def platform_stats():
        return {
            'totalUsers': User.query.count(),
            'totalPosts': Post.query.count(),
            'totalMessages': Message.query.count(),
            'totalReports': Report.query.count(),
            'date': _iso(datetime.utcnow()),
        }

    @staticmethod
    def user_summary(user):
        recently_liked = Post.query.join(PostLike, PostLike.post_id == Post.id) \
            .filter(PostLike.user_id == user.id) \
            .order_by(PostLike.created_at.desc(), PostLike.id.desc()).limit(10).all()
        return {
            'postsCreated': user.posts.count(),
            'commentsMade': Comment.query.filter_by(user_id=user.id).count(),
            'postsLiked': PostLike.query.filter_by(user_id=user.id).count(),
            'recentlyLiked': [
                {'id': post.id, 'title': post.title, 'likesCount': post.likes_count or 0}
                for post in recently_liked
            ],
            'date': _iso(datetime.utcnow()),
        }

    @staticmethod
    def post_summary(post):
        likes = post.likes_count or 0
        comments = post.comments.count()
        return {
            'postId': post.id,
            'title': post.title,
            'likesCount': likes,
            'commentsCount': comments,
            'totalEngagement': likes + comments,
            'averageRating': round(post.average_rating or 0, 2),
            'totalRatings': post.total_ratings or 0,
            'datePosted': _iso(post.date_posted),
            'date': _iso(datetime.utcnow()),
        }

    @staticmethod
    def top_posts(days=30, limit=10):
        """Posts publicados nos últimos `days` dias, por likes + comentários"""
        counts = _comment_counts()
        comments = func.coalesce(counts.c.comments, 0)
        rows = db.session.execute(
            db.select(Post, comments.label('comments'))
            .outerjoin(counts, counts.c.post_id == Post.id)
            .where(Post.status == 'published', Post.date_posted >= _since(days))
            .order_by((Post.likes_count + comments).desc(), Post.date_posted.desc(), Post.id.desc())
            .limit(limit)
        ).all()
        return [{
            'id': post.id,
            'title': post.title,
            'author': post.author.name if post.author else None,
            'likesCount': post.likes_count or 0,
            'commentsCount': comment_count,
            'engagement': (post.likes_count or 0) + comment_count,
            'datePosted': _iso(post.date_posted),
        } for post, comment_count in rows]

    @staticmethod
    def user_engagement(user, days=7):
        """Engajamento diário (UTC) dos posts que o usuário criou no período"""
        counts = _comment_counts()
        rows = db.session.execute(
            db.select(Post, func.coalesce(counts.c.comments, 0))
            .outerjoin(counts, counts.c.post_id == Post.id)
            .where(Post.posted_by_id == user.id, Post.date_posted >= _since(days))
        ).all()

        daily = {}
        for post, comment_count in rows:
            day = post.date_posted.date().isoformat()
            stats = daily.setdefault(day, {'date': day, 'posts': 0, 'likes': 0,
                                           'comments': 0, 'totalEngagement': 0})
            likes = post.likes_count or 0
            stats['posts'] += 1
            stats['likes'] += likes
            stats['comments'] += comment_count
            stats['totalEngagement'] += likes + comment_count
        return [daily[day] for day in sorted(daily)]

    @staticmethod
    def activity_timeline(user, days=30):
        """Posts criados, comentários e likes do usuário, mais recentes primeiro"""
        since = _since(days)
        activities = []

        for post in user.posts.filter(Post.date_posted >= since).all():
            activities.append({'type': 'post', 'postId': post.id, 'title': post.title,
                               'date': post.date_posted, 'action': 'created post'})

        comment_rows = db.session.execute(
            db.select(Comment.date, Post.id, Post.title)
            .join(Post, Post.id == Comment.post_id)
            .where(Comment.user_id == user.id, Comment.date >= since)
        ).all()
        for date, post_id, title in comment_rows:
            activities.append({'type': 'comment', 'postId': post_id, 'title': title,
                               'date': date, 'action': 'commented on post'})

        like_rows = db.session.execute(
            db.select(PostLike.created_at, Post.id, Post.title)
            .join(Post, Post.id == PostLike.post_id)
            .where(PostLike.user_id == user.id, PostLike.created_at >= since)
        ).all()
        for date, post_id, title in like_rows:
            activities.append({'type': 'like', 'postId': post_id, 'title': title,
                               'date': date, 'action': 'liked post'})

        activities.sort(key=lambda item: item['date'], reverse=True)
        for item in activities:
            item['date'] = _iso(item['date'])
        return activities
