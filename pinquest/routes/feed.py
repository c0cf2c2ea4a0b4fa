# pinquest/routes/feed.py
from flask import Blueprint, g
from flask_login import login_required, current_user

from pinquest import db
from pinquest.models import Post, PostLike, Follow
from pinquest.services.post_query_service import PostQueryService
from pinquest.utils.helpers import get_page_args, paginate
from pinquest.utils.responses import success

bp = Blueprint('feed', __name__, url_prefix='/api/v1/feed')


@bp.route('', methods=['GET'])
@login_required
def following_feed():
    """Posts de quem o usuário segue, mais recentes primeiro"""
    followed_ids = db.select(Follow.followed_id).where(Follow.follower_id == current_user.id)
    query = PostQueryService.base_query().filter(Post.posted_by_id.in_(followed_ids))
    posts, pagination = PostQueryService.search(g.params, query)
    return success({'posts': [post.to_dict() for post in posts], 'pagination': pagination})


@bp.route('/trending', methods=['GET'])
def trending():
    params = dict(g.params, sort='trending')
    posts, pagination = PostQueryService.search(params)
    return success({'posts': [post.to_dict() for post in posts], 'pagination': pagination})


@bp.route('/personal', methods=['GET'])
@login_required
def personal_feed():
    """Posts criados (qualquer status) e curtidos pelo usuário"""
    page, limit = get_page_args(g.params)
    created_query = Post.query.filter(Post.posted_by_id == current_user.id) \
        .order_by(Post.date_posted.desc(), Post.id.desc())
    created, pagination = paginate(created_query, page, limit)

    liked_query = PostQueryService.base_query() \
        .join(PostLike, PostLike.post_id == Post.id) \
        .filter(PostLike.user_id == current_user.id) \
        .order_by(PostLike.created_at.desc(), PostLike.id.desc())
    liked = liked_query.limit(limit).all()

    return success({
        'posts': {
            'created': [post.to_dict() for post in created],
            'liked': [post.to_dict() for post in liked],
        },
        'counts': {
            'totalCreated': pagination['total'],
            'totalLiked': liked_query.order_by(None).count(),
        },
        'pagination': pagination,
    })
