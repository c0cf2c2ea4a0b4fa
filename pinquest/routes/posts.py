# pinquest/routes/posts.py
import logging

from flask import Blueprint, g
from flask_login import login_required, current_user

from pinquest import db
from pinquest.models import Post, Comment
from pinquest.services.events import outbox
from pinquest.services.post_query_service import PostQueryService
from pinquest.services.post_repository import PostRepository
from pinquest.utils.errors import ValidationError, AuthorizationError, NotFoundError
from pinquest.utils.geo import validate_coordinates
from pinquest.utils.helpers import get_or_404, parse_float, parse_str
from pinquest.utils.responses import success

bp = Blueprint('posts', __name__, url_prefix='/api/v1/posts')
logger = logging.getLogger(__name__)

MAX_IMAGES = 10
EDITABLE_FIELDS = ('title', 'description', 'category')


def _viewer():
    return current_user if current_user.is_authenticated else None


def _get_visible_post(post_id):
    """Post publicado, ou qualquer status para dono/admin"""
    post = get_or_404(Post, post_id, 'Post not found')
    if post.status != 'published':
        viewer = _viewer()
        if not (post.is_owned_by(viewer) or (viewer and viewer.is_admin)):
            raise NotFoundError('Post not found')
    return post


def _get_comment(post, comment_id):
    comment = get_or_404(Comment, comment_id, 'Comment not found')
    if comment.post_id != post.id:
        raise NotFoundError('Comment not found')
    return comment


def _read_location(payload):
    """Aceita latitude/longitude no topo ou em location{}"""
    location = payload.get('location') if isinstance(payload.get('location'), dict) else payload
    latitude = parse_float(location, 'latitude')
    longitude = parse_float(location, 'longitude')
    if not validate_coordinates(latitude, longitude):
        raise ValidationError('Invalid coordinates: latitude must be within [-90, 90] '
                              'and longitude within [-180, 180]')
    return latitude, longitude


def _read_images(payload):
    images = payload.get('images')
    if images is None:
        images = [payload['image']] if payload.get('image') else []
    if not isinstance(images, list):
        raise ValidationError('images must be a list')
    if len(images) > MAX_IMAGES:
        raise ValidationError(f'A post can have at most {MAX_IMAGES} images')

    normalized = []
    for image in images:
        if isinstance(image, str):
            image = {'url': image}
        if not isinstance(image, dict) or not image.get('url') or not isinstance(image['url'], str):
            raise ValidationError('Each image needs a url')
        normalized.append({'url': image['url'], 'public_id': image.get('public_id') or image.get('publicId')})
    return normalized


# Listagem e busca

@bp.route('', methods=['GET'])
@bp.route('/search', methods=['GET'])
def list_posts():
    """Lista/busca posts publicados (q, category, page, limit, sort)"""
    posts, pagination = PostQueryService.search(g.params)
    return success({
        'posts': [post.to_dict() for post in posts],
        'pagination': pagination,
    })


@bp.route('/nearby', methods=['GET'])
def nearby_posts():
    results, meta = PostQueryService.nearby(g.params)
    posts = []
    for post, distance in results:
        data = post.to_dict()
        data['distance'] = distance
        posts.append(data)
    return success({'posts': posts, **meta})


@bp.route('/within', methods=['GET'])
def posts_within_area():
    posts = PostQueryService.within(g.params)
    return success({'posts': [post.to_dict() for post in posts], 'count': len(posts)})


@bp.route('/<int:post_id>/distance', methods=['GET'])
def post_distance(post_id):
    post = _get_visible_post(post_id)
    distance = PostQueryService.distance_to(post, g.params)
    return success({'postId': post.id, 'distance': distance, 'unit': 'km'})


# CRUD

@bp.route('', methods=['POST'])
@login_required
def create_post():
    payload = g.payload
    title = parse_str(payload, 'title')
    description = parse_str(payload, 'description')
    if not title:
        raise ValidationError('Title input is required')
    if not description:
        raise ValidationError('Description input is required')

    latitude, longitude = _read_location(payload)
    post = Post(
        title=title,
        description=description,
        category=parse_str(payload, 'category') or 'general',
        latitude=latitude,
        longitude=longitude,
        posted_by_id=current_user.id,
    )
    post.set_images(_read_images(payload))
    db.session.add(post)
    db.session.commit()
    logger.info(f"Post {post.id} criado por {current_user.id}")

    data = post.to_dict()
    outbox.to_global('newPost', {'post': data, 'message': f'New post: {post.title}'})
    return success(data, 201)


@bp.route('/<int:post_id>', methods=['GET'])
def get_post(post_id):
    post = _get_visible_post(post_id)
    return success(post.to_dict(include_comments=True))


@bp.route('/<int:post_id>', methods=['PATCH', 'PUT'])
@login_required
def update_post(post_id):
    post = get_or_404(Post, post_id, 'Post not found')
    if not post.is_owned_by(current_user):
        raise AuthorizationError('Not authorized to update this post')

    payload = g.payload
    for field in EDITABLE_FIELDS:
        if field in payload:
            value = parse_str(payload, field)
            if not value and field != 'category':
                raise ValidationError(f'{field} cannot be empty')
            setattr(post, field, value or 'general')

    if 'location' in payload or 'latitude' in payload or 'longitude' in payload:
        post.latitude, post.longitude = _read_location(payload)
    if 'images' in payload or 'image' in payload:
        post.set_images(_read_images(payload))

    db.session.commit()
    return success(post.to_dict())


@bp.route('/<int:post_id>', methods=['DELETE'])
@login_required
def delete_post(post_id):
    post = get_or_404(Post, post_id, 'Post not found')
    if not (post.is_owned_by(current_user) or current_user.is_admin):
        raise AuthorizationError('Not authorized to delete this post')

    PostRepository.delete_post(post)
    outbox.to_global('postDeleted', {'postId': post_id})
    return success(None, message='Post deleted')


# Avaliações

@bp.route('/<int:post_id>/ratings', methods=['POST'])
@login_required
def rate_post(post_id):
    post = _get_visible_post(post_id)
    value = g.payload.get('rating')
    # 4.7 ou "4.7" não viram 4
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError('Rating must be an integer between 1 and 5')
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationError('Rating must be an integer between 1 and 5')

    post = PostRepository.upsert_rating(post.id, current_user.id, value)
    return success({
        'postId': post.id,
        'rating': value,
        'averageRating': round(post.average_rating or 0, 2),
        'totalRatings': post.total_ratings,
    })


# Likes

@bp.route('/<int:post_id>/like', methods=['PUT'])
@login_required
def like_post(post_id):
    post = _get_visible_post(post_id)
    likes_count = PostRepository.add_like(post.id, current_user.id)

    payload = {'postId': post.id, 'userId': current_user.id, 'likesCount': likes_count}
    outbox.to_post(post.id, 'postLiked', payload)
    if post.posted_by_id != current_user.id:
        outbox.to_user(post.posted_by_id, 'postLikedByUser', {
            **payload,
            'message': f'{current_user.name} liked your post: "{post.title}"',
        })
    outbox.notify(post.posted_by_id, current_user.id, 'like', post_id=post.id,
                  sender=current_user.name, title=post.title)
    return success(payload, message='Post liked')


@bp.route('/<int:post_id>/unlike', methods=['PUT'])
@login_required
def unlike_post(post_id):
    post = _get_visible_post(post_id)
    likes_count = PostRepository.remove_like(post.id, current_user.id)

    payload = {'postId': post.id, 'userId': current_user.id, 'likesCount': likes_count}
    outbox.to_post(post.id, 'postUnliked', payload)
    if post.posted_by_id != current_user.id:
        outbox.to_user(post.posted_by_id, 'postUnliked', payload)
    return success(payload, message='Post unliked')


# Comentários

@bp.route('/<int:post_id>/comments', methods=['GET'])
def get_comments(post_id):
    post = _get_visible_post(post_id)
    comments = post.comments.filter_by(parent_id=None).all()
    return success([comment.to_dict() for comment in comments])


@bp.route('/<int:post_id>/comments', methods=['POST'])
@login_required
def add_comment(post_id):
    post = _get_visible_post(post_id)
    comment = PostRepository.add_comment(post, current_user.id, parse_str(g.payload, 'text'))

    data = comment.to_dict()
    outbox.to_post(post.id, 'newComment', {'postId': post.id, 'comment': data})
    outbox.notify(post.posted_by_id, current_user.id, 'comment', post_id=post.id,
                  comment_id=comment.id, sender=current_user.name, title=post.title)
    return success(data, 201)


@bp.route('/<int:post_id>/comments/<int:comment_id>', methods=['PUT'])
@login_required
def update_comment(post_id, comment_id):
    post = _get_visible_post(post_id)
    comment = _get_comment(post, comment_id)
    if comment.user_id != current_user.id:
        raise AuthorizationError('Not authorized to update this comment')
    comment = PostRepository.update_comment(comment, parse_str(g.payload, 'text'))
    return success(comment.to_dict())


@bp.route('/<int:post_id>/comments/<int:comment_id>', methods=['DELETE'])
@login_required
def delete_comment(post_id, comment_id):
    post = _get_visible_post(post_id)
    comment = _get_comment(post, comment_id)
    if not (comment.user_id == current_user.id or post.is_owned_by(current_user)
            or current_user.is_admin):
        raise AuthorizationError('Not authorized to delete this comment')
    PostRepository.delete_comment(comment)
    return success(None, message='Comment deleted')


@bp.route('/<int:post_id>/comments/<int:comment_id>/replies', methods=['POST'])
@login_required
def reply_to_comment(post_id, comment_id):
    post = _get_visible_post(post_id)
    parent = _get_comment(post, comment_id)
    if parent.parent_id is not None:
        # Respostas têm um nível só
        parent = parent.parent
    reply = PostRepository.add_comment(post, current_user.id, parse_str(g.payload, 'text'),
                                       parent=parent)

    data = reply.to_dict(include_replies=False)
    outbox.to_post(post.id, 'newComment', {'postId': post.id, 'comment': data})
    outbox.notify(parent.user_id, current_user.id, 'reply', post_id=post.id,
                  comment_id=reply.id, sender=current_user.name, title=post.title)
    return success(data, 201)


@bp.route('/<int:post_id>/comments/<int:comment_id>/like', methods=['PUT'])
@login_required
def like_comment(post_id, comment_id):
    post = _get_visible_post(post_id)
    comment = _get_comment(post, comment_id)
    likes_count = PostRepository.add_comment_like(comment.id, current_user.id)
    return success({'commentId': comment.id, 'likesCount': likes_count})


@bp.route('/<int:post_id>/comments/<int:comment_id>/unlike', methods=['PUT'])
@login_required
def unlike_comment(post_id, comment_id):
    post = _get_visible_post(post_id)
    comment = _get_comment(post, comment_id)
    likes_count = PostRepository.remove_comment_like(comment.id, current_user.id)
    return success({'commentId': comment.id, 'likesCount': likes_count})
