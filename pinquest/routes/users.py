# pinquest/routes/users.py
from flask import Blueprint, g
from flask_login import login_required, current_user

from pinquest import db
from pinquest.models import User, Post, Follow
from pinquest.services.account_service import AccountService
from pinquest.services.events import outbox
from pinquest.services.location_service import LocationService
from pinquest.services.post_query_service import PostQueryService
from pinquest.utils.errors import ValidationError
from pinquest.utils.helpers import get_or_404, get_page_args, paginate, parse_str
from pinquest.utils.responses import success

bp = Blueprint('users', __name__, url_prefix='/api/v1/users')

PROFILE_FIELDS = {'name': 100, 'bio': 500, 'avatar': 500}


@bp.route('/<int:user_id>', methods=['GET'])
def get_user(user_id):
    user = get_or_404(User, user_id, 'User not found')
    data = user.to_dict()
    data['postsCount'] = user.posts.filter_by(status='published').count()
    if current_user.is_authenticated:
        data['isFollowing'] = current_user.is_following(user.id)
    return success(data)


@bp.route('/<int:user_id>/posts', methods=['GET'])
def get_user_posts(user_id):
    user = get_or_404(User, user_id, 'User not found')
    query = PostQueryService.base_query().filter(Post.posted_by_id == user.id)
    posts, pagination = PostQueryService.search(g.params, query)
    return success({'posts': [post.to_dict() for post in posts], 'pagination': pagination})


@bp.route('/me', methods=['PATCH'])
@login_required
def update_profile():
    payload = g.payload
    for field, max_length in PROFILE_FIELDS.items():
        if field not in payload:
            continue
        value = parse_str(payload, field)
        if field == 'name' and not value:
            raise ValidationError('Name cannot be empty')
        if value and len(value) > max_length:
            raise ValidationError(f'{field} must be at most {max_length} characters')
        setattr(current_user, field, value or None)

    db.session.commit()
    return success(current_user.to_dict(private=True))


@bp.route('/me/password', methods=['PUT'])
@login_required
def change_password():
    payload = g.payload
    AccountService.change_password(current_user, parse_str(payload, 'currentPassword'),
                                  parse_str(payload, 'newPassword'))
    return success(None, message='Password updated')


# Seguidores

@bp.route('/<int:user_id>/follow', methods=['POST'])
@login_required
def follow_user(user_id):
    target = get_or_404(User, user_id, 'User not found')
    AccountService.follow(current_user, target)
    outbox.notify(target.id, current_user.id, 'follow', sender=current_user.name)
    return success({'userId': target.id, 'followersCount': target.followers.count()},
                   message='User followed')


@bp.route('/<int:user_id>/follow', methods=['DELETE'])
@login_required
def unfollow_user(user_id):
    target = get_or_404(User, user_id, 'User not found')
    AccountService.unfollow(current_user, target)
    return success({'userId': target.id, 'followersCount': target.followers.count()},
                   message='User unfollowed')


@bp.route('/<int:user_id>/is-following', methods=['GET'])
@login_required
def is_following(user_id):
    target = get_or_404(User, user_id, 'User not found')
    return success({'userId': target.id, 'isFollowing': current_user.is_following(target.id)})


@bp.route('/<int:user_id>/followers', methods=['GET'])
def get_followers(user_id):
    user = get_or_404(User, user_id, 'User not found')
    page, limit = get_page_args(g.params)
    query = User.query.join(Follow, Follow.follower_id == User.id) \
        .filter(Follow.followed_id == user.id).order_by(Follow.created_at.desc())
    users, pagination = paginate(query, page, limit)
    return success({'users': [u.to_public_dict() for u in users], 'pagination': pagination})


@bp.route('/<int:user_id>/following', methods=['GET'])
def get_following(user_id):
    user = get_or_404(User, user_id, 'User not found')
    page, limit = get_page_args(g.params)
    query = User.query.join(Follow, Follow.followed_id == User.id) \
        .filter(Follow.follower_id == user.id).order_by(Follow.created_at.desc())
    users, pagination = paginate(query, page, limit)
    return success({'users': [u.to_public_dict() for u in users], 'pagination': pagination})


# Favoritos

@bp.route('/me/favorites', methods=['GET'])
@login_required
def get_favorites():
    page, limit = get_page_args(g.params)
    favorites, pagination = paginate(current_user.favorites, page, limit)
    return success({
        'posts': [favorite.post.to_dict() for favorite in favorites],
        'pagination': pagination,
    })


@bp.route('/me/favorites/<int:post_id>', methods=['GET'])
@login_required
def is_favorite(post_id):
    return success({'postId': post_id, 'isFavorited': current_user.has_favorite(post_id)})


@bp.route('/me/favorites/<int:post_id>', methods=['POST'])
@login_required
def add_favorite(post_id):
    post = get_or_404(Post, post_id, 'Post not found')
    AccountService.add_favorite(current_user, post)
    return success({'postId': post.id}, 201, 'Added to favorites')


@bp.route('/me/favorites/<int:post_id>', methods=['DELETE'])
@login_required
def remove_favorite(post_id):
    AccountService.remove_favorite(current_user, post_id)
    return success({'postId': post_id}, message='Removed from favorites')


# Preferências

@bp.route('/me/preferences', methods=['GET'])
@login_required
def get_preferences():
    return success({'preferences': current_user.get_preferences()})


@bp.route('/me/preferences', methods=['PUT', 'PATCH'])
@login_required
def update_preferences():
    preferences = AccountService.update_preferences(current_user, g.payload.get('preferences'))
    return success({'preferences': preferences}, message='Preferences updated')


# Lugares salvos e recentes

def _saved_locations():
    return [location.to_dict() for location in current_user.saved_locations]


def _recent_locations():
    return [location.to_dict() for location in current_user.recent_locations]


@bp.route('/me/saved-locations', methods=['GET'])
@login_required
def get_saved_locations():
    return success({'savedLocations': _saved_locations()})


@bp.route('/me/saved-locations', methods=['POST'])
@login_required
def add_saved_location():
    LocationService.save_location(current_user, g.payload)
    return success({'savedLocations': _saved_locations()}, 201, 'Location saved')


@bp.route('/me/saved-locations/<location_id>', methods=['DELETE'])
@login_required
def remove_saved_location(location_id):
    LocationService.remove_saved_location(current_user, location_id)
    return success({'savedLocations': _saved_locations()}, message='Location removed')


@bp.route('/me/recent-locations', methods=['GET'])
@login_required
def get_recent_locations():
    return success({'recentLocations': _recent_locations()})


@bp.route('/me/recent-locations', methods=['POST'])
@login_required
def add_recent_location():
    LocationService.add_recent_location(current_user, g.payload)
    return success({'recentLocations': _recent_locations()})


@bp.route('/me/recent-locations/<location_id>', methods=['DELETE'])
@login_required
def remove_recent_location(location_id):
    LocationService.remove_recent_location(current_user, location_id)
    return success({'recentLocations': _recent_locations()}, message='Location removed')
