# Importar todos os models
from .user import User, Follow, Favorite, ROLES, DEFAULT_PREFERENCES
from .post import Post, PostImage, PostLike, PostRating, POST_STATUSES
from .comment import Comment, CommentLike
from .notification import Notification, NOTIFICATION_TYPES
from .message import Message, build_conversation_id
from .report import Report, REPORT_REASONS, REPORT_STATUSES
from .location import SavedLocation, RecentLocation, MAX_RECENT_LOCATIONS
from .activity_log import ActivityLog, ACTIVITY_ACTIONS

__all__ = ['User', 'Follow', 'Favorite', 'Post', 'PostImage', 'PostLike', 'PostRating',
           'Comment', 'CommentLike', 'Notification', 'Message', 'Report',
           'SavedLocation', 'RecentLocation', 'ActivityLog',
           'ROLES', 'DEFAULT_PREFERENCES', 'POST_STATUSES', 'NOTIFICATION_TYPES',
           'REPORT_REASONS', 'REPORT_STATUSES', 'MAX_RECENT_LOCATIONS', 'ACTIVITY_ACTIONS',
           'build_conversation_id']
