# pinquest/services/notification_service.py
"""
Produtor de notificações: cria exatamente uma Notification por chamada.
Nunca levanta exceção - falhas são logadas e a sessão é revertida.
"""
import logging

from pinquest import db
from pinquest.models import Notification, NOTIFICATION_TYPES

logger = logging.getLogger(__name__)


class NotificationService:
    """Serviço de criação de notificações"""

    TEMPLATES = {
        'like': '{sender} liked your post: "{title}"',
        'comment': '{sender} commented on your post: "{title}"',
        'reply': '{sender} replied to your comment on "{title}"',
        'follow': '{sender} started following you',
        'report': 'New report received: "{reason}" for post "{title}"',
        'post_update': 'Your report for post "{title}" has been updated to status: {status}',
        'moderation': 'Your post "{title}" has been {status} by a moderator',
        'message': '{sender} sent you a message',
    }

    @staticmethod
    def render_message(notification_type, data):
        """
        Monta o texto da notificação a partir do template do tipo

        Tipos sem template usam data['message'].
        """
        template = NotificationService.TEMPLATES.get(notification_type)
        if template is None:
            return data.get('message', '')
        return template.format(**data)

    @staticmethod
    def create(recipient_id, sender_id, notification_type, post_id=None, comment_id=None, **data):
        """
        Cria uma notificação

        Args:
            recipient_id: Usuário que recebe
            sender_id: Usuário que gerou o evento
            notification_type: Um de NOTIFICATION_TYPES
            post_id / comment_id: Referências opcionais
            **data: Dados do template da mensagem

        Returns:
            Notification criada, ou None (auto-notificação ou erro)
        """
        if recipient_id is None or sender_id is None:
            return None
        if int(recipient_id) == int(sender_id):
            # Não notificar o próprio usuário
            return None

        try:
            if notification_type not in NOTIFICATION_TYPES:
                raise ValueError(f'Unknown notification type: {notification_type}')

            notification = Notification(
                recipient_id=recipient_id,
                sender_id=sender_id,
                type=notification_type,
                post_id=post_id,
                comment_id=comment_id,
                message=NotificationService.render_message(notification_type, data)[:500],
            )
            db.session.add(notification)
            db.session.commit()
            return notification
        except Exception as e:
            db.session.rollback()
            logger.error(f"Erro ao criar notificação '{notification_type}' para {recipient_id}: {e}")
            return None

    @staticmethod
    def unread_count(user_id):
        return Notification.query.filter_by(recipient_id=user_id, read=False).count()
