# pinquest/services/activity_service.py
"""
Trilha de auditoria (ActivityLog)

Chamado depois do commit da operação principal. Nunca levanta exceção.
"""
import logging

from flask import has_request_context, request

from pinquest import db
from pinquest.models import ActivityLog, ACTIVITY_ACTIONS

logger = logging.getLogger(__name__)


def _client_info():
    if not has_request_context():
        return None, None
    forwarded = request.headers.get('X-Forwarded-For', '')
    ip = forwarded.split(',')[0].strip() or request.remote_addr
    user_agent = request.user_agent.string or None
    return ip, user_agent[:255] if user_agent else None


class ActivityService:
    """Registro e consulta da trilha de auditoria"""

    @staticmethod
    def record(user_id, action, success=True, **details):
        """
        Registra uma ação

        Args:
            user_id: Usuário que executou a ação
            action: Um de ACTIVITY_ACTIONS
            success: False para tentativas que falharam (ex.: senha errada)
            **details: Gravado em metadata

        Returns:
            ActivityLog criado, ou None em caso de erro
        """
        if user_id is None:
            return None
        try:
            if action not in ACTIVITY_ACTIONS:
                raise ValueError(f'Unknown activity action: {action}')
            ip, user_agent = _client_info()
            entry = ActivityLog(user_id=user_id, action=action, ip=ip, user_agent=user_agent,
                                details=details, success=success)
            db.session.add(entry)
            db.session.commit()
            return entry
        except Exception as e:
            db.session.rollback()
            logger.error(f"Erro ao registrar atividade '{action}' de {user_id}: {e}")
            return None

    @staticmethod
    def query(user_id=None, action=None):
        query = ActivityLog.query
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
        if action:
            query = query.filter_by(action=action)
        return query.order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
