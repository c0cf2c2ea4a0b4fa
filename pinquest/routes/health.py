# pinquest/routes/health.py
import logging
from datetime import datetime

from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from pinquest import db
from pinquest.utils.responses import success, error

bp = Blueprint('health', __name__, url_prefix='/api/v1/health')
logger = logging.getLogger(__name__)


@bp.route('', methods=['GET'])
def health():
    """Verifica a conexão com o banco"""
    try:
        db.session.execute(text('SELECT 1'))
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Health check falhou: {e}")
        return error('Database unavailable', 503, data={'database': 'down'})
    return success({'database': 'up', 'timestamp': datetime.utcnow().isoformat()})
