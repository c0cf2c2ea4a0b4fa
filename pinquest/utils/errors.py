import logging
import traceback

from flask import current_app
from werkzeug.exceptions import HTTPException

from pinquest import db
from pinquest.utils.responses import fail, error

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Erro de API traduzido para o envelope"""
    status_code = 400
    default_message = 'Bad request'

    def __init__(self, message=None, status_code=None, errors=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors


class ValidationError(ApiError):
    status_code = 400
    default_message = 'Invalid input'


class ConflictError(ApiError):
    status_code = 400
    default_message = 'Conflict'


class AuthenticationError(ApiError):
    status_code = 401
    default_message = 'Not authorized, no token'


class AuthorizationError(ApiError):
    """Ator não é o dono do recurso"""
    status_code = 401
    default_message = 'Not authorized'


class ForbiddenError(ApiError):
    status_code = 403
    default_message = 'Access denied'


class NotFoundError(ApiError):
    status_code = 404
    default_message = 'Resource not found'


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e):
        return fail(e.message, e.status_code, e.errors)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        if e.code and e.code >= 500:
            return error(e.description or e.name, e.code)
        return fail(e.description or e.name, e.code or 400)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        db.session.rollback()
        logger.exception(f"Erro inesperado: {e}")
        if current_app.debug:
            return error(str(e), 500, stack=traceback.format_exc())
        return error('Something went wrong', 500)
