"""
Autenticação por estratégias.

Cada estratégia verifica a assinatura do token por completo e devolve o usuário
ou None. O Authenticator percorre a lista em ordem e para no primeiro sucesso.
Nenhuma estratégia decodifica token sem verificar assinatura.
"""
import logging
from functools import wraps

import jwt
from flask import current_app, request
from flask_login import current_user

from pinquest import db, login_manager
from pinquest.models import User
from pinquest.utils.errors import AuthenticationError, ForbiddenError
from pinquest.utils.security import decode_token
from pinquest.utils.responses import fail

logger = logging.getLogger(__name__)

FIREBASE_JWKS_URL = ('https://www.googleapis.com/service_accounts/v1/jwk/'
                     'securetoken@system.gserviceaccount.com')


class AuthStrategy:
    """Interface das estratégias de autenticação"""
    name = 'base'

    def authenticate(self, token):
        raise NotImplementedError


class JWTStrategy(AuthStrategy):
    """Tokens emitidos pela própria API (HS256, purpose=api_access)"""
    name = 'jwt'

    def authenticate(self, token):
        payload = decode_token(token, purpose='api_access')
        if not payload or payload.get('user_id') is None:
            return None
        return db.session.get(User, int(payload['user_id']))


class FirebaseStrategy(AuthStrategy):
    """ID tokens do Firebase (RS256, chaves públicas do Google)"""
    name = 'firebase'

    def __init__(self, project_id, jwks_client=None):
        self.project_id = project_id
        self.issuer = f'https://securetoken.google.com/{project_id}'
        self.jwks_client = jwks_client or jwt.PyJWKClient(FIREBASE_JWKS_URL)

    def authenticate(self, token):
        try:
            signing_key = self.jwks_client.get_signing_key_from_jwt(token)
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=['RS256'],
                audience=self.project_id,
                issuer=self.issuer,
            )
        except jwt.PyJWTError as e:
            logger.info(f"Token Firebase rejeitado: {e}")
            return None

        uid = payload.get('sub')
        if not uid:
            return None

        from pinquest.services.account_service import AccountService
        return AccountService.provision_firebase_user(
            uid,
            email=payload.get('email'),
            name=payload.get('name'),
            avatar=payload.get('picture'),
            verified=payload.get('email_verified', False),
        )


class Authenticator:
    def __init__(self, strategies):
        self.strategies = list(strategies)

    def authenticate(self, token):
        if not token:
            return None
        for strategy in self.strategies:
            user = strategy.authenticate(token)
            if user is not None:
                logger.debug(f"Usuário {user.id} autenticado via {strategy.name}")
                return user
        return None


def build_authenticator(app):
    strategies = [JWTStrategy()]
    if app.config.get('FIREBASE_PROJECT_ID'):
        strategies.append(FirebaseStrategy(app.config['FIREBASE_PROJECT_ID']))
    return Authenticator(strategies)


def get_authenticator():
    return current_app.extensions['pinquest_auth']


def bearer_token(req):
    header = req.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header.split(' ', 1)[1].strip() or None
    return None


def load_user_from_request(req):
    token = bearer_token(req)
    if not token:
        return None
    user = get_authenticator().authenticate(token)
    if user is None:
        logger.info(f"Token inválido em {req.path}")
        return None
    if user.is_banned:
        raise ForbiddenError('Your account has been banned')
    return user


def init_auth(app):
    app.extensions['pinquest_auth'] = build_authenticator(app)
    login_manager.request_loader(load_user_from_request)

    @login_manager.unauthorized_handler
    def unauthorized():
        if bearer_token(request):
            return fail('Not authorized, token failed', 401)
        return fail(AuthenticationError.default_message, 401)


def admin_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            raise AuthenticationError()
        if not current_user.is_admin:
            raise ForbiddenError('Admin access required')
        return f(*args, **kwargs)
    return decorated_function
