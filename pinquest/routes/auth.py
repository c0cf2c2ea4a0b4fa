# pinquest/routes/auth.py
import logging

from flask import Blueprint, g
from flask_login import login_required, current_user

from pinquest import db
from pinquest.models import User
from pinquest.services.account_service import AccountService
from pinquest.utils.email import send_password_reset_email, send_verification_email
from pinquest.utils.errors import ValidationError
from pinquest.utils.helpers import parse_str
from pinquest.utils.responses import success
from pinquest.utils.security import (generate_api_token, generate_confirmation_token,
                                     verify_confirmation_token)

bp = Blueprint('auth', __name__, url_prefix='/api/v1/auth')
logger = logging.getLogger(__name__)


def _token_response(user, status_code=200, message=None):
    return success({
        'token': generate_api_token(user.id),
        'user': user.to_dict(private=True),
    }, status_code, message)


@bp.route('/register', methods=['POST'])
def register():
    """Cadastro com email e senha"""
    payload = g.payload
    user = AccountService.register(parse_str(payload, 'name'), parse_str(payload, 'email'),
                                   parse_str(payload, 'password'))

    # Email de confirmação não bloqueia o cadastro
    send_verification_email(user, generate_confirmation_token(user.email))
    return _token_response(user, 201, 'Account created')


@bp.route('/login', methods=['POST'])
def login():
    payload = g.payload
    user = AccountService.login(parse_str(payload, 'email'), parse_str(payload, 'password'))
    logger.info(f"Login do usuário {user.id}")
    return _token_response(user)


@bp.route('/me', methods=['GET'])
@login_required
def me():
    return success(current_user.to_dict(private=True))


@bp.route('/forgot-password', methods=['POST'])
def forgot_password():
    """Sempre responde sucesso para não revelar quais emails existem"""
    email = parse_str(g.payload, 'email', '').lower()
    if not email:
        raise ValidationError('Email is required')

    user = User.query.filter_by(email=email).first()
    if user and not user.is_banned:
        token = AccountService.create_reset_token(user)
        send_password_reset_email(user, token)
    else:
        logger.info("Reset de senha solicitado para email desconhecido")
    return success(None, message='If the email exists, a reset link has been sent')


@bp.route('/reset-password/<token>', methods=['POST'])
def reset_password(token):
    user = AccountService.reset_password(token, parse_str(g.payload, 'password'))
    return _token_response(user, message='Password updated')


@bp.route('/verify-email/<token>', methods=['POST'])
def verify_email(token):
    email = verify_confirmation_token(token)
    if not email:
        raise ValidationError('Verification link is invalid or has expired')
    user = User.query.filter_by(email=email).first()
    if not user:
        raise ValidationError('Verification link is invalid or has expired')

    if not user.is_verified:
        user.is_verified = True
        db.session.commit()
    return success(user.to_dict(private=True), message='Email verified')


@bp.route('/resend-verification', methods=['POST'])
@login_required
def resend_verification():
    if current_user.is_verified:
        raise ValidationError('Email is already verified')
    sent = send_verification_email(current_user, generate_confirmation_token(current_user.email))
    return success({'sent': sent}, message='Verification email sent')
