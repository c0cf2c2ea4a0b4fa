import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Optional, Dict, Any

import jwt
from flask import current_app


def _secret_key() -> str:
    return current_app.config['SECRET_KEY']


def create_token(payload: Dict[Any, Any], expires_in: int = 3600) -> str:
    """
    Criar token JWT genérico (HS256)

    Args:
        payload: Dados do token
        expires_in: Tempo de expiração em segundos

    Returns:
        Token JWT
    """
    payload = dict(payload)
    payload['iat'] = datetime.utcnow()
    payload['exp'] = datetime.utcnow() + timedelta(seconds=expires_in)
    return jwt.encode(payload, _secret_key(), algorithm='HS256')


def decode_token(token: str, purpose: str = None) -> Optional[Dict[Any, Any]]:
    """
    Decodificar e verificar token JWT genérico

    Args:
        token: Token JWT
        purpose: Propósito esperado (opcional)

    Returns:
        Payload se válido, None caso contrário
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, _secret_key(), algorithms=['HS256'])
    except jwt.PyJWTError:
        return None

    if purpose and payload.get('purpose') != purpose:
        return None
    return payload


def generate_api_token(user_id: int, expires_in: int = None) -> str:
    """Token de API (Bearer) - padrão: JWT_EXPIRES_IN"""
    if expires_in is None:
        expires_in = current_app.config['JWT_EXPIRES_IN']
    return create_token({'user_id': user_id, 'purpose': 'api_access'}, expires_in)


def verify_api_token(token: str) -> Optional[int]:
    payload = decode_token(token, purpose='api_access')
    return payload.get('user_id') if payload else None


def generate_confirmation_token(email: str, expires_in: int = None) -> str:
    """Token para confirmação de email"""
    if expires_in is None:
        expires_in = current_app.config['VERIFICATION_TOKEN_EXPIRES_IN']
    return create_token({'email': email, 'purpose': 'email_confirmation'}, expires_in)


def verify_confirmation_token(token: str) -> Optional[str]:
    payload = decode_token(token, purpose='email_confirmation')
    return payload.get('email') if payload else None


def generate_secure_token(length: int = 32) -> str:
    """Token aleatório (hex) - usado no reset de senha"""
    return secrets.token_hex(length)


def hash_token(token: str) -> str:
    """Hash SHA-256 do token - só o hash fica no banco"""
    return hashlib.sha256(token.encode('utf-8')).hexdigest()
