"""
Envelope padrão das respostas: {status, message?, data}
"""
from flask import jsonify


def success(data=None, status_code=200, message=None, meta=None):
    """Resposta de sucesso - sempre carrega `data`"""
    body = {'status': 'success', 'data': data}
    if message:
        body['message'] = message
    if meta:
        body['meta'] = meta
    return jsonify(body), status_code


def fail(message, status_code=400, errors=None):
    """Erro do cliente (4xx)"""
    body = {'status': 'fail', 'message': message}
    if errors:
        body['errors'] = errors
    return jsonify(body), status_code


def error(message, status_code=500, **extra):
    """Erro do servidor (5xx)"""
    body = {'status': 'error', 'message': message}
    body.update(extra)
    return jsonify(body), status_code
