"""
Pipeline de transformadores puros aplicados ao payload antes dos handlers.

Cada transformador recebe um valor (dict/list/str/...) e devolve um novo valor,
sem alterar a entrada. A ordem da tupla TRANSFORMERS é a ordem de aplicação.
"""
import re

from flask import g, request

_TAG_RE = re.compile(r'<[^>]*>')

# Senhas chegam ao bcrypt exatamente como foram digitadas
RAW_KEYS = frozenset({'password', 'currentPassword', 'newPassword'})


def _walk(value, on_str=None, on_dict=None):
    if isinstance(value, dict):
        items = on_dict(value) if on_dict else value.items()
        return {
            key: item if key in RAW_KEYS and isinstance(item, str) else _walk(item, on_str, on_dict)
            for key, item in items
        }
    if isinstance(value, list):
        return [_walk(item, on_str, on_dict) for item in value]
    if isinstance(value, str) and on_str:
        return on_str(value)
    return value


def drop_operator_keys(data):
    """Remove chaves com cara de operador de query ($gt, a.b)"""
    return _walk(data, on_dict=lambda d: [
        (key, item) for key, item in d.items()
        if not (isinstance(key, str) and (key.startswith('$') or '.' in key))
    ])


def strip_whitespace(data):
    return _walk(data, on_str=str.strip)


def strip_html(data):
    return _walk(data, on_str=lambda s: _TAG_RE.sub('', s))


TRANSFORMERS = (drop_operator_keys, strip_whitespace, strip_html)


def apply_transformers(data, transformers=TRANSFORMERS):
    for transform in transformers:
        data = transform(data)
    return data


def init_sanitizer(app):
    @app.before_request
    def sanitize_request():
        body = request.get_json(silent=True) if request.is_json else None
        if not isinstance(body, dict):
            body = request.form.to_dict() if request.form else {}
        g.payload = apply_transformers(body)
        g.params = apply_transformers(request.args.to_dict())
