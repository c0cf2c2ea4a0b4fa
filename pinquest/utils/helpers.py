import math

from flask import current_app

from pinquest import db
from pinquest.utils.errors import NotFoundError, ValidationError


def get_or_404(model, object_id, message=None):
    """Buscar registro por id ou levantar NotFoundError"""
    try:
        object_id = int(object_id)
    except (TypeError, ValueError):
        raise NotFoundError(message or f'{model.__name__} not found')
    obj = db.session.get(model, object_id)
    if obj is None:
        raise NotFoundError(message or f'{model.__name__} not found')
    return obj


def parse_float(params, name, required=True, default=None):
    value = params.get(name)
    if value is None or value == '':
        if required:
            raise ValidationError(f'{name} is required')
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be a number')
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f'{name} must be a number')
    return number


def parse_int(params, name, default=None):
    value = params.get(name)
    if value is None or value == '':
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be an integer')


def parse_str(params, name, default=None):
    """Campo texto do payload; números, listas e objetos viram ValidationError"""
    value = params.get(name)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValidationError(f'{name} must be a string')
    return value


def pagination_meta(total, page, limit):
    """Metadados de paginação (page 1-based)"""
    return {
        'currentPage': page,
        'totalPages': math.ceil(total / limit) if limit else 0,
        'total': total,
        'limit': limit,
        'hasNext': page * limit < total,
        'hasPrev': page > 1,
    }


def get_page_args(params):
    page = parse_int(params, 'page', 1)
    limit = parse_int(params, 'limit', current_app.config['DEFAULT_PAGE_SIZE'])
    page = max(page, 1)
    limit = min(max(limit, 1), current_app.config['MAX_PAGE_SIZE'])
    return page, limit


def paginate(query, page, limit):
    """Aplica offset/limit e devolve (itens, metadados)"""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, pagination_meta(total, page, limit)
