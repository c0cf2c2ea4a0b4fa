# pinquest/routes/maps.py
from flask import Blueprint, g

from pinquest.services.geolocation_service import geolocation_service
from pinquest.services.post_query_service import PostQueryService
from pinquest.utils.errors import ValidationError
from pinquest.utils.helpers import parse_int
from pinquest.utils.responses import success

bp = Blueprint('maps', __name__, url_prefix='/api/v1/maps')


@bp.route('/search', methods=['GET'])
def search_places():
    query = g.params.get('q')
    if not query:
        raise ValidationError('Search query is required')
    limit = min(max(parse_int(g.params, 'limit', 10), 1), 50)
    results = geolocation_service.search_locations(query, limit)
    return success({'results': results, 'count': len(results)})


@bp.route('/reverse', methods=['GET'])
def reverse_geocode():
    latitude, longitude = PostQueryService.parse_point(g.params, 'lat', 'lon')
    return success(geolocation_service.reverse_geocode(latitude, longitude))
