"""
Serviço de consulta de posts: texto, categoria, raio, caixa e paginação.
"""
from flask import current_app
from sqlalchemy import or_
from sqlalchemy.orm import selectinload

from pinquest.models import Post
from pinquest.utils.errors import ValidationError
from pinquest.utils.geo import haversine_km, bounding_box, km_to_meters, validate_coordinates
from pinquest.utils.helpers import get_page_args, paginate, parse_float, parse_int


def _like_pattern(term):
    escaped = term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f'%{escaped}%'


class PostQueryService:
    """Traduz parâmetros da requisição em consultas de posts"""

    SORTS = {
        'newest': (Post.date_posted.desc(), Post.id.desc()),
        'oldest': (Post.date_posted.asc(), Post.id.asc()),
        'trending': (Post.likes_count.desc(), Post.date_posted.desc(), Post.id.desc()),
        'rating': (Post.average_rating.desc(), Post.total_ratings.desc(), Post.date_posted.desc()),
    }

    @staticmethod
    def base_query():
        return Post.query.options(selectinload(Post.author), selectinload(Post.images)) \
            .filter(Post.status == 'published')

    @staticmethod
    def apply_filters(query, q=None, category=None):
        if q:
            pattern = _like_pattern(q)
            query = query.filter(or_(
                Post.title.ilike(pattern, escape='\\'),
                Post.description.ilike(pattern, escape='\\'),
            ))
        if category:
            query = query.filter(Post.category.ilike(_like_pattern(category), escape='\\'))
        return query

    @staticmethod
    def apply_sort(query, sort=None):
        clauses = PostQueryService.SORTS.get(sort or 'newest')
        if clauses is None:
            raise ValidationError(f"sort must be one of: {', '.join(PostQueryService.SORTS)}")
        return query.order_by(*clauses)

    @staticmethod
    def search(params, query=None):
        """
        Lista paginada de posts

        Args:
            params: dict com q, category, page, limit, sort
            query: consulta base (padrão: posts publicados)

        Returns:
            (posts, pagination)
        """
        page, limit = get_page_args(params)
        if query is None:
            query = PostQueryService.base_query()
        query = PostQueryService.apply_filters(query, params.get('q'), params.get('category'))
        query = PostQueryService.apply_sort(query, params.get('sort'))
        return paginate(query, page, limit)

    @staticmethod
    def parse_point(params, lat_name='latitude', lng_name='longitude'):
        latitude = parse_float(params, lat_name)
        longitude = parse_float(params, lng_name)
        if not validate_coordinates(latitude, longitude):
            raise ValidationError('Invalid coordinates: latitude must be within [-90, 90] '
                                  'and longitude within [-180, 180]')
        return latitude, longitude

    @staticmethod
    def nearby(params):
        """
        Posts dentro do raio (km) do centro, do mais próximo ao mais distante

        Returns:
            (lista de (post, distância_km), dict com center/radius/radiusMeters)
        """
        latitude, longitude = PostQueryService.parse_point(params)
        radius = parse_float(params, 'radius', required=False,
                             default=current_app.config['DEFAULT_RADIUS_KM'])
        if radius <= 0:
            raise ValidationError('radius must be greater than 0')
        limit = parse_int(params, 'limit', current_app.config['DEFAULT_NEARBY_LIMIT'])
        limit = min(max(limit, 1), current_app.config['MAX_PAGE_SIZE'])

        min_lat, max_lat, min_lng, max_lng = bounding_box(latitude, longitude, radius)
        query = PostQueryService.base_query().filter(Post.latitude.between(min_lat, max_lat))
        if min_lng is not None:
            query = query.filter(Post.longitude.between(min_lng, max_lng))
        query = PostQueryService.apply_filters(query, params.get('q'), params.get('category'))

        results = []
        for post in query.all():
            distance = haversine_km(latitude, longitude, post.latitude, post.longitude)
            if distance <= radius:
                results.append((post, distance))
        results.sort(key=lambda item: item[1])

        meta = {
            'center': {'latitude': latitude, 'longitude': longitude},
            'radius': radius,
            'radiusMeters': km_to_meters(radius),
            'count': min(len(results), limit),
        }
        return results[:limit], meta

    @staticmethod
    def within(params):
        """Posts dentro da caixa minLat/maxLat/minLng/maxLng"""
        min_lat = parse_float(params, 'minLat')
        max_lat = parse_float(params, 'maxLat')
        min_lng = parse_float(params, 'minLng')
        max_lng = parse_float(params, 'maxLng')
        if min_lat > max_lat:
            raise ValidationError('minLat must be less than or equal to maxLat')
        if min_lng > max_lng:
            raise ValidationError('minLng must be less than or equal to maxLng')
        if not (validate_coordinates(min_lat, min_lng) and validate_coordinates(max_lat, max_lng)):
            raise ValidationError('Invalid coordinates')

        query = PostQueryService.base_query().filter(
            Post.latitude.between(min_lat, max_lat),
            Post.longitude.between(min_lng, max_lng),
        )
        query = PostQueryService.apply_filters(query, params.get('q'), params.get('category'))
        query = PostQueryService.apply_sort(query, params.get('sort'))
        limit = parse_int(params, 'limit')
        if limit:
            query = query.limit(min(max(limit, 1), current_app.config['MAX_PAGE_SIZE']))
        return query.all()

    @staticmethod
    def distance_to(post, params):
        latitude, longitude = PostQueryService.parse_point(params)
        return haversine_km(latitude, longitude, post.latitude, post.longitude)
