# pinquest/services/location_service.py
"""
Lugares salvos e vistos recentemente

O cliente manda o objeto que está na tela: um post ({id, title, latitude,
longitude}) ou um resultado do mapa ({placeId, name, position: [lat, lng]}).
"""
import logging

from sqlalchemy.exc import IntegrityError

from pinquest import db
from pinquest.models import SavedLocation, RecentLocation, MAX_RECENT_LOCATIONS
from pinquest.utils.errors import ValidationError, ConflictError, NotFoundError
from pinquest.utils.geo import validate_coordinates
from pinquest.utils.helpers import parse_float, parse_str

logger = logging.getLogger(__name__)


def _read_location_id(payload):
    value = payload.get('id')
    if value is None:
        value = payload.get('placeId')
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        return None
    return str(value).strip()[:100] or None


def _read_point(payload):
    """latitude/longitude no topo, ou position como [lat, lng] ou {latitude, longitude}"""
    source = payload
    position = payload.get('position')
    if payload.get('latitude') is None and payload.get('longitude') is None:
        if isinstance(position, list) and len(position) >= 2:
            source = {'latitude': position[0], 'longitude': position[1]}
        elif isinstance(position, dict):
            source = position

    latitude = parse_float(source, 'latitude', required=False)
    longitude = parse_float(source, 'longitude', required=False)
    if (latitude is None) != (longitude is None):
        raise ValidationError('latitude and longitude must be sent together')
    if latitude is not None and not validate_coordinates(latitude, longitude):
        raise ValidationError('Invalid coordinates: latitude must be within [-90, 90] '
                              'and longitude within [-180, 180]')
    return latitude, longitude


class LocationService:
    """Operações sobre lugares salvos e recentes de um usuário"""

    @staticmethod
    def save_location(user, payload):
        location_id = _read_location_id(payload)
        name = parse_str(payload, 'name') or parse_str(payload, 'title')
        if not location_id or not name:
            raise ValidationError('Location ID and name are required')
        latitude, longitude = _read_point(payload)

        location = SavedLocation(
            user_id=user.id,
            location_id=location_id,
            name=name[:200],
            latitude=latitude,
            longitude=longitude,
            address=parse_str(payload, 'address') or '',
            place_id=parse_str(payload, 'placeId'),
            type=parse_str(payload, 'type') or 'location',
            category=parse_str(payload, 'category') or 'general',
            description=parse_str(payload, 'description'),
        )
        db.session.add(location)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError('Location already saved')
        return location

    @staticmethod
    def remove_saved_location(user, location_id):
        deleted = SavedLocation.query.filter_by(user_id=user.id, location_id=location_id) \
            .delete(synchronize_session=False)
        if not deleted:
            db.session.rollback()
            raise NotFoundError('Location is not saved')
        db.session.commit()

    @staticmethod
    def add_recent_location(user, payload):
        """Coloca o lugar no topo da lista e corta o excedente"""
        location_id = _read_location_id(payload)
        title = parse_str(payload, 'title') or parse_str(payload, 'name')
        if not location_id or not title:
            raise ValidationError('Location ID and title are required')
        latitude, longitude = _read_point(payload)

        RecentLocation.query.filter_by(user_id=user.id, location_id=location_id) \
            .delete(synchronize_session=False)
        db.session.add(RecentLocation(
            user_id=user.id,
            location_id=location_id,
            title=title[:200],
            description=parse_str(payload, 'description') or '',
            latitude=latitude,
            longitude=longitude,
            type=parse_str(payload, 'type') or 'location',
        ))
        db.session.flush()

        stale = [row.id for row in user.recent_locations.offset(MAX_RECENT_LOCATIONS).all()]
        if stale:
            RecentLocation.query.filter(RecentLocation.id.in_(stale)).delete(synchronize_session=False)
        db.session.commit()

    @staticmethod
    def remove_recent_location(user, location_id):
        deleted = RecentLocation.query.filter_by(user_id=user.id, location_id=location_id) \
            .delete(synchronize_session=False)
        if not deleted:
            db.session.rollback()
            raise NotFoundError('Location is not in recent locations')
        db.session.commit()
