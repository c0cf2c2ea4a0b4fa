# pinquest/services/geolocation_service.py
"""
Geocodificação via OpenStreetMap Nominatim.
Erros do provedor nunca quebram a busca: retornam lista vazia / None.
"""
import logging

import requests
from flask import current_app

logger = logging.getLogger(__name__)


class GeolocationService:
    """Cliente do Nominatim"""

    def _settings(self):
        config = current_app.config
        return config['NOMINATIM_URL'].rstrip('/'), config['GEOCODER_TIMEOUT'], {
            'User-Agent': config['GEOCODER_USER_AGENT'],
        }

    @staticmethod
    def _format_location(location, fallback_name=None):
        if not location.get('lat') or not location.get('lon'):
            return None
        bbox = location.get('boundingbox')
        return {
            'name': location.get('display_name') or location.get('name') or fallback_name,
            'address': location.get('address'),
            'type': location.get('type'),
            'category': location.get('category') or location.get('class'),
            'coordinates': {
                'latitude': float(location['lat']),
                'longitude': float(location['lon']),
            },
            # south, north, west, east
            'bbox': [float(bbox[0]), float(bbox[1]), float(bbox[2]), float(bbox[3])] if bbox else None,
            'relevance': float(location.get('importance') or 0),
        }

    def search_locations(self, query, limit=10):
        """Busca global de lugares por texto"""
        if not query or not isinstance(query, str) or not query.strip():
            return []

        base_url, timeout, headers = self._settings()
        try:
            response = requests.get(
                f'{base_url}/search',
                params={
                    'q': query.strip(),
                    'format': 'json',
                    'limit': limit,
                    'addressdetails': 1,
                    'extratags': 1,
                    'namedetails': 1,
                },
                headers=headers,
                timeout=timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Erro na busca de localização '{query}': {e}")
            return []

        if not isinstance(data, list):
            return []
        results = [self._format_location(location, query) for location in data]
        return [location for location in results if location is not None]

    def reverse_geocode(self, latitude, longitude):
        """Detalhes de um ponto (lat, lon) ou None"""
        base_url, timeout, headers = self._settings()
        try:
            response = requests.get(
                f'{base_url}/reverse',
                params={
                    'lat': latitude,
                    'lon': longitude,
                    'format': 'json',
                    'addressdetails': 1,
                },
                headers=headers,
                timeout=timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Erro no reverse geocoding ({latitude}, {longitude}): {e}")
            return None

        if not isinstance(data, dict) or data.get('error'):
            return None
        return self._format_location(data)


geolocation_service = GeolocationService()
