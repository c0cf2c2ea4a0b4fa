"""
Funções geográficas: distância haversine e caixa delimitadora para pré-filtro.
"""
import math

EARTH_RADIUS_KM = 6371


def haversine_km(lat1, lon1, lat2, lon2):
    """
    Distância entre dois pontos (graus) em km, com R = 6371 km

    a = sin²(Δlat/2) + cos(lat1)·cos(lat2)·sin²(Δlon/2)
    d = 2R · atan2(√a, √(1−a))
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (math.sin(d_lat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2)
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def km_to_meters(km):
    return km * 1000


def validate_coordinates(latitude, longitude):
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


def bounding_box(latitude, longitude, radius_km):
    """
    Caixa (min_lat, max_lat, min_lng, max_lng) que contém o círculo de raio radius_km.

    min_lng/max_lng ficam None quando a caixa cobre todas as longitudes
    (perto dos polos ou cruzando o antimeridiano).
    """
    angular = radius_km / EARTH_RADIUS_KM
    d_lat = math.degrees(angular)
    min_lat = max(latitude - d_lat, -90.0)
    max_lat = min(latitude + d_lat, 90.0)

    cos_lat = math.cos(math.radians(latitude))
    if min_lat <= -90 or max_lat >= 90 or cos_lat <= 1e-12:
        return min_lat, max_lat, None, None

    ratio = math.sin(angular) / cos_lat
    if ratio >= 1:
        return min_lat, max_lat, None, None

    d_lng = math.degrees(math.asin(ratio))
    min_lng = longitude - d_lng
    max_lng = longitude + d_lng
    if min_lng < -180 or max_lng > 180:
        return min_lat, max_lat, None, None
    return min_lat, max_lat, min_lng, max_lng
