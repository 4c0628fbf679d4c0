# utils/geo.py

from math import atan2, cos, isfinite, radians, sin, sqrt

from core.errors import InvalidCoordinate

EARTH_RADIUS_KM = 6371.0


def validate_coordinate(lat: float, lng: float) -> None:
    """Raise InvalidCoordinate unless (lat, lng) is a finite point on the globe."""
    for value in (lat, lng):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidCoordinate(f"Coordinate must be a number, got {value!r}.")
        if not isfinite(value):
            raise InvalidCoordinate(f"Coordinate must be finite, got {value!r}.")

    if not -90.0 <= lat <= 90.0:
        raise InvalidCoordinate(f"Latitude {lat} is outside [-90, 90].")
    if not -180.0 <= lng <= 180.0:
        raise InvalidCoordinate(f"Longitude {lng} is outside [-180, 180].")


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    validate_coordinate(lat1, lng1)
    validate_coordinate(lat2, lng2)

    φ1, φ2 = radians(lat1), radians(lat2)
    Δφ = radians(lat2 - lat1)
    Δλ = radians(lng2 - lng1)

    a = sin(Δφ / 2) ** 2 + cos(φ1) * cos(φ2) * sin(Δλ / 2) ** 2
    # Float noise can push a a hair past 1 for antipodal points
    a = min(1.0, a)
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def round_km(distance_km: float) -> float:
    return round(distance_km, 2)
