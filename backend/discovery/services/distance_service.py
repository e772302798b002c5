from __future__ import annotations

import math

# Mean Earth radius; PostGIS uses the same sphere when use_spheroid is false.
EARTH_RADIUS_M = 6_371_008.8


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(d_lon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def destination_point(lat: float, lon: float, distance_m: float, bearing_deg: float) -> tuple[float, float]:
    """Point reached after travelling ``distance_m`` along a great circle at ``bearing_deg``."""
    angular = distance_m / EARTH_RADIUS_M
    bearing = math.radians(bearing_deg)
    lat1 = math.radians(lat)
    lon1 = math.radians(lon)

    lat2 = math.asin(
        math.sin(lat1) * math.cos(angular) + math.cos(lat1) * math.sin(angular) * math.cos(bearing)
    )
    lon2 = lon1 + math.atan2(
        math.sin(bearing) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2),
    )
    lon2_deg = (math.degrees(lon2) + 540.0) % 360.0 - 180.0
    return math.degrees(lat2), lon2_deg


def radius_bounds(lat: float, lon: float, radius_m: float) -> tuple[float, float, float, float]:
    """Bounding rectangle (min_lat, max_lat, min_lon, max_lon) enclosing a radius.

    Longitudes may fall outside [-180, 180] near the antimeridian; see ``longitude_ranges``.
    """
    angular = radius_m / EARTH_RADIUS_M
    lat_rad = math.radians(lat)
    min_lat = lat_rad - angular
    max_lat = lat_rad + angular

    if min_lat <= -math.pi / 2 or max_lat >= math.pi / 2:
        return (
            max(-90.0, math.degrees(min_lat)),
            min(90.0, math.degrees(max_lat)),
            -180.0,
            180.0,
        )

    delta_lon = math.asin(min(1.0, math.sin(angular) / math.cos(lat_rad)))
    return (
        math.degrees(min_lat),
        math.degrees(max_lat),
        lon - math.degrees(delta_lon),
        lon + math.degrees(delta_lon),
    )


def longitude_ranges(min_lon: float, max_lon: float) -> list[tuple[float, float]]:
    if max_lon - min_lon >= 360.0:
        return [(-180.0, 180.0)]
    if min_lon < -180.0:
        return [(-180.0, max_lon), (min_lon + 360.0, 180.0)]
    if max_lon > 180.0:
        return [(min_lon, 180.0), (-180.0, max_lon - 360.0)]
    return [(min_lon, max_lon)]
