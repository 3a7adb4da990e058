from __future__ import annotations

from typing import Tuple
import math

from common.types import LocalPosition, ProjectionOrigin


# --- WGS84 constants ---
EARTH_RADIUS_M = 6378137.0        # semi-major axis (m), spherical Web Mercator
_CIRCUMFERENCE_M = 2.0 * math.pi * EARTH_RADIUS_M
_HALF_CIRCUMFERENCE_M = math.pi * EARTH_RADIUS_M


class DomainError(ValueError):
    """Coordinate outside the domain of the Web Mercator projection."""


# -------------------------
# Geodetic <-> Web Mercator
# -------------------------
def geodetic_to_mercator(lat: float, lon: float) -> Tuple[float, float]:
    """
    WGS84 lat/lon (deg) to spherical Web Mercator (x, y) in meters (EPSG:3857).

    Raises DomainError when |lat| >= 90 (tan is undefined at the poles) or when
    either input is not finite.
    """
    lat = float(lat)
    lon = float(lon)
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise DomainError(f"non-finite coordinate: lat={lat} lon={lon}")
    if abs(lat) >= 90.0:
        raise DomainError(f"latitude {lat} outside Mercator domain (|lat| < 90)")
    x = EARTH_RADIUS_M * math.radians(lon)
    y = EARTH_RADIUS_M * math.log(math.tan(math.pi / 4.0 + math.radians(lat) / 2.0))
    return x, y


def mercator_to_geodetic(x: float, y: float) -> Tuple[float, float]:
    """Inverse of geodetic_to_mercator(). Returns (lat, lon) in degrees."""
    lon = math.degrees(x / EARTH_RADIUS_M)
    lat = math.degrees(2.0 * math.atan(math.exp(y / EARTH_RADIUS_M)) - math.pi / 2.0)
    return lat, lon


def origin_from_latlon(lat: float, lng: float) -> ProjectionOrigin:
    """Build a ProjectionOrigin (centroid + its Mercator coordinates)."""
    mx, my = geodetic_to_mercator(lat, lng)
    return ProjectionOrigin(lat=float(lat), lng=float(lng), merc_x=mx, merc_y=my)


def mercator_to_local(mx: float, my: float, alt: float, origin: ProjectionOrigin) -> LocalPosition:
    """
    Mercator plane point to the local scene frame around `origin`.

    x = east, y = up (altitude), z = south. The z negation is shared by points
    and tiles; both must go through here.
    """
    return LocalPosition(
        x=mx - origin.merc_x,
        y=float(alt),
        z=-(my - origin.merc_y),
    )


def local_position(lat: float, lon: float, alt: float, origin: ProjectionOrigin) -> LocalPosition:
    """Geodetic point to local scene coordinates (meters) relative to `origin`."""
    mx, my = geodetic_to_mercator(lat, lon)
    return mercator_to_local(mx, my, alt, origin)


# -------------------------
# Slippy-map tile indices
# -------------------------
def lon_to_tile_x(lon: float, zoom: int) -> int:
    return int(math.floor((lon + 180.0) / 360.0 * (2 ** int(zoom))))


def lat_to_tile_y(lat: float, zoom: int) -> int:
    phi = math.radians(lat)
    n = 2 ** int(zoom)
    return int(math.floor((1.0 - math.log(math.tan(phi) + 1.0 / math.cos(phi)) / math.pi) / 2.0 * n))


def tile_footprint_center(tile_x: int, tile_y: int, zoom: int) -> Tuple[float, float]:
    """
    Mercator (x, y) of the center of tile (tile_x, tile_y) at `zoom`.

    Tile rows grow southward, so y is measured down from the top of the
    Mercator square (+πR).
    """
    n = float(2 ** int(zoom))
    mx = ((tile_x + 0.5) / n) * _CIRCUMFERENCE_M - _HALF_CIRCUMFERENCE_M
    my = _HALF_CIRCUMFERENCE_M - ((tile_y + 0.5) / n) * _CIRCUMFERENCE_M
    return mx, my


def tile_edge_meters(zoom: int) -> float:
    """
    Tile edge length in Mercator meters at `zoom`.

    NOTE: uses the equatorial circumference; ground distance shrinks by
    cos(lat) away from the equator. Points and tiles share the same plane, so
    this does not affect their mutual alignment.
    """
    return _CIRCUMFERENCE_M / (2 ** int(zoom))
