from __future__ import annotations

from typing import List

from common.geo import lat_to_tile_y, lon_to_tile_x, mercator_to_local, tile_edge_meters, tile_footprint_center
from common.types import ProjectionOrigin, TileFootprint

DEFAULT_ZOOM = 19
DEFAULT_RADIUS = 2
MAX_ZOOM = 30


def resolve_tiles(origin: ProjectionOrigin, zoom: int = DEFAULT_ZOOM, radius: int = DEFAULT_RADIUS) -> List[TileFootprint]:
    """
    (2*radius+1)^2 tiles centered on the tile containing `origin`, placed in the
    same local frame as the photo points (ground plane, y = 0).

    Indices are not wrapped at the antimeridian; out-of-range addresses are
    left for the tile source to reject.
    """
    zoom = int(zoom)
    radius = int(radius)
    if not 0 <= zoom <= MAX_ZOOM:
        raise ValueError(f"zoom must be in [0, {MAX_ZOOM}], got {zoom}")
    if radius < 0:
        raise ValueError(f"radius must be >= 0, got {radius}")

    cx = lon_to_tile_x(origin.lng, zoom)
    cy = lat_to_tile_y(origin.lat, zoom)
    edge = tile_edge_meters(zoom)

    out: List[TileFootprint] = []
    for tx in range(cx - radius, cx + radius + 1):
        for ty in range(cy - radius, cy + radius + 1):
            mx, my = tile_footprint_center(tx, ty, zoom)
            out.append(
                TileFootprint(
                    tile_x=tx,
                    tile_y=ty,
                    zoom=zoom,
                    center=mercator_to_local(mx, my, 0.0, origin),
                    edge_m=edge,
                )
            )
    return out
