from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Sequence, Tuple

import numpy as np

from common.geo import DomainError, local_position, origin_from_latlon
from common.logging_setup import get_logger, fields
from common.types import BoundingVolume, ImageRecord, LocalPosition, ProjectionOrigin


log = get_logger("scene.frame")


@dataclass(frozen=True)
class SceneFrame:
    """Shared origin, per-record positions and their bounding box."""
    origin: ProjectionOrigin
    positions: Mapping[str, LocalPosition]  # read-only view keyed by entry name
    bounds: BoundingVolume
    dropped: Tuple[str, ...] = field(default=())


def centroid(records: Sequence[ImageRecord]) -> Tuple[float, float]:
    """
    Bounding-box midpoint (lat, lng) of the records.

    Not a geographic centroid; good enough at the scale of one shoot.
    """
    lats = [r.tag.latitude for r in records]
    lngs = [r.tag.longitude for r in records]
    return ((min(lats) + max(lats)) / 2.0, (min(lngs) + max(lngs)) / 2.0)


def bounding_volume(positions: Sequence[LocalPosition]) -> BoundingVolume:
    if not positions:
        raise ValueError("bounding_volume requires at least one position")
    pts = np.array([p.as_tuple() for p in positions], dtype=float)
    lo = pts.min(axis=0)
    hi = pts.max(axis=0)
    return BoundingVolume(
        min=LocalPosition(float(lo[0]), float(lo[1]), float(lo[2])),
        max=LocalPosition(float(hi[0]), float(hi[1]), float(hi[2])),
    )


def build_frame(records: Sequence[ImageRecord]) -> SceneFrame:
    """
    Derive the projection origin from `records` and place every record in it.

    Records outside the Mercator domain (|lat| >= 90) are dropped and reported
    in SceneFrame.dropped. Raises ValueError when nothing projectable remains.
    """
    if not records:
        raise ValueError("build_frame requires at least one record")

    usable = [r for r in records if r.tag.is_projectable]
    dropped = tuple(r.name for r in records if not r.tag.is_projectable)
    if dropped:
        log.warning("records outside projection domain", extra=fields(dropped=list(dropped)))
    if not usable:
        raise ValueError("no record has a projectable latitude")

    lat0, lng0 = centroid(usable)
    origin = origin_from_latlon(lat0, lng0)

    positions: Dict[str, LocalPosition] = {}
    for r in usable:
        t = r.tag
        try:
            positions[t.source_name] = local_position(t.latitude, t.longitude, t.altitude_m, origin)
        except DomainError as e:
            log.warning("projection failed", extra=fields(entry=t.source_name, error=str(e)))
            dropped += (t.source_name,)

    if not positions:
        raise ValueError("no record could be projected")

    bounds = bounding_volume(list(positions.values()))
    return SceneFrame(origin=origin, positions=MappingProxyType(positions), bounds=bounds, dropped=dropped)
