from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Optional, Tuple, Any, Dict
import math


Dms = Tuple[float, float, float]


@dataclass(frozen=True, slots=True)
class RawTagSet:
    """
    GPS fields as produced by a tag reader for a single image. Any may be None.

    Attributes:
        latitude, longitude: (degrees, minutes, seconds) triples.
        latitude_ref, longitude_ref: hemisphere letters ("N"/"S", "E"/"W").
        altitude: meters (rational already reduced to float).
        altitude_ref: 0 = above sea level, 1 = below.
        heading: image direction in degrees.
        heading_ref: "T" (true north) or "M" (magnetic north).
    """
    latitude: Optional[Dms] = None
    latitude_ref: Optional[str] = None
    longitude: Optional[Dms] = None
    longitude_ref: Optional[str] = None
    altitude: Optional[float] = None
    altitude_ref: Optional[int] = None
    heading: Optional[float] = None
    heading_ref: Optional[str] = None


@dataclass(frozen=True, slots=True)
class GeoTag:
    """
    Normalized GPS metadata for one archive entry.

    Attributes:
        source_name: entry name inside the archive.
        latitude, longitude: signed decimal degrees (not clamped).
        altitude_m: signed meters, 0.0 when the image carried none.
        heading_deg: degrees clockwise from north in [0, 360), or None.
        heading_ref: reference of heading_deg ("T"/"M"); not applied as a correction.
    """
    source_name: str
    latitude: float
    longitude: float
    altitude_m: float = 0.0
    heading_deg: Optional[float] = None
    heading_ref: Optional[str] = None

    @property
    def is_projectable(self) -> bool:
        return math.isfinite(self.latitude) and abs(self.latitude) < 90.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ImageRecord:
    """A GeoTag plus the original image bytes (shared, never copied)."""
    tag: GeoTag
    blob: bytes = field(repr=False)

    @property
    def name(self) -> str:
        return self.tag.source_name


@dataclass(frozen=True, slots=True)
class ProjectionOrigin:
    """Dataset centroid and its Web Mercator coordinates."""
    lat: float
    lng: float
    merc_x: float
    merc_y: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class LocalPosition:
    """Scene coordinates in meters: x = east, y = up, z = south."""
    x: float
    y: float
    z: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass(frozen=True, slots=True)
class TileFootprint:
    """A slippy-map tile address and its placement in the local frame."""
    tile_x: int
    tile_y: int
    zoom: int
    center: LocalPosition
    edge_m: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "z": self.zoom,
            "x": self.tile_x,
            "y": self.tile_y,
            "center": self.center.to_dict(),
            "edge_m": self.edge_m,
        }


@dataclass(frozen=True, slots=True)
class BoundingVolume:
    """
    Axis-aligned box over all local positions.

    A single point yields min == max; consumers framing a camera on it should
    go through camera_distance(), which applies a floor.
    """
    min: LocalPosition
    max: LocalPosition

    @property
    def size(self) -> Tuple[float, float, float]:
        return (self.max.x - self.min.x, self.max.y - self.min.y, self.max.z - self.min.z)

    @property
    def center(self) -> LocalPosition:
        return LocalPosition(
            x=0.5 * (self.min.x + self.max.x),
            y=0.5 * (self.min.y + self.max.y),
            z=0.5 * (self.min.z + self.max.z),
        )

    @property
    def is_degenerate(self) -> bool:
        return all(s == 0.0 for s in self.size)

    def camera_distance(
        self,
        floor: float = 50.0,
        ceiling: float = 50_000.0,
        fov_deg: float = 75.0,
    ) -> float:
        """
        Distance at which a camera with vertical `fov_deg` sees the whole box.
        Clamped to [floor, ceiling] so degenerate boxes still frame sensibly.
        """
        radius = 0.5 * math.sqrt(sum(s * s for s in self.size))
        half_fov = math.radians(fov_deg) / 2.0
        dist = radius / math.tan(half_fov) if radius > 0 else 0.0
        return float(min(ceiling, max(floor, dist)))

    def to_dict(self) -> Dict[str, Any]:
        return {"min": self.min.to_dict(), "max": self.max.to_dict()}
