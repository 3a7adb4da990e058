from __future__ import annotations

import math
from typing import Optional, Sequence

from common.logging_setup import get_logger, fields
from common.types import GeoTag, RawTagSet


log = get_logger("ingest.normalize")

_NEGATIVE_REFS = ("S", "W")


def _clean_ref(ref) -> str:
    if isinstance(ref, bytes):
        ref = ref.decode("ascii", errors="ignore")
    return str(ref).strip().strip("\x00").strip().upper()


def decimal_degrees(dms: Sequence[float], ref) -> float:
    """
    (degrees, minutes, seconds) + hemisphere letter -> signed decimal degrees.
    Southern and western hemispheres are negative.
    """
    if len(dms) != 3:
        raise ValueError(f"expected (d, m, s), got {len(dms)} components")
    d, m, s = (float(v) for v in dms)
    dd = d + m / 60.0 + s / 3600.0
    if _clean_ref(ref) in _NEGATIVE_REFS:
        dd = -dd
    return dd


def normalize(raw: Optional[RawTagSet], source_name: str) -> Optional[GeoTag]:
    """
    Turn a RawTagSet into a GeoTag, or None when the position is incomplete.

    Lat/lon are passed through unclamped; the projection rejects |lat| >= 90.
    Heading is kept as reported (true or magnetic) and labeled with its reference.
    """
    if raw is None:
        return None
    if raw.latitude is None or raw.longitude is None or not raw.latitude_ref or not raw.longitude_ref:
        log.debug("no gps position", extra=fields(entry=source_name))
        return None

    try:
        lat = decimal_degrees(raw.latitude, raw.latitude_ref)
        lon = decimal_degrees(raw.longitude, raw.longitude_ref)

        alt = 0.0
        if raw.altitude is not None:
            alt = float(raw.altitude)
            if raw.altitude_ref is not None and int(raw.altitude_ref) == 1:
                alt = -alt

        heading = None
        if raw.heading is not None:
            heading = float(raw.heading) % 360.0
            # tiny negatives round up to exactly 360.0
            if heading >= 360.0:
                heading = 0.0
    except (TypeError, ValueError, ZeroDivisionError) as e:
        log.debug("malformed gps tags", extra=fields(entry=source_name, error=str(e)))
        return None

    if not (math.isfinite(lat) and math.isfinite(lon)):
        log.debug("non-finite gps values", extra=fields(entry=source_name))
        return None
    if not math.isfinite(alt):
        alt = 0.0
    if heading is not None and not math.isfinite(heading):
        heading = None

    heading_ref = _clean_ref(raw.heading_ref) if (heading is not None and raw.heading_ref) else None
    return GeoTag(
        source_name=source_name,
        latitude=lat,
        longitude=lon,
        altitude_m=alt,
        heading_deg=heading,
        heading_ref=heading_ref or None,
    )
