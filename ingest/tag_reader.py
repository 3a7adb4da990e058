from __future__ import annotations

"""
Pillow-backed GPS tag reader.

Reads the GPS IFD (0x8825) of an image and returns a RawTagSet. Decoding runs
on a dedicated thread pool so that a caller-side asyncio timeout stays
effective on a slow or stuck decode. Formats Pillow cannot open (e.g. HEIC without a plugin)
raise, which the extractor treats as "no GPS".
"""

import asyncio
import io
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

from PIL import Image
from PIL.ExifTags import GPS, IFD

from common.types import RawTagSet
from ingest.extract import DEFAULT_CONCURRENCY


def _to_float(v: Any) -> Optional[float]:
    if v is None:
        return None
    # IFDRational, Fraction, int, float; (num, den) tuples from older encoders
    if isinstance(v, tuple) and len(v) == 2:
        num, den = v
        return float(num) / float(den)
    return float(v)


def _to_dms(v: Any):
    if v is None:
        return None
    return tuple(_to_float(c) for c in v)


def _to_ref(v: Any) -> Optional[str]:
    if v is None:
        return None
    if isinstance(v, bytes):
        v = v.decode("ascii", errors="ignore")
    s = str(v).strip("\x00 ")
    return s or None


def _to_int(v: Any) -> Optional[int]:
    if v is None:
        return None
    if isinstance(v, bytes):
        return v[0] if v else None
    return int(v)


def gps_ifd_to_tags(gps: Dict[int, Any]) -> RawTagSet:
    """Map a raw GPS IFD dict (tag id -> value) onto a RawTagSet."""
    return RawTagSet(
        latitude=_to_dms(gps.get(GPS.GPSLatitude)),
        latitude_ref=_to_ref(gps.get(GPS.GPSLatitudeRef)),
        longitude=_to_dms(gps.get(GPS.GPSLongitude)),
        longitude_ref=_to_ref(gps.get(GPS.GPSLongitudeRef)),
        altitude=_to_float(gps.get(GPS.GPSAltitude)),
        altitude_ref=_to_int(gps.get(GPS.GPSAltitudeRef)),
        heading=_to_float(gps.get(GPS.GPSImgDirection)),
        heading_ref=_to_ref(gps.get(GPS.GPSImgDirectionRef)),
    )


def read_gps_tags(blob: bytes) -> Optional[RawTagSet]:
    """Blocking read. Returns None when the image has no GPS IFD."""
    with Image.open(io.BytesIO(blob)) as img:
        exif = img.getexif()
        gps = exif.get_ifd(IFD.GPSInfo) if exif else None
    if not gps:
        return None
    return gps_ifd_to_tags(dict(gps))


class PillowTagReader:
    """
    Async callable: `await reader(blob) -> Optional[RawTagSet]`.

    Decodes on a private pool of `max_workers` threads. Size it to the batch
    concurrency so a gated entry never queues behind other decodes.
    """

    def __init__(self, max_workers: int = DEFAULT_CONCURRENCY):
        self.max_workers = max_workers
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="exif")

    async def __call__(self, blob: bytes) -> Optional[RawTagSet]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._pool, read_gps_tags, blob)

    def close(self) -> None:
        # a timed-out decode keeps its thread until it returns; don't wait for it
        self._pool.shutdown(wait=False)
