"""
Shared fixtures-as-functions for the test suite: in-memory archives, a scripted
tag reader and JPEGs carrying a GPS IFD.
"""

import asyncio
import io
import zipfile
from typing import Dict, Iterable, Optional

from PIL import Image
from PIL.ExifTags import GPS, IFD

from common.types import RawTagSet


def make_zip(files: Dict[str, bytes], dirs: Iterable[str] = ()) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for d in dirs:
            zf.writestr(d if d.endswith("/") else d + "/", b"")
        for name, data in files.items():
            zf.writestr(name, data)
    return buf.getvalue()


def raw_dms(lat, lat_ref, lon, lon_ref, alt=None, alt_ref=None, heading=None, heading_ref=None) -> RawTagSet:
    return RawTagSet(
        latitude=lat,
        latitude_ref=lat_ref,
        longitude=lon,
        longitude_ref=lon_ref,
        altitude=alt,
        altitude_ref=alt_ref,
        heading=heading,
        heading_ref=heading_ref,
    )


PARIS_A = raw_dms((48.0, 51.0, 29.6), "N", (2.0, 17.0, 40.2), "E", alt=35.0, alt_ref=0)
PARIS_B = raw_dms((48.0, 51.0, 24.0), "N", (2.0, 17.0, 35.0), "E", alt=40.0, alt_ref=0)
NORTH_POLE = raw_dms((90.0, 0.0, 0.0), "N", (0.0, 0.0, 0.0), "E")


class FakeTagReader:
    """
    Scripted async tag reader keyed by blob.

    - blobs in `table` resolve to their RawTagSet (None = no GPS)
    - blobs in `stall` never resolve
    - blobs in `fail` raise ValueError
    """

    def __init__(self, table: Optional[Dict[bytes, Optional[RawTagSet]]] = None, stall=(), fail=()):
        self.table = dict(table or {})
        self.stall = set(stall)
        self.fail = set(fail)
        self.calls = []

    async def __call__(self, blob: bytes) -> Optional[RawTagSet]:
        self.calls.append(blob)
        if blob in self.stall:
            await asyncio.Event().wait()
        if blob in self.fail:
            raise ValueError("corrupt image")
        await asyncio.sleep(0)
        return self.table.get(blob)


def jpeg_bytes(gps: Optional[Dict[int, object]] = None, size=(16, 16)) -> bytes:
    """Small JPEG, optionally with a GPS IFD ({GPS.* tag: value})."""
    img = Image.new("RGB", size, (90, 140, 200))
    buf = io.BytesIO()
    if gps:
        exif = Image.Exif()
        exif[IFD.GPSInfo] = dict(gps)
        img.save(buf, format="JPEG", exif=exif)
    else:
        img.save(buf, format="JPEG")
    return buf.getvalue()


def paris_jpeg(size=(16, 16)) -> bytes:
    return jpeg_bytes(
        {
            GPS.GPSLatitudeRef: "N",
            GPS.GPSLatitude: (48.0, 51.0, 29.6),
            GPS.GPSLongitudeRef: "E",
            GPS.GPSLongitude: (2.0, 17.0, 40.2),
            GPS.GPSAltitude: 35.0,
            GPS.GPSImgDirectionRef: "T",
            GPS.GPSImgDirection: 123.5,
        },
        size=size,
    )
