from __future__ import annotations

"""
Raster tile provider for the map underlay.

Fetches `{zoom}/{x}/{y}` PNG tiles from a slippy-map server (OpenStreetMap by
default). Failures are logged and reported as None; the geometry of a session
never depends on whether tile imagery arrives.

⚠️ The OSM tile usage policy requires a descriptive User-Agent and forbids
heavy/bulk fetching. Point `tiles.url_template` at your own server for anything
beyond interactive use.

Usage:
    svc = TileProvider()
    png = svc.get_tile(19, 265_544, 180_375)
    if png:
        ...
"""

import logging
from typing import Optional

import requests


log = logging.getLogger(__name__)

DEFAULT_URL_TEMPLATE = "https://tile.openstreetmap.org/{zoom}/{x}/{y}.png"


class TileProvider:
    def __init__(
        self,
        url_template: str = DEFAULT_URL_TEMPLATE,
        user_agent: str = "photo-geoscene/0.1",
        session: Optional[requests.Session] = None,
    ):
        """
        Params:
            url_template: format string with {zoom}, {x}, {y} placeholders
            user_agent: sent with every request
            session: optional requests.Session for connection reuse
        """
        for key in ("{zoom}", "{x}", "{y}"):
            if key not in url_template:
                raise ValueError(f"url_template is missing {key}: {url_template!r}")
        self.url_template = url_template
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    # ----------------------------
    # Public API
    # ----------------------------
    def build_url(self, zoom: int, x: int, y: int) -> str:
        return self.url_template.format(zoom=int(zoom), x=int(x), y=int(y))

    def get_tile(self, zoom: int, x: int, y: int, timeout: float = 10.0) -> Optional[bytes]:
        """
        Fetch one tile image. Returns PNG bytes, or None on any failure.
        """
        n = 2 ** int(zoom)
        if not (0 <= int(x) < n and 0 <= int(y) < n):
            log.warning("Tile address out of range: %s/%s/%s", zoom, x, y)
            return None
        url = self.build_url(zoom, x, y)
        try:
            r = self.session.get(url, timeout=timeout)
            if r.status_code != 200 or not r.content:
                log.warning("Tile request failed: %s %s", r.status_code, url)
                return None
            return r.content
        except Exception as e:
            log.exception("Error fetching tile %s: %s", url, e)
            return None
