from __future__ import annotations

"""
Load pipeline and current-session holder.

    archive bytes -> entries -> run_batch -> build_frame -> resolve_tiles -> Session

A Session is immutable; SessionStore swaps the whole value in one assignment
after a successful load, so readers always see one origin with its own
positions and tiles.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from common.config import Settings
from common.logging_setup import get_logger, fields
from common.types import ImageRecord, TileFootprint
from ingest.archive import ArchiveError, open_archive
from ingest.batch import run_batch
from ingest.extract import TagReader
from scene.frame import SceneFrame, build_frame
from scene.tiles import resolve_tiles


log = get_logger("scene.session")


class LoadStatus(str, Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    EMPTY_NO_CANDIDATES = "empty_no_candidates"
    EMPTY_NO_GPS = "empty_no_gps"
    FAILED = "failed"


class LoadInProgressError(RuntimeError):
    """A second load was requested while one is still running."""


@dataclass(frozen=True)
class Session:
    records: Tuple[ImageRecord, ...]
    frame: SceneFrame
    tiles: Tuple[TileFootprint, ...]
    zoom: int
    total_candidates: int

    def record(self, name: str) -> Optional[ImageRecord]:
        for r in self.records:
            if r.name == name:
                return r
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Renderer payload (no image bytes)."""
        f = self.frame
        return {
            "origin": f.origin.to_dict(),
            "bounds": f.bounds.to_dict(),
            "camera_distance_m": f.bounds.camera_distance(),
            "zoom": self.zoom,
            "total_candidates": self.total_candidates,
            "records": [
                {**r.tag.to_dict(), "position": f.positions[r.name].to_dict()}
                for r in self.records
                if r.name in f.positions
            ],
            "dropped": list(f.dropped),
            "tiles": [t.to_dict() for t in self.tiles],
        }


@dataclass(frozen=True)
class LoadReport:
    status: LoadStatus
    message: str
    count: int = 0
    total_candidates: int = 0
    session: Optional[Session] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "count": self.count,
            "total_candidates": self.total_candidates,
        }


async def load_archive(data: bytes, tag_reader: TagReader, settings: Optional[Settings] = None) -> LoadReport:
    """
    Run the whole pipeline for one archive. Never raises for data problems;
    the outcome is carried by LoadReport.status.
    """
    S = settings or Settings()
    try:
        entries = open_archive(data)
    except ArchiveError as e:
        log.error("archive load failed", extra=fields(error=str(e)))
        return LoadReport(status=LoadStatus.FAILED, message=f"Error processing file: {e}")

    batch = await run_batch(
        entries, tag_reader, timeout_s=S.timeout_s, extensions=S.extensions, concurrency=S.concurrency
    )
    if batch.total_candidates == 0:
        return LoadReport(status=LoadStatus.EMPTY_NO_CANDIDATES, message="No images found in archive.")

    projectable = [r for r in batch.records if r.tag.is_projectable]
    if not projectable:
        return LoadReport(
            status=LoadStatus.EMPTY_NO_GPS,
            message="No images with GPS data found.",
            total_candidates=batch.total_candidates,
        )

    frame = build_frame(batch.records)
    tiles = resolve_tiles(frame.origin, zoom=S.zoom, radius=S.radius)
    session = Session(
        records=tuple(r for r in batch.records if r.name in frame.positions),
        frame=frame,
        tiles=tuple(tiles),
        zoom=S.zoom,
        total_candidates=batch.total_candidates,
    )
    n = len(session.records)
    log.info(
        "archive loaded",
        extra=fields(records=n, candidates=batch.total_candidates, lat=frame.origin.lat, lng=frame.origin.lng),
    )
    return LoadReport(
        status=LoadStatus.SUCCESS,
        message=f"Visualized {n} images with map overlay.",
        count=n,
        total_candidates=batch.total_candidates,
        session=session,
    )


class SessionStore:
    """
    Holds the current Session. Loads are serialized; an overlapping load is
    refused rather than interleaved. Only a SUCCESS replaces the current value.
    """

    def __init__(self, tag_reader: TagReader, settings: Optional[Settings] = None):
        self.tag_reader = tag_reader
        self.settings = settings or Settings()
        self._current: Optional[Session] = None
        self._status = LoadStatus.IDLE
        self._last: Optional[LoadReport] = None
        self._lock = asyncio.Lock()

    @property
    def current(self) -> Optional[Session]:
        return self._current

    @property
    def status(self) -> LoadStatus:
        return self._status

    @property
    def last_report(self) -> Optional[LoadReport]:
        return self._last

    async def load(self, data: bytes) -> LoadReport:
        if self._lock.locked():
            raise LoadInProgressError("an archive is already being loaded")
        async with self._lock:
            self._status = LoadStatus.IN_PROGRESS
            try:
                report = await load_archive(data, self.tag_reader, self.settings)
            except BaseException:
                self._status = LoadStatus.FAILED
                raise
            if report.status is LoadStatus.SUCCESS:
                self._current = report.session
            self._status = report.status
            self._last = report
            return report
