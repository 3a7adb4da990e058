from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Iterable, List, Optional, Protocol

from common.logging_setup import get_logger, fields
from common.types import ImageRecord
from ingest.classify import SUPPORTED_EXTENSIONS, is_candidate
from ingest.extract import DEFAULT_CONCURRENCY, DEFAULT_TIMEOUT_S, TagReader, extract


log = get_logger("ingest.batch")


class Entry(Protocol):
    name: str
    is_directory: bool

    def read_bytes(self) -> Awaitable[bytes]: ...


@dataclass(frozen=True)
class BatchResult:
    """
    Outcome of one archive pass.

    `records` order is unspecified. `total_candidates` counts entries that passed
    classification, which separates "no images" from "images without GPS".
    """
    records: List[ImageRecord]
    total_candidates: int

    @property
    def skipped(self) -> int:
        return self.total_candidates - len(self.records)


async def _process_entry(
    entry: Entry,
    tag_reader: TagReader,
    timeout_s: float,
    gate: asyncio.Semaphore,
) -> Optional[ImageRecord]:
    # the timeout inside extract only starts once this entry holds a slot
    async with gate:
        try:
            blob = await entry.read_bytes()
        except Exception as e:
            log.warning("entry unreadable", extra=fields(entry=entry.name, error=repr(e)))
            return None
        tag = await extract(entry.name, blob, tag_reader, timeout_s=timeout_s)
    if tag is None:
        return None
    return ImageRecord(tag=tag, blob=blob)


async def run_batch(
    entries: Iterable[Entry],
    tag_reader: TagReader,
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> BatchResult:
    """
    Extract GeoTags from every candidate entry concurrently and wait for all of them.

    At most `concurrency` entries are read and decoded at once; the rest wait
    for a slot without spending their timeout. Per-entry failures are already
    folded into None by the tasks; nothing from an individual entry can fail
    the batch.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}")
    exts = tuple(extensions)
    candidates = [e for e in entries if is_candidate(e.name, e.is_directory, exts)]
    gate = asyncio.Semaphore(concurrency)
    results = await asyncio.gather(*(_process_entry(e, tag_reader, timeout_s, gate) for e in candidates))
    records = [r for r in results if r is not None]
    log.info(
        "batch complete",
        extra=fields(candidates=len(candidates), records=len(records), skipped=len(candidates) - len(records)),
    )
    return BatchResult(records=records, total_candidates=len(candidates))
