from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from common.logging_setup import get_logger, fields
from common.types import GeoTag, RawTagSet
from ingest.normalize import normalize


log = get_logger("ingest.extract")

TagReader = Callable[[bytes], Awaitable[Optional[RawTagSet]]]

DEFAULT_TIMEOUT_S = 2.0
# entries decoded at once; tag readers backed by a thread pool should match it
DEFAULT_CONCURRENCY = 8


async def extract(
    entry_name: str,
    blob: bytes,
    tag_reader: TagReader,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> Optional[GeoTag]:
    """
    Read GPS tags from one image and normalize them.

    Resolves to None for anything short of a usable position: the reader
    timing out, raising, or returning no tags. Only cancellation of the
    calling task propagates.

    The budget starts when the reader is called, so callers fanning out many
    entries should cap how many are in flight (see run_batch).
    """
    try:
        raw = await asyncio.wait_for(tag_reader(blob), timeout=timeout_s)
    except asyncio.TimeoutError:
        log.warning("tag reader timed out", extra=fields(entry=entry_name, timeout_s=timeout_s))
        return None
    except Exception as e:
        log.warning("tag reader failed", extra=fields(entry=entry_name, error=repr(e)))
        return None

    tag = normalize(raw, entry_name)
    if tag is None:
        log.debug("entry skipped", extra=fields(entry=entry_name, reason="no_gps"))
    return tag
