from __future__ import annotations

"""
ZIP container adapter.

Entries expose their name, a directory flag and an awaitable byte reader.
Member bytes are read lazily from an in-memory ZipFile shared by all entries;
decompression runs in a worker thread so the event loop stays free.
"""

import asyncio
import io
import zipfile
from dataclasses import dataclass, field
from typing import List


class ArchiveError(Exception):
    """The container could not be opened at all."""


@dataclass(frozen=True)
class ArchiveEntry:
    name: str
    is_directory: bool
    _zf: zipfile.ZipFile = field(repr=False, compare=False)
    _info: zipfile.ZipInfo = field(repr=False, compare=False)

    async def read_bytes(self) -> bytes:
        # by ZipInfo, not name: duplicate names each keep their own member
        return await asyncio.to_thread(self._zf.read, self._info)


def open_archive(data: bytes) -> List[ArchiveEntry]:
    """
    Open ZIP bytes and list its entries in archive order.

    Raises ArchiveError when `data` is not a readable ZIP container.
    """
    try:
        zf = zipfile.ZipFile(io.BytesIO(data))
        infos = zf.infolist()
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError) as e:
        raise ArchiveError(f"cannot open archive: {e}") from e
    return [ArchiveEntry(name=i.filename, is_directory=i.is_dir(), _zf=zf, _info=i) for i in infos]
