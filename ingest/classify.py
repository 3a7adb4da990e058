from __future__ import annotations

from pathlib import PurePosixPath
from typing import Iterable

SUPPORTED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".heic")

# macOS zip tools add a resource-fork tree and AppleDouble "._name" siblings.
_METADATA_DIR = "__MACOSX"
_APPLEDOUBLE_PREFIX = "._"


def is_candidate(name: str, is_directory: bool = False, extensions: Iterable[str] = SUPPORTED_EXTENSIONS) -> bool:
    """True when an archive entry should be handed to the tag reader."""
    if is_directory or not name or name.endswith("/"):
        return False
    path = PurePosixPath(name.replace("\\", "/"))
    if _METADATA_DIR in path.parts:
        return False
    if path.name.startswith(_APPLEDOUBLE_PREFIX):
        return False
    exts = {e.lower() if e.startswith(".") else "." + e.lower() for e in extensions}
    return path.suffix.lower() in exts
