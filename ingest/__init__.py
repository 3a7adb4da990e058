"""
Ingest — archive entries to validated GeoTags

- classify: which archive entries are candidate images
- normalize: raw EXIF GPS fields -> GeoTag (signed decimal degrees, altitude, heading)
- extract: timeout-bounded tag reading for a single entry, never raises
- batch: concurrent fan-out over an archive with per-entry isolation
- archive / tag_reader: ZIP and Pillow adapters for the two external collaborators
"""
from .batch import BatchResult, run_batch
from .extract import extract
from .normalize import decimal_degrees, normalize

__all__ = ["BatchResult", "run_batch", "extract", "decimal_degrees", "normalize"]
