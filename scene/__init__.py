"""
Scene — local 3D frame for a loaded batch

- frame: centroid origin, per-record local positions, bounding volume
- tiles: slippy-map tile addresses and footprints in the same frame
- session: full load pipeline, status reporting and the current-session store
"""
from .frame import SceneFrame, build_frame
from .tiles import resolve_tiles

__all__ = ["SceneFrame", "build_frame", "resolve_tiles"]
