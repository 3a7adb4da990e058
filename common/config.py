from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml


DEFAULT_CONFIG_PATH = "config/params.yaml"

DEFAULTS: Dict[str, Any] = {
    "extraction": {
        "timeout_s": 2.0,
        "concurrency": 8,
        "extensions": [".jpg", ".jpeg", ".png", ".heic"],
    },
    "tiles": {
        "zoom": 19,
        "radius": 2,
        "url_template": "https://tile.openstreetmap.org/{zoom}/{x}/{y}.png",
        "user_agent": "photo-geoscene/0.1",
        "timeout_s": 10.0,
    },
    "logging": {"level": "INFO"},
    "server": {"host": "0.0.0.0", "port": 8000},
}


def _merge(base: Dict[str, Any], over: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in (over or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Read YAML config and overlay it on DEFAULTS. A missing file yields the defaults.
    """
    p = Path(path or DEFAULT_CONFIG_PATH)
    if not p.exists():
        return copy.deepcopy(DEFAULTS)
    with p.open("r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config root must be a mapping: {p}")
    return _merge(DEFAULTS, data)


@dataclass(frozen=True)
class Settings:
    """Typed view of the config sections used by the loader and tile provider."""
    timeout_s: float = 2.0
    concurrency: int = 8
    extensions: Tuple[str, ...] = (".jpg", ".jpeg", ".png", ".heic")
    zoom: int = 19
    radius: int = 2
    url_template: str = "https://tile.openstreetmap.org/{zoom}/{x}/{y}.png"
    user_agent: str = "photo-geoscene/0.1"
    tile_timeout_s: float = 10.0
    log_level: str = "INFO"

    @classmethod
    def from_config(cls, P: Dict[str, Any]) -> "Settings":
        ex = P.get("extraction", {})
        tl = P.get("tiles", {})
        return cls(
            timeout_s=float(ex.get("timeout_s", cls.timeout_s)),
            concurrency=int(ex.get("concurrency", cls.concurrency)),
            extensions=tuple(str(e).lower() for e in ex.get("extensions", cls.extensions)),
            zoom=int(tl.get("zoom", cls.zoom)),
            radius=int(tl.get("radius", cls.radius)),
            url_template=str(tl.get("url_template", cls.url_template)),
            user_agent=str(tl.get("user_agent", cls.user_agent)),
            tile_timeout_s=float(tl.get("timeout_s", cls.tile_timeout_s)),
            log_level=str(P.get("logging", {}).get("level", cls.log_level)),
        )
