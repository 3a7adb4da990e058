#!/usr/bin/env python3
"""
Load a ZIP of geotagged photos and print the resulting scene frame as JSON.

Prints the load status; on success also the projection origin, bounding
volume, per-image local positions (x east, y up, z south; meters) and the map
tile footprints.

Examples:
  python scripts/inspect_archive.py photos.zip
  python scripts/inspect_archive.py photos.zip --zoom 18 --radius 1
  python scripts/inspect_archive.py photos.zip --timeout 5 --config config/params.yaml
"""
from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from dataclasses import replace
from pathlib import Path

# Add the project root to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.config import Settings, load_config
from common.logging_setup import setup_logging
from ingest.tag_reader import PillowTagReader
from scene.session import LoadStatus, load_archive


def main() -> int:
    ap = argparse.ArgumentParser(description="Inspect GPS positions in a photo archive")
    ap.add_argument("archive", help="Path to a .zip of images")
    ap.add_argument("--config", default="config/params.yaml")
    ap.add_argument("--zoom", type=int, default=None, help="Override tile zoom level")
    ap.add_argument("--radius", type=int, default=None, help="Override tile grid radius")
    ap.add_argument("--timeout", type=float, default=None, help="Per-image tag read timeout (s)")
    ap.add_argument("--log-level", default=None)
    args = ap.parse_args()

    S = Settings.from_config(load_config(args.config))
    overrides = {
        k: v
        for k, v in (("zoom", args.zoom), ("radius", args.radius), ("timeout_s", args.timeout))
        if v is not None
    }
    S = replace(S, **overrides)
    # logs go to stderr so stdout stays valid JSON
    setup_logging(args.log_level or S.log_level, stream=sys.stderr, force=True)

    data = Path(args.archive).read_bytes()
    reader = PillowTagReader(max_workers=S.concurrency)
    try:
        report = asyncio.run(load_archive(data, reader, S))
    finally:
        reader.close()

    out = report.to_dict()
    if report.session is not None:
        out["session"] = report.session.to_dict()
    print(json.dumps(out, indent=2))
    return 1 if report.status is LoadStatus.FAILED else 0


if __name__ == "__main__":
    raise SystemExit(main())
