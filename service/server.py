from __future__ import annotations

import mimetypes
import os
from typing import Dict

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from common.config import Settings, load_config
from common.logging_setup import get_logger, setup_logging, fields
from ingest.tag_reader import PillowTagReader
from scene.session import LoadInProgressError, LoadStatus, SessionStore
from service.tile_provider import TileProvider


P: Dict = load_config(os.environ.get("GEOSCENE_CONFIG"))
S = Settings.from_config(P)
setup_logging(S.log_level, force=True)
log = get_logger("service.server")

# Instances
store = SessionStore(PillowTagReader(max_workers=S.concurrency), S)
tiles = TileProvider(url_template=S.url_template, user_agent=S.user_agent)

app = FastAPI(title="Photo GeoScene API", version="0.1.0")

# (Optional) CORS for a browser-side renderer
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # tighten as needed
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    cur = store.current
    return {
        "status": "ok",
        "load_status": store.status.value,
        "records": len(cur.records) if cur else 0,
        "tiles": {"zoom": S.zoom, "radius": S.radius, "url_template": S.url_template},
    }


@app.post("/archives")
async def load_archive(request: Request):
    """
    Body: raw ZIP bytes. Replaces the current session only on success.
    """
    data = await request.body()
    if not data:
        raise HTTPException(status_code=400, detail="empty_body")
    try:
        report = await store.load(data)
    except LoadInProgressError:
        raise HTTPException(status_code=409, detail="load_in_progress")
    log.info("load finished", extra=fields(**report.to_dict()))
    code = 400 if report.status is LoadStatus.FAILED else 200
    return JSONResponse(report.to_dict(), status_code=code)


@app.get("/session")
def session():
    cur = store.current
    if cur is None:
        raise HTTPException(status_code=404, detail="no_session")
    return cur.to_dict()


@app.get("/images/{name:path}")
def image(name: str):
    """Original image bytes for on-demand display."""
    cur = store.current
    rec = cur.record(name) if cur else None
    if rec is None:
        raise HTTPException(status_code=404, detail="image_not_found")
    media = mimetypes.guess_type(name)[0] or "application/octet-stream"
    return Response(content=rec.blob, media_type=media)


@app.get("/tiles/{z}/{x}/{y}")
def tile(z: int, x: int, y: int):
    png = tiles.get_tile(z, x, y, timeout=S.tile_timeout_s)
    if png is None:
        return JSONResponse({"error": "tile_unavailable"}, status_code=502)
    return Response(
        content=png,
        media_type="image/png",
        headers={"Cache-Control": "public, max-age=86400", "X-Tile-Z": str(z), "X-Tile-X": str(x), "X-Tile-Y": str(y)},
    )


# -------- local dev entrypoint --------
if __name__ == "__main__":
    srv = P.get("server", {})
    uvicorn.run(app, host=srv.get("host", "0.0.0.0"), port=int(srv.get("port", 8000)))
