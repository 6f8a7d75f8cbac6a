"""
Scene Loader Service, FastAPI entry point.

Endpoints:
  GET  /                  Service info
  GET  /health            Tick loop + session health
  POST /sessions          Start a load session (409 while one is fetching)
  GET  /sessions/current  Latest session status
  GET  /scene             Current scene tree dump
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from engine.logging import configure_logging

from .config import settings
from .errors import LoaderError, SessionBusyError
from .host import LoaderHost
from .schemas import LoadRequest, SceneNodeView, SessionAccepted, SessionView

configure_logging(settings.log_level)
logger = logging.getLogger("scene_loader.main")


# ---------------------------------------------------------------------------
# Host (singleton)
# ---------------------------------------------------------------------------

host = LoaderHost(settings)


# ---------------------------------------------------------------------------
# Auth helper
# ---------------------------------------------------------------------------

def _require_api_key(x_api_key: str | None) -> None:
    if settings.api_key and x_api_key != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(_: FastAPI):
    await host.startup()
    yield
    await host.shutdown()


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Scene Loader Service",
    version="1.0.0",
    description=(
        "Pulls a remote glTF binary asset, corrects its orientation and units, "
        "and attaches it to a running scene under the desktop or immersive "
        "locomotion rig that matches the detected environment."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get("/")
async def root():
    return {
        "service": settings.service_name,
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health():
    session = host.composer.session
    return {
        "status": "ok" if host.running else "stopped",
        "service": settings.service_name,
        "frames": host.tree.frames,
        "session_state": host.composer.state.value,
        "last_outcome": session.outcome.value if session and session.outcome else None,
        "xr_interface_available": settings.xr_interface_available,
    }


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

@app.post("/sessions", response_model=SessionAccepted, status_code=202)
async def start_session(body: LoadRequest, x_api_key: str | None = Header(default=None)):
    _require_api_key(x_api_key)
    try:
        record = host.start_session(body.url)
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except LoaderError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return SessionAccepted(session_id=record.id, address=record.request.address)


@app.get("/sessions/current", response_model=SessionView)
async def current_session(x_api_key: str | None = Header(default=None)):
    _require_api_key(x_api_key)
    try:
        record = host.get_session()
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return record.as_view()


# ---------------------------------------------------------------------------
# Scene
# ---------------------------------------------------------------------------

@app.get("/scene", response_model=SceneNodeView)
async def scene_dump(x_api_key: str | None = Header(default=None)):
    _require_api_key(x_api_key)
    scene = host.tree.current_scene or host.tree.root
    return SceneNodeView.model_validate(scene.to_dict())


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "scene_loader.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=bool(int(os.getenv("UVICORN_RELOAD", "0"))),
    )
