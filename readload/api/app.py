"""
FastAPI application — local host for one in-process reading session.
Runs on http://127.0.0.1:8765 by default.

The ReadingSession lives on app.state so that each call to create_app()
produces a fully independent engine with no shared module-level state.
This makes test isolation straightforward.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ..config import config
from ..inference import thresholds as T
from ..session.reading_session import ReadingSession

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Background tick loop
# ---------------------------------------------------------------------------

async def _tick_loop(session: ReadingSession) -> None:
    while True:
        await asyncio.sleep(T.TICK_SECONDS)
        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, session.tick)
        except Exception:
            logger.exception("Session tick failed")


# ---------------------------------------------------------------------------
# Lifespan — initialises and tears down all per-app state
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    if not hasattr(app.state, "session"):
        app.state.session = ReadingSession()

    tick_task = asyncio.create_task(
        _tick_loop(app.state.session)
    )

    yield

    tick_task.cancel()
    try:
        await tick_task
    except asyncio.CancelledError:
        pass


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(session: ReadingSession | None = None) -> FastAPI:
    app = FastAPI(
        title="Reading Load Engine",
        description="Local behavioral inference API for adaptive reading",
        version="0.1.0",
        lifespan=lifespan,
    )
    if session is not None:
        app.state.session = session

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from .routers import friction, report, session as session_router, signals

    app.include_router(session_router.router)
    app.include_router(signals.router)
    app.include_router(friction.router)
    app.include_router(report.router)

    @app.get("/health")
    def health(request: Request):
        s = getattr(request.app.state, "session", None)
        running = s.machine.session_running if s is not None else False
        return {"status": "ok", "version": "0.1.0", "session_running": running}

    return app


app = create_app()
