"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from gravity_snake.server.routes import levels_router, router
from gravity_snake.server.session_manager import SessionManager
from gravity_snake.server.websocket import ws_router


@asynccontextmanager
async def _lifespan(app: FastAPI):
    app.state.session_manager = SessionManager()
    yield
    await app.state.session_manager.cleanup()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Gravity Snake API", version="0.1.0", lifespan=_lifespan,
    )
    app.include_router(levels_router)
    app.include_router(router)
    app.include_router(ws_router)
    return app
