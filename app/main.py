"""Entry point for the querypanel FastAPI application."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from fastapi import Depends, FastAPI

from .config import settings
from .api import panel as panel_router
from .core.providers import get_search_client
from .infra.search_client import SearchClient


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    configure_logging(settings.log_level)
    yield


app = FastAPI(
    title="querypanel API",
    version="0.1.0",
    summary="Query/response panel sessions over a retrieval backend",
    lifespan=lifespan,
)


@app.get("/", tags=["meta"])
def index() -> Dict[str, Any]:
    """Basic service descriptor."""

    return {
        "service": "querypanel-api",
        "environment": settings.app_env,
        "docs": "/docs",
        "health": "/healthz",
    }


@app.get("/healthz", tags=["meta"])
async def healthz(client: SearchClient = Depends(get_search_client)) -> Dict[str, Any]:
    """Liveness plus reachability of the retrieval backend."""

    return {
        "status": "ok",
        "environment": settings.app_env,
        "dependencies": {"search_backend": await client.check_reachable()},
    }


app.include_router(panel_router.router, prefix="/api/v1")
