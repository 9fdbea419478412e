"""Mind Palace API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map MindPalaceError -> structured JSON responses
    - One MindPalace handle per app, created and started by the lifespan,
      closed (pending writes drained) on shutdown

Design Decisions:
    - Lifespan context instead of @app.on_event; the palace is closed on exit
    - The handle lives on app.state; routes reach it through the get_palace dependency
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mindpalace import __version__
from mindpalace.api.error_handlers import register_error_handlers
from mindpalace.api.routes import collections, health, media, snapshot
from mindpalace.config import get_settings
from mindpalace.infrastructure.observability import setup_logging
from mindpalace.services.palace import open_palace

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format, settings.database_echo)
    async with open_palace(settings) as palace:
        app.state.palace = palace
        logger.info("Mind Palace API started")
        yield
        logger.info("Mind Palace API shutting down")


app = FastAPI(
    title="Mind Palace API", version=__version__, lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(collections.router)
app.include_router(media.router)
app.include_router(snapshot.router)

register_error_handlers(app)
