"""Application lifespan management for AchieveSync API.

This module provides the FastAPI lifespan context manager that builds
the platform client, the sync engine and the poll scheduler on startup
and stops them on shutdown.

Example:
    >>> from fastapi import FastAPI
    >>> from app.lifespan import lifespan
    >>>
    >>> app = FastAPI(lifespan=lifespan)
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

from fastapi import FastAPI

from adapters.base import BasePlatformClient
from adapters.steam_client import LocalSteamClient
from adapters.steam_library import SteamLibrary
from adapters.strategies.presence import PresenceStrategy
from adapters.strategies.process_scan import ProcessScanStrategy
from adapters.registry import StrategyRegistry
from app.config import Settings, get_settings
from core.name_cache import NameResolutionCache
from core.scheduler import PollScheduler
from core.sync_engine import AchievementSyncEngine

# Configure structured JSON logging
logger = logging.getLogger(__name__)


class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON-formatted log string.
        """
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": getattr(record, "component", "lifespan"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def configure_logging(level: int = logging.INFO) -> None:
    """Install the JSON formatter on the root logger once."""
    root = logging.getLogger()
    if any(isinstance(h.formatter, JsonFormatter) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(level)


def build_engine(
    settings: Settings,
    client: Optional[BasePlatformClient] = None,
) -> AchievementSyncEngine:
    """Wire the engine and its collaborators from *settings*.

    Args:
        settings: Application settings.
        client: Platform client; a LocalSteamClient if None.

    Returns:
        A ready, not yet started, engine.
    """
    library = SteamLibrary(settings.STEAM_ROOT)
    client = client or LocalSteamClient(library, settings.CLIENT_PROCESS_NAMES)

    registry = StrategyRegistry()
    registry.register(PresenceStrategy())
    registry.register(
        ProcessScanStrategy(
            config={
                "exclude_names": settings.CLIENT_PROCESS_NAMES,
                "exclude_tool_dirs": settings.CLIENT_TOOL_DIRS,
            },
            library=library,
        )
    )

    names = NameResolutionCache(
        client,
        library=library,
        store_url=settings.STORE_APPDETAILS_URL,
        timeout=settings.NAME_LOOKUP_TIMEOUT,
    )
    return AchievementSyncEngine(
        client,
        registry=registry,
        names=names,
        library=library,
        status_history=settings.STATUS_HISTORY_SIZE,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Async context manager for FastAPI application lifespan.

    Manages startup and shutdown of application services:
    - Startup: Builds the sync engine and starts the poll scheduler
    - Shutdown: Stops ticking, waits for the in-flight cycle, releases
      the platform client

    Args:
        app: The FastAPI application instance.

    Yields:
        None - control returns to FastAPI during application runtime.
    """
    # === STARTUP ===
    configure_logging()
    logger.info(
        "AchieveSync API starting up...",
        extra={"component": "lifespan"},
    )

    settings = getattr(app.state, "settings", None) or get_settings()
    engine = getattr(app.state, "engine", None) or build_engine(settings)
    scheduler = PollScheduler(engine, interval=settings.POLL_INTERVAL)

    app.state.settings = settings
    app.state.engine = engine
    app.state.scheduler = scheduler

    await scheduler.start()

    logger.info(
        "AchieveSync API startup complete - polling every "
        f"{settings.POLL_INTERVAL}s",
        extra={"component": "lifespan"},
    )

    try:
        yield
    finally:
        # === SHUTDOWN ===
        logger.info(
            "AchieveSync API shutting down...",
            extra={"component": "lifespan"},
        )

        await scheduler.stop()
        engine.shutdown()

        logger.info(
            "AchieveSync API shutdown complete",
            extra={"component": "lifespan"},
        )
