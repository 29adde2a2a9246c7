"""AchieveSync API - Main Application Entry Point.

A local backend that detects the running Steam title, keeps its
achievement catalog in sync and streams unlock events and profile
snapshots to overlays, dashboards and notifiers.

Usage:
    uvicorn main:app --host 127.0.0.1 --port 8000

Example:
    $ curl http://localhost:8000/api/v1/session
    $ curl -N http://localhost:8000/api/v1/events
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.endpoints.achievements import router as achievements_router
from app.lifespan import lifespan

# Application metadata
APP_TITLE = "AchieveSync API"
APP_DESCRIPTION = """
## Game Session Detection & Achievement Sync

AchieveSync API watches for the game you are playing and reports newly
unlocked achievements as they happen.

### Features

- **Session Detection**: Steam presence first, running-process scan as fallback
- **Title Names**: Install directory, Steam store and local manifests, cached
- **Unlock Events**: Only locked to unlocked transitions, never on first load
- **Profile Snapshots**: Totals and completion percentage per title
- **Event Stream**: Server-sent events for overlays and notifiers

### Getting Started

1. Start the server: `uvicorn main:app`
2. Open API docs: http://localhost:8000/docs
3. Query the session: `GET /api/v1/session`
4. Subscribe to events: `GET /api/v1/events`
"""
APP_VERSION = "1.0.0"


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    application = FastAPI(
        title=APP_TITLE,
        description=APP_DESCRIPTION,
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Overlays and dashboards run as local web views
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    application.include_router(achievements_router)

    @application.get(
        "/",
        response_class=JSONResponse,
        tags=["Root"],
        summary="API Root",
        description="Returns API information and endpoint links.",
    )
    async def root() -> dict:
        return {
            "name": APP_TITLE,
            "version": APP_VERSION,
            "docs": "/docs",
            "endpoints": {
                "session": "/api/v1/session",
                "achievements": "/api/v1/achievements",
                "stats": "/api/v1/achievements/stats",
                "profile": "/api/v1/profile",
                "status": "/api/v1/status",
                "refresh": "/api/v1/refresh",
                "events": "/api/v1/events",
            },
        }

    @application.get(
        "/health",
        response_class=JSONResponse,
        tags=["Health"],
        summary="Health Check",
        description="Returns service health status.",
    )
    async def health_check() -> dict:
        return {"status": "healthy", "service": APP_TITLE, "version": APP_VERSION}

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        log_level="info",
    )
