"""Session and achievement API endpoints for AchieveSync API.

This module exposes the sync engine to presentation layers (overlay,
dashboard, notifiers).

Endpoints:
    GET  /api/v1/session - Active session
    GET  /api/v1/achievements - Current achievement list
    GET  /api/v1/achievements/stats - Counters and rarity breakdown
    POST /api/v1/achievements/simulate - Emit a test unlock event
    GET  /api/v1/profile - Latest profile snapshot
    GET  /api/v1/status - Recent status messages
    POST /api/v1/refresh - Out-of-band detection cycle
    GET  /api/v1/events - Server-sent event stream

Example:
    >>> # Start server: uvicorn main:app
    >>> # GET http://localhost:8000/api/v1/session
    >>> # Response: {"detected": true, "session": {...}}
"""

from __future__ import annotations

import asyncio
from typing import Annotated, AsyncGenerator, List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from core.sync_engine import AchievementSyncEngine
from models.achievement import (
    AchievementRecord,
    AchievementStats,
    ActiveSessionResponse,
    ProfileSnapshot,
)
from models.events import StatusMessage

KEEPALIVE_SECONDS = 15.0

router = APIRouter(
    prefix="/api/v1",
    tags=["Achievements"],
    responses={
        503: {"description": "Service unavailable - sync engine not initialized"},
    },
)


async def get_engine(request: Request) -> AchievementSyncEngine:
    """Dependency to get the sync engine from app state.

    Raises:
        HTTPException: If the engine is not initialized (503).
    """
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(
            status_code=503,
            detail="Sync engine not initialized. Server may be starting up.",
        )
    return engine


# Type alias for dependency injection
EngineDep = Annotated[AchievementSyncEngine, Depends(get_engine)]


@router.get(
    "/session",
    response_model=ActiveSessionResponse,
    summary="Get Active Session",
    description="Return the currently detected game session, if any.",
)
async def get_session(engine: EngineDep) -> ActiveSessionResponse:
    session = engine.get_current_session()
    return ActiveSessionResponse(
        detected=session is not None,
        session=session,
        connected=engine.is_connected(),
        achievement_count=len(engine.get_current_achievements()),
    )


@router.get(
    "/achievements",
    response_model=List[AchievementRecord],
    summary="List Achievements",
    description="Current achievement list of the active session.",
)
async def list_achievements(engine: EngineDep) -> List[AchievementRecord]:
    return engine.get_current_achievements()


@router.get(
    "/achievements/stats",
    response_model=AchievementStats,
    summary="Achievement Stats",
    description="Totals, completion and rarity breakdown of the active session.",
)
async def get_achievement_stats(engine: EngineDep) -> AchievementStats:
    return engine.get_achievement_stats()


@router.post(
    "/achievements/simulate",
    response_model=AchievementRecord,
    summary="Simulate Unlock",
    description="Emit a synthetic unlock event to test overlay wiring.",
    responses={404: {"description": "Simulation disabled"}},
)
async def simulate_unlock(request: Request, engine: EngineDep) -> AchievementRecord:
    settings = getattr(request.app.state, "settings", None)
    if settings is not None and not settings.ENABLE_SIMULATE_ENDPOINT:
        raise HTTPException(status_code=404, detail="Simulation is disabled")
    return engine.simulate_unlock()


@router.get(
    "/profile",
    response_model=ProfileSnapshot,
    summary="Get Profile Snapshot",
    description="Latest published profile snapshot.",
    responses={404: {"description": "No snapshot published yet"}},
)
async def get_profile(engine: EngineDep) -> ProfileSnapshot:
    snapshot = engine.get_latest_profile()
    if snapshot is None:
        raise HTTPException(status_code=404, detail="No profile snapshot yet")
    return snapshot


@router.get(
    "/status",
    response_model=List[StatusMessage],
    summary="Recent Status Messages",
    description="Advisory diagnostic trail, oldest first.",
)
async def get_status(engine: EngineDep) -> List[StatusMessage]:
    return engine.get_recent_status()


@router.post(
    "/refresh",
    response_model=dict,
    summary="Force Refresh",
    description="Run a detection and sync cycle now, outside the normal tick.",
)
async def force_refresh(engine: EngineDep) -> dict:
    """Trigger an out-of-band cycle.

    Returns:
        Dict with ``ran`` False when a cycle was already in progress.
    """
    loop = asyncio.get_running_loop()
    ran = await loop.run_in_executor(None, engine.force_refresh)
    return {"ran": ran}


@router.get(
    "/events",
    summary="Event Stream",
    description="Server-sent events: session_changed, achievement_unlocked, "
    "profile_updated, status_message.",
)
async def stream_events(request: Request, engine: EngineDep) -> StreamingResponse:
    queue = engine.events.open_queue(asyncio.get_running_loop())

    async def event_source() -> AsyncGenerator[str, None]:
        try:
            while not await request.is_disconnected():
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                yield f"event: {event.type}\ndata: {event.model_dump_json()}\n\n"
        finally:
            engine.events.close_queue(queue)

    return StreamingResponse(event_source(), media_type="text/event-stream")
