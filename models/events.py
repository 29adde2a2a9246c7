"""Engine event models for AchieveSync API.

Every event published by the synchronization engine is one of the
models below. The ``type`` field acts as a discriminator so consumers
reading the event stream can dispatch without inspecting the payload.

Example:
    >>> from models.events import StatusMessage
    >>> StatusMessage(text="Steam is not running").type
    'status_message'
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Union

from pydantic import BaseModel, Field

from models.achievement import AchievementRecord, ProfileSnapshot


class _EngineEvent(BaseModel):
    emitted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event was emitted (UTC)",
    )

    class Config:
        """Pydantic model configuration."""

        frozen = True


class SessionChanged(_EngineEvent):
    """The active title changed. ``name`` is "" when the session ended."""

    type: Literal["session_changed"] = "session_changed"
    name: str = Field(default="", description="New session display name")
    title_id: int = Field(default=0, ge=0, description="New title id, 0 for none")


class AchievementUnlocked(_EngineEvent):
    """An achievement moved from locked to unlocked."""

    type: Literal["achievement_unlocked"] = "achievement_unlocked"
    record: AchievementRecord


class ProfileUpdated(_EngineEvent):
    """A new profile snapshot was computed."""

    type: Literal["profile_updated"] = "profile_updated"
    snapshot: ProfileSnapshot


class StatusMessage(_EngineEvent):
    """Advisory, non-fatal diagnostic message."""

    type: Literal["status_message"] = "status_message"
    text: str
    level: Literal["info", "warning", "error"] = "info"


EngineEvent = Union[SessionChanged, AchievementUnlocked, ProfileUpdated, StatusMessage]
