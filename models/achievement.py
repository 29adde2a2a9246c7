"""Session and achievement models for AchieveSync API.

This module defines the platform-agnostic data models shared by the
detection and synchronization engine and the HTTP layer.

Example:
    >>> from models.achievement import AchievementRecord, RarityTier
    >>> record = AchievementRecord(
    ...     id="ACH_WIN_ONE_GAME",
    ...     name="Winner",
    ...     is_unlocked=True,
    ...     unlock_timestamp=1700000000,
    ...     rarity_tier=RarityTier.RARE,
    ... )
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, model_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DetectionSource(str, Enum):
    """Signal that produced the active game session.

    Attributes:
        PRESENCE_API: The player's own presence record on the platform.
        PROCESS_SCAN: Executable path heuristics on a running process.
        INSTALL_DIR_FILE: A steam_appid.txt sidecar next to the executable.
    """

    PRESENCE_API = "presence_api"
    PROCESS_SCAN = "process_scan"
    INSTALL_DIR_FILE = "install_dir_file"


class RarityTier(str, Enum):
    """Presentation rarity of an achievement."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"

    @property
    def color(self) -> str:
        """Hex colour used by overlays for this tier."""
        return _RARITY_COLORS[self]


_RARITY_COLORS: Dict[RarityTier, str] = {
    RarityTier.COMMON: "#CCCCCC",
    RarityTier.UNCOMMON: "#1EFF00",
    RarityTier.RARE: "#0070DD",
    RarityTier.EPIC: "#A335EE",
    RarityTier.LEGENDARY: "#FF8000",
}


class GameSession(BaseModel):
    """The currently detected active title.

    Attributes:
        title_id: Numeric platform title identifier (always > 0).
        display_name: Human-readable title name.
        detection_source: Which detection strategy produced the session.
        detected_at: When the session was first detected (UTC).
    """

    title_id: int = Field(..., gt=0, description="Platform title identifier")
    display_name: str = Field(..., description="Human-readable title name")
    detection_source: DetectionSource = Field(
        ...,
        description="Detection strategy that produced this session",
    )
    detected_at: datetime = Field(
        default_factory=_utcnow,
        description="When the session was detected (UTC)",
    )

    class Config:
        """Pydantic model configuration."""

        frozen = True
        json_schema_extra = {
            "example": {
                "title_id": 480,
                "display_name": "Spacewar",
                "detection_source": "process_scan",
                "detected_at": "2024-01-15T10:30:00Z",
            }
        }


class AchievementRecord(BaseModel):
    """A single achievement of the active title.

    ``unlock_timestamp`` is present if and only if ``is_unlocked`` is
    true. The unlock fields are only ever changed together through
    :meth:`set_unlock_state`.

    Attributes:
        id: Opaque achievement identifier, stable within a title.
        name: Display name.
        description: Display description.
        is_unlocked: Whether the player has unlocked it.
        unlock_timestamp: Unlock time in epoch seconds, if unlocked.
        is_hidden: Whether the platform marks it as hidden.
        rarity_tier: Presentation rarity (see ``core.catalog_loader``).
        title_id: Title the achievement belongs to, if known.
    """

    id: str = Field(..., min_length=1, description="Opaque achievement id")
    name: str = Field(default="", description="Display name")
    description: str = Field(default="", description="Display description")
    is_unlocked: bool = Field(default=False, description="Unlocked flag")
    unlock_timestamp: Optional[int] = Field(
        default=None,
        ge=0,
        description="Unlock time in epoch seconds (only when unlocked)",
    )
    is_hidden: bool = Field(default=False, description="Hidden flag")
    rarity_tier: RarityTier = Field(
        default=RarityTier.COMMON,
        description="Presentation rarity tier",
    )
    title_id: Optional[int] = Field(default=None, description="Owning title id")

    class Config:
        """Pydantic model configuration."""

        extra = "forbid"
        json_schema_extra = {
            "example": {
                "id": "ACH_WIN_ONE_GAME",
                "name": "Winner",
                "description": "Win one game.",
                "is_unlocked": True,
                "unlock_timestamp": 1700000000,
                "is_hidden": False,
                "rarity_tier": "rare",
                "title_id": 480,
            }
        }

    @model_validator(mode="after")
    def _check_unlock_fields(self) -> "AchievementRecord":
        if self.is_unlocked and self.unlock_timestamp is None:
            raise ValueError("unlock_timestamp is required when is_unlocked is true")
        if not self.is_unlocked and self.unlock_timestamp is not None:
            raise ValueError("unlock_timestamp must be empty when is_unlocked is false")
        return self

    def set_unlock_state(self, unlocked: bool, timestamp: Optional[int]) -> None:
        """Update both unlock fields at once, keeping them consistent.

        Args:
            unlocked: New unlocked flag.
            timestamp: Unlock time in epoch seconds; ignored when locked.
                When unlocked without a timestamp the current time is used.
        """
        if unlocked:
            self.unlock_timestamp = timestamp if timestamp else unlock_time_now()
        else:
            self.unlock_timestamp = None
        self.is_unlocked = unlocked

    @property
    def unlock_date(self) -> Optional[datetime]:
        """Unlock time as a UTC datetime, or None when locked."""
        if self.unlock_timestamp is None:
            return None
        return datetime.fromtimestamp(self.unlock_timestamp, tz=timezone.utc)

    @property
    def rarity_color(self) -> str:
        return self.rarity_tier.color


def unlock_time_now() -> int:
    """Current time in epoch seconds."""
    return int(_utcnow().timestamp())


class ProfileSnapshot(BaseModel):
    """Summary of the player's progress in the active title.

    Attributes:
        player_name: Platform persona name ("" when unknown).
        session_title_name: Active title name ("" when no session).
        session_title_id: Active title id (None when no session).
        total_count: Number of achievements in the catalog.
        unlocked_count: Number of unlocked achievements.
        completion_percent: 100 * unlocked / total, 0 when total is 0.
        generated_at: When the snapshot was computed (UTC).
    """

    player_name: str = Field(default="", description="Player persona name")
    session_title_name: str = Field(default="", description="Active title name")
    session_title_id: Optional[int] = Field(default=None, description="Active title id")
    total_count: int = Field(default=0, ge=0, description="Total achievements")
    unlocked_count: int = Field(default=0, ge=0, description="Unlocked achievements")
    completion_percent: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Completion percentage (0-100)",
    )
    generated_at: datetime = Field(
        default_factory=_utcnow,
        description="When this snapshot was generated (UTC)",
    )

    class Config:
        """Pydantic model configuration."""

        frozen = True
        json_schema_extra = {
            "example": {
                "player_name": "gaben",
                "session_title_name": "Spacewar",
                "session_title_id": 480,
                "total_count": 3,
                "unlocked_count": 1,
                "completion_percent": 33.33,
                "generated_at": "2024-01-15T10:30:00Z",
            }
        }


class AchievementStats(BaseModel):
    """Aggregate counters for the active title, including rarity breakdown."""

    total: int = Field(default=0, ge=0)
    unlocked: int = Field(default=0, ge=0)
    locked: int = Field(default=0, ge=0)
    completion_percent: float = Field(default=0.0, ge=0.0, le=100.0)
    by_rarity: Dict[RarityTier, int] = Field(
        default_factory=lambda: {tier: 0 for tier in RarityTier},
        description="Number of achievements per rarity tier",
    )


class ActiveSessionResponse(BaseModel):
    """Response model for the active session endpoint.

    Attributes:
        detected: Whether a game session is currently active.
        session: The active session, if any.
        connected: Whether the platform client session is initialized.
        achievement_count: Number of achievements loaded for the session.
    """

    detected: bool = Field(default=False)
    session: Optional[GameSession] = Field(default=None)
    connected: bool = Field(default=False)
    achievement_count: int = Field(default=0, ge=0)
