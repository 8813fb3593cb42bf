"""
PlaybackState dataclass: the single mutable object a player view observes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Direction(Enum):
    """Episode traversal direction."""

    FORWARD = "forward"
    REVERSED = "reversed"

    @classmethod
    def from_reversed(cls, reversed_: bool) -> Direction:
        return cls.REVERSED if reversed_ else cls.FORWARD

    @property
    def step(self) -> int:
        return -1 if self is Direction.REVERSED else 1


class SessionStatus(Enum):
    """Lifecycle of a playback session."""

    IDLE = "idle"
    LOADING = "loading"
    ACTIVE = "active"
    ERROR = "error"
    CLOSED = "closed"


@dataclass
class PlaybackState:
    """Canonical playback session state.

    Owned by PlaybackSessionController; every other component's output is
    folded into it there. ``episode_index`` is either a valid index into the
    current episode list or None when the list is empty / not loaded.
    """

    video_id: str
    source_id: str
    episode_index: int | None = None
    play_url: str = ""
    elapsed: float = 0.0
    duration: float = 0.0
    direction: Direction = Direction.FORWARD
    last_error: dict[str, Any] | None = None
    status: SessionStatus = SessionStatus.IDLE

    # Detail metadata, filled once the lookup succeeds
    title: str | None = None
    poster: str | None = None
    episode_count: int = 0

    # Auto-skip overlay hint
    outro_active: bool = False

    # Alternative sources for the same title, carried across switches
    grouped_sources: list[dict[str, Any]] = field(default_factory=list)

    @property
    def is_playable(self) -> bool:
        return self.status is SessionStatus.ACTIVE and bool(self.play_url)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "video_id": self.video_id,
            "source_id": self.source_id,
            "episode_index": self.episode_index,
            "play_url": self.play_url,
            "elapsed": self.elapsed,
            "duration": self.duration,
            "direction": self.direction.value,
            "last_error": self.last_error,
            "status": self.status.value,
            "title": self.title,
            "poster": self.poster,
            "episode_count": self.episode_count,
            "outro_active": self.outro_active,
            "grouped_sources": self.grouped_sources,
        }
