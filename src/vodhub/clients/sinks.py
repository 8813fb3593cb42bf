"""
vodhub.clients.sinks - Write-only collaborators for history and favorites.

The playback core only pushes HistoryEntry payloads; storage is someone
else's concern.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class HistoryEntry:
    """Snapshot of the viewer's position, pushed on start and navigation."""

    video_id: str
    title: str
    play_url: str
    episode_index: int
    source_id: str
    position: float = 0.0
    duration: float = 0.0
    poster: str | None = None
    episodes: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "video_id": self.video_id,
            "title": self.title,
            "play_url": self.play_url,
            "episode_index": self.episode_index,
            "source_id": self.source_id,
            "position": self.position,
            "duration": self.duration,
            "poster": self.poster,
            "episodes": self.episodes,
        }


@runtime_checkable
class SessionSink(Protocol):
    """Receives session snapshots. Implementations must not raise."""

    def record(self, entry: HistoryEntry) -> None: ...
