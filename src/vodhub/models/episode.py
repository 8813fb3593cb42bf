"""
Episode and video detail models.

The detail endpoint answers ``{success, data: {episodes: [...], vod_*...}, error}``.
DetailResponse validates that envelope; VideoDetail.episode_list() turns the
raw episode payloads into immutable, indexed Episode values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class Episode:
    """One playable episode, zero-based within its video's sequence."""

    name: str
    url: str
    index: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "url": self.url, "index": self.index}


class EpisodePayload(BaseModel):
    """Episode as returned by the detail endpoint."""

    name: str | None = None
    url: str


class VideoDetail(BaseModel):
    """Video metadata plus its episode list."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    vod_id: str | None = None
    vod_name: str | None = None
    vod_pic: str | None = None
    vod_content: str | None = None
    vod_actor: str | None = None
    vod_director: str | None = None
    vod_year: str | None = None
    vod_area: str | None = None
    type_name: str | None = None
    episodes: list[EpisodePayload] = Field(default_factory=list)

    def episode_list(self) -> list[Episode]:
        """Indexed episodes; unnamed ones become ``Episode <n>``."""
        return [
            Episode(name=ep.name or f"Episode {i + 1}", url=ep.url, index=i)
            for i, ep in enumerate(self.episodes)
        ]


class DetailResponse(BaseModel):
    """Envelope of the detail endpoint."""

    success: bool = False
    data: VideoDetail | None = None
    error: str | None = None
