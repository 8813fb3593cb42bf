"""
Source models: search results, latency samples, groups and source configs.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field


def normalize_title(title: str) -> str:
    """Grouping key for a title: trimmed and lower-cased."""
    return title.strip().lower()


class SourceConfig(BaseModel):
    """A configured upstream catalog, as stored in settings.

    Unknown keys are preserved so the full config can be forwarded to
    the detail endpoint unchanged.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., description="Stable source identifier")
    name: str = Field("", description="Display name")
    base_url: str = Field("", alias="baseUrl", description="Catalog API base URL")
    enabled: bool = Field(True, description="Whether the source is searched")

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the detail endpoint, using the upstream field names."""
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class ConfiguredSource:
    """Source id found in settings; detail lookups send its full config."""

    config: SourceConfig

    @property
    def source_id(self) -> str:
        return self.config.id


@dataclass(frozen=True)
class BareSourceId:
    """Source id with no local config; the backend must know it."""

    source_id: str


ResolvedSource = Union[ConfiguredSource, BareSourceId]


@dataclass(frozen=True)
class VideoSource:
    """One search result: a title as served by one source.

    Instances are replaced, never mutated. LatencyProbe.annotate() hands
    back copies carrying the latest latency for their source.
    """

    video_id: str
    source_id: str
    title: str
    base_url: str = ""
    source_name: str = ""
    latency_ms: float | None = None
    poster: str | None = None

    @property
    def group_key(self) -> str:
        return normalize_title(self.title)

    @classmethod
    def from_search_result(cls, data: dict[str, Any]) -> VideoSource:
        """Build from a raw search result dict (``vod_*`` field names)."""
        latency = data.get("latency")
        return cls(
            video_id=str(data.get("vod_id", data.get("id", ""))),
            source_id=str(data.get("source", "")),
            title=str(data.get("vod_name", data.get("title", ""))),
            base_url=data.get("baseUrl") or data.get("base_url") or "",
            source_name=data.get("sourceName") or data.get("source_name") or "",
            latency_ms=float(latency) if isinstance(latency, (int, float)) else None,
            poster=data.get("vod_pic"),
        )


@dataclass(frozen=True)
class LatencySample:
    """Most recent round-trip measurement for a source."""

    source_id: str
    latency_ms: float
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class SourceCandidate:
    """Alternative source for the title being played (player ``groupedSources``)."""

    id: str
    source: str
    source_name: str = ""
    latency: float | None = None

    @classmethod
    def from_video(cls, video: VideoSource) -> SourceCandidate:
        return cls(
            id=video.video_id,
            source=video.source_id,
            source_name=video.source_name,
            latency=video.latency_ms,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SourceCandidate:
        latency = data.get("latency")
        return cls(
            id=str(data["id"]),
            source=str(data["source"]),
            source_name=str(data.get("sourceName") or ""),
            latency=float(latency) if isinstance(latency, (int, float)) else None,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id, "source": self.source}
        if self.source_name:
            result["sourceName"] = self.source_name
        if self.latency is not None:
            result["latency"] = self.latency
        return result


@dataclass(frozen=True)
class SourceGroup:
    """Sources believed to offer the same title, fastest first.

    Always rebuilt by vodhub.search.grouping.group_sources(); never edited.
    """

    key: str
    members: tuple[VideoSource, ...]

    @property
    def representative(self) -> VideoSource:
        return self.members[0]

    @property
    def name(self) -> str:
        return self.representative.title

    def candidates(self) -> list[SourceCandidate]:
        return [SourceCandidate.from_video(v) for v in self.members]

    def __len__(self) -> int:
        return len(self.members)

    def __iter__(self):
        return iter(self.members)
