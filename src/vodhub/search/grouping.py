"""
vodhub.search.grouping - Group search results by title and rank by latency.

group_sources() is pure: it keeps no state between calls and is simply
re-run whenever the result set or any latency changes.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace

from vodhub.config.settings import Settings
from vodhub.models.source import SourceCandidate, SourceGroup, VideoSource

logger = logging.getLogger(__name__)


def latency_rank(latency: float | None) -> tuple[bool, float]:
    """Sort key: ascending latency, unmeasured sources after every measured one."""
    if latency is None:
        return (True, 0.0)
    return (False, latency)


def _latency_key(video: VideoSource) -> tuple[bool, float]:
    return latency_rank(video.latency_ms)


def group_sources(
    videos: Iterable[VideoSource],
    latencies: Mapping[str, float] | None = None,
) -> list[SourceGroup]:
    """Group videos by normalized title, fastest source first.

    Groups appear in order of their first member in the input. Within a
    group, members are ordered by latency ascending; members without a
    latency come last. The sort is stable, so ties keep input order.

    Args:
        videos: Search results.
        latencies: Optional source id -> latency map overriding each video's
            own ``latency_ms`` (e.g. LatencyProbe.latencies).

    Returns:
        One SourceGroup per distinct title; an empty input gives [].
    """
    buckets: dict[str, list[VideoSource]] = {}
    for video in videos:
        if latencies is not None and video.source_id in latencies:
            video = replace(video, latency_ms=latencies[video.source_id])
        buckets.setdefault(video.group_key, []).append(video)

    return [
        SourceGroup(key=key, members=tuple(sorted(members, key=_latency_key)))
        for key, members in buckets.items()
    ]


def arrange_results(
    videos: list[VideoSource],
    settings: Settings,
    latencies: Mapping[str, float] | None = None,
) -> list[VideoSource] | list[SourceGroup]:
    """Lay results out for the configured display mode.

    ``normal`` returns the videos untouched; ``grouped`` returns groups.
    """
    if settings.search_display_mode == "grouped":
        return group_sources(videos, latencies)
    return list(videos)


def encode_candidates(candidates: Iterable[SourceCandidate]) -> str:
    """Serialize candidates for the player's ``groupedSources`` parameter."""
    return json.dumps([c.to_dict() for c in candidates], separators=(",", ":"))


def decode_candidates(raw: str | None) -> list[SourceCandidate]:
    """Parse a ``groupedSources`` value. Malformed input yields []."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.debug("Ignoring malformed groupedSources parameter")
        return []
    if not isinstance(data, list):
        return []

    candidates = []
    for item in data:
        if not isinstance(item, dict) or "id" not in item or "source" not in item:
            continue
        candidates.append(SourceCandidate.from_dict(item))
    return candidates
