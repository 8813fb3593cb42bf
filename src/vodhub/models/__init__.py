"""
Data models for sources, episodes and playback state.
"""

from vodhub.models.episode import DetailResponse, Episode, EpisodePayload, VideoDetail
from vodhub.models.source import (
    BareSourceId,
    ConfiguredSource,
    LatencySample,
    ResolvedSource,
    SourceCandidate,
    SourceConfig,
    SourceGroup,
    VideoSource,
    normalize_title,
)
from vodhub.models.state import Direction, PlaybackState, SessionStatus

__all__ = [
    "BareSourceId",
    "ConfiguredSource",
    "DetailResponse",
    "Direction",
    "Episode",
    "EpisodePayload",
    "LatencySample",
    "PlaybackState",
    "ResolvedSource",
    "SessionStatus",
    "SourceCandidate",
    "SourceConfig",
    "SourceGroup",
    "VideoDetail",
    "VideoSource",
    "normalize_title",
]
