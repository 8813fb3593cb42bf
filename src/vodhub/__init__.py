"""
vodhub - Multi-source video playback core.

Picks the fastest of several upstream sources for a title and runs the
playback session on top of it:
1. Group search results by title, ranked by live latency
2. Load episodes from the chosen source and track the active one
3. Skip intros and advance to the next episode near the outro
"""

# Config
from vodhub.config.settings import Settings, SettingsStore, SkipWindow

# Exceptions
from vodhub.exceptions import (
    ConfigError,
    DetailError,
    DetailUnavailableError,
    MissingParameterError,
    NoEpisodesError,
    OutOfRangeError,
    SessionError,
    VodhubError,
)

# Models
from vodhub.models.episode import Episode, VideoDetail
from vodhub.models.source import SourceCandidate, SourceGroup, VideoSource
from vodhub.models.state import Direction, PlaybackState, SessionStatus

# Core components
from vodhub.clients.detail import DetailClient
from vodhub.playback.autoskip import AutoSkipEngine
from vodhub.playback.entry import PlayerEntry, build_player_url
from vodhub.playback.navigator import EpisodeNavigator
from vodhub.playback.session import PlaybackSessionController
from vodhub.probing.latency import LatencyProbe
from vodhub.search.grouping import group_sources

__version__ = "0.1.0"

__all__ = [
    # Core components
    "PlaybackSessionController",
    "EpisodeNavigator",
    "AutoSkipEngine",
    "LatencyProbe",
    "DetailClient",
    "group_sources",
    "PlayerEntry",
    "build_player_url",
    # Models
    "Episode",
    "VideoDetail",
    "VideoSource",
    "SourceGroup",
    "SourceCandidate",
    "PlaybackState",
    "Direction",
    "SessionStatus",
    # Config
    "Settings",
    "SettingsStore",
    "SkipWindow",
    # Exceptions
    "VodhubError",
    "SessionError",
    "DetailUnavailableError",
    "DetailError",
    "NoEpisodesError",
    "OutOfRangeError",
    "MissingParameterError",
    "ConfigError",
]
