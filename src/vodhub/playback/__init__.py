"""
Playback session core: navigation, auto-skip and orchestration.
"""

from vodhub.playback.autoskip import AutoSkipEngine, SkipAction, SkipPhase
from vodhub.playback.entry import PlayerEntry, build_player_url
from vodhub.playback.navigator import EpisodeNavigator
from vodhub.playback.session import PlaybackSessionController

__all__ = [
    "AutoSkipEngine",
    "EpisodeNavigator",
    "PlaybackSessionController",
    "PlayerEntry",
    "SkipAction",
    "SkipPhase",
    "build_player_url",
]
