"""
Player entry point: query parameters in, player links out.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import urlencode

from vodhub.exceptions import MissingParameterError
from vodhub.models.source import SourceCandidate, SourceGroup, VideoSource
from vodhub.search.grouping import decode_candidates, encode_candidates

PLAYER_PATH = "/player"


@dataclass(frozen=True)
class PlayerEntry:
    """Parsed ``/player`` query parameters.

    ``episode`` is kept raw; EpisodeNavigator.resolve_initial_index() decides
    whether it is usable.
    """

    video_id: str
    source_id: str
    title: str | None = None
    episode: str | None = None
    grouped_sources: tuple[SourceCandidate, ...] = field(default_factory=tuple)

    @classmethod
    def from_query(cls, params: Mapping[str, str]) -> PlayerEntry:
        """Parse player parameters.

        Raises:
            MissingParameterError: ``id`` or ``source`` is missing; callers
                redirect away from the player.
        """
        video_id = (params.get("id") or "").strip()
        if not video_id:
            raise MissingParameterError("id")
        source_id = (params.get("source") or "").strip()
        if not source_id:
            raise MissingParameterError("source")

        return cls(
            video_id=video_id,
            source_id=source_id,
            title=params.get("title") or None,
            episode=params.get("episode") or None,
            grouped_sources=tuple(decode_candidates(params.get("groupedSources"))),
        )

    def to_query(self) -> dict[str, str]:
        params = {"id": self.video_id, "source": self.source_id}
        if self.title:
            params["title"] = self.title
        if self.episode is not None:
            params["episode"] = str(self.episode)
        if self.grouped_sources:
            params["groupedSources"] = encode_candidates(self.grouped_sources)
        return params

    def to_url(self) -> str:
        return f"{PLAYER_PATH}?{urlencode(self.to_query())}"


def build_player_url(target: VideoSource | SourceGroup) -> str:
    """Player link for a single search result or a whole group.

    Group links open the representative and carry every member as a
    switchable candidate.
    """
    if isinstance(target, SourceGroup):
        video = target.representative
        candidates = tuple(target.candidates()) if len(target) > 1 else ()
    else:
        video = target
        candidates = ()

    return PlayerEntry(
        video_id=video.video_id,
        source_id=video.source_id,
        title=video.title,
        grouped_sources=candidates,
    ).to_url()
