"""
vodhub.playback.session - Playback session orchestration.

PlaybackSessionController owns the one PlaybackState a player view
observes and wires the other components together:

    DetailClient -> EpisodeNavigator -> PlaybackState <- AutoSkipEngine
                                           ^
                              LatencyProbe (grouped sources)

Every start()/switch_source()/close() bumps a generation counter. Async
work captures the generation it started under and drops its result if the
counter has moved on, so a slow detail lookup for an abandoned source can
never overwrite the session that replaced it.

Example:
    >>> controller = PlaybackSessionController(DetailClient(url), store)
    >>> state = await controller.start("123", "src1")
    >>> controller.on_time_update(12.0, 1400.0)
    >>> controller.on_next_episode()
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Iterable, Sequence

from vodhub.clients.detail import DetailClient
from vodhub.clients.sinks import HistoryEntry, SessionSink
from vodhub.config.defaults import UNKNOWN_TITLE
from vodhub.config.settings import SettingsStore
from vodhub.exceptions import (
    NoEpisodesError,
    OutOfRangeError,
    SessionError,
    VodhubError,
)
from vodhub.models.episode import Episode, VideoDetail
from vodhub.models.source import ConfiguredSource, SourceCandidate
from vodhub.models.state import Direction, PlaybackState, SessionStatus
from vodhub.playback.autoskip import AutoSkipEngine, SkipAction
from vodhub.playback.navigator import EpisodeNavigator
from vodhub.probing.latency import LatencyProbe
from vodhub.search.grouping import latency_rank
from vodhub.utils.logging import log_timed

logger = logging.getLogger(__name__)

StateObserver = Callable[[PlaybackState], None]


class PlaybackSessionController:
    """Top-level playback session state machine.

    Args:
        detail_client: Detail lookup collaborator.
        settings: Settings store, re-read at the start of each operation.
        probe: Optional LatencyProbe used to rank the grouped sources of the
            current title while real-time latency is enabled.
        history: Sinks receiving a HistoryEntry on start and navigation.
        favorites: Sinks receiving a HistoryEntry from add_favorite().
        on_seek: Media element seek, used for intro skipping.
    """

    def __init__(
        self,
        detail_client: DetailClient,
        settings: SettingsStore,
        *,
        probe: LatencyProbe | None = None,
        history: Sequence[SessionSink] = (),
        favorites: Sequence[SessionSink] = (),
        on_seek: Callable[[float], None] | None = None,
    ):
        self._detail_client = detail_client
        self._settings = settings
        self._probe = probe
        self._history = list(history)
        self._favorites = list(favorites)

        self._navigator = EpisodeNavigator(on_select=self._on_episode_selected)
        self._autoskip = AutoSkipEngine(
            has_next=self._has_next,
            on_advance=self.on_next_episode,
            on_seek=on_seek,
        )

        self._state: PlaybackState | None = None
        self._detail: VideoDetail | None = None
        self._generation = 0
        self._last_start: dict | None = None
        self._observers: list[StateObserver] = []
        self._unsubscribe_probe: Callable[[], None] | None = None

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState | None:
        return self._state

    @property
    def detail(self) -> VideoDetail | None:
        return self._detail

    @property
    def episodes(self) -> tuple[Episode, ...]:
        return self._navigator.episodes

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def navigator(self) -> EpisodeNavigator:
        return self._navigator

    @property
    def autoskip(self) -> AutoSkipEngine:
        return self._autoskip

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        """Register a state observer; returns an unsubscribe function."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self) -> None:
        if self._state is None:
            return
        for observer in list(self._observers):
            observer(self._state)

    def _is_active(self) -> bool:
        return self._state is not None and self._state.status is SessionStatus.ACTIVE

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def start(
        self,
        video_id: str,
        source_id: str,
        requested_episode: object = None,
        direction: Direction | None = None,
        *,
        title: str | None = None,
        grouped_sources: Iterable[SourceCandidate] = (),
    ) -> PlaybackState:
        """Load ``video_id`` from ``source_id`` and select the initial episode.

        Failures (DetailUnavailableError, DetailError, NoEpisodesError) are
        recorded in ``state.last_error`` with status ERROR; call retry() or
        switch_source() to recover.

        Args:
            video_id: Video id on the source.
            source_id: Source id; resolved once against the configured sources.
            requested_episode: Episode index (int or numeric string). Invalid
                values fall back to the direction's default.
            direction: Traversal direction; defaults to the
                ``episode_reverse_order`` preference.
            title: Title from the search result, used until details arrive.
            grouped_sources: Other sources offering the same title.

        Returns:
            The session state (also available as ``self.state``).
        """
        self._teardown()
        generation = self._generation
        candidates = list(grouped_sources)
        settings = self._settings.snapshot()
        if direction is None:
            direction = Direction.from_reversed(settings.episode_reverse_order)

        self._last_start = {
            "video_id": video_id,
            "source_id": source_id,
            "requested_episode": requested_episode,
            "direction": direction,
            "title": title,
            "grouped_sources": candidates,
        }
        self._navigator.direction = direction
        self._state = PlaybackState(
            video_id=video_id,
            source_id=source_id,
            direction=direction,
            status=SessionStatus.LOADING,
            title=title,
            grouped_sources=[c.to_dict() for c in candidates],
        )
        self._notify()

        start_time = time.monotonic()
        log_timed(f"Loading {video_id} from {source_id}")
        source = self._settings.resolve_source(source_id)

        try:
            detail = await self._detail_client.fetch(video_id, source)
            if generation != self._generation:
                logger.debug(f"Discarding detail for {video_id}@{source_id}: session moved on")
                return self._state
            episodes = detail.episode_list()
            if not episodes:
                raise NoEpisodesError(details={"video_id": video_id, "source": source_id})
        except SessionError as e:
            if generation != self._generation:
                logger.debug(f"Discarding error for {video_id}@{source_id}: session moved on")
                return self._state
            return self._fail(e)

        state = self._state
        self._detail = detail
        state.title = detail.vod_name or title or UNKNOWN_TITLE
        state.poster = detail.vod_pic
        state.episode_count = len(episodes)
        self._autoskip.configure(settings.skip_window_for(state.title))

        self._navigator.load(episodes)
        index = self._navigator.resolve_initial_index(requested_episode, direction)
        state.status = SessionStatus.ACTIVE
        self._navigator.select_episode(index)

        log_timed(
            f"Playing {state.title} episode {index + 1}/{len(episodes)}", start_time
        )
        self._watch_sources(candidates)
        return state

    async def switch_source(
        self,
        source_id: str,
        video_id: str | None = None,
        *,
        keep_episode: bool = False,
    ) -> PlaybackState:
        """Tear down the session and restart it on another source.

        The title, grouped-source list and direction carry over; auto-skip
        state does not.

        Args:
            source_id: Source to switch to.
            video_id: Video id on that source. Defaults to the matching grouped
                candidate's id, else the current video id.
            keep_episode: Request the current episode index on the new source.

        Raises:
            VodhubError: If no session was ever started.
        """
        if self._last_start is None:
            raise VodhubError("No session to switch")

        context = self._last_start
        candidates: list[SourceCandidate] = context["grouped_sources"]
        if video_id is None:
            match = next((c for c in candidates if c.source == source_id), None)
            video_id = match.id if match else context["video_id"]

        requested = None
        direction = context["direction"]
        if self._state is not None:
            direction = self._state.direction
            if keep_episode:
                requested = self._state.episode_index

        logger.info(f"Switching source {context['source_id']} -> {source_id}")
        return await self.start(
            video_id,
            source_id,
            requested,
            direction,
            title=context["title"],
            grouped_sources=candidates,
        )

    async def retry(self) -> PlaybackState:
        """Re-run the last start() with the same arguments."""
        if self._last_start is None:
            raise VodhubError("No session to retry")
        args = dict(self._last_start)
        return await self.start(
            args.pop("video_id"),
            args.pop("source_id"),
            args.pop("requested_episode"),
            args.pop("direction"),
            **args,
        )

    def close(self) -> None:
        """Tear the session down; late async results are discarded."""
        self._teardown()
        if self._state is not None:
            self._state.status = SessionStatus.CLOSED
            self._notify()

    async def __aenter__(self) -> PlaybackSessionController:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _teardown(self) -> None:
        self._generation += 1
        self._autoskip.reset()
        self._navigator.clear()
        self._detail = None
        if self._unsubscribe_probe is not None:
            self._unsubscribe_probe()
            self._unsubscribe_probe = None
        if self._probe is not None:
            self._probe.set_sources({})
            self._probe.stop()

    def _fail(self, error: SessionError) -> PlaybackState:
        state = self._state
        logger.warning(f"Playback of {state.video_id}@{state.source_id} failed: {error}")
        state.status = SessionStatus.ERROR
        state.last_error = error.to_dict()
        state.play_url = ""
        state.episode_index = None
        self._notify()
        return state

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def on_episode_click(self, index: int) -> bool:
        """Select an episode from the list. Out-of-range indices are ignored.

        Returns:
            True if the episode changed.
        """
        if not self._is_active():
            return False
        try:
            self._navigator.select_episode(index)
        except OutOfRangeError as e:
            logger.debug(f"Ignoring episode click: {e}")
            return False
        return True

    def on_next_episode(self) -> bool:
        """Move one episode in the active direction; False at the end of the list."""
        if not self._is_active():
            return False
        return self._navigator.next(self._state.direction) is not None

    def _has_next(self) -> bool:
        return self._is_active() and self._navigator.has_next(self._state.direction)

    def _on_episode_selected(self, episode: Episode) -> None:
        state = self._state
        state.episode_index = episode.index
        state.play_url = episode.url
        state.elapsed = 0.0
        state.duration = 0.0
        state.last_error = None
        self._autoskip.reset()
        state.outro_active = False
        self._emit(self._history, self._history_entry())
        self._notify()

    def set_reversed(self, reversed_: bool) -> None:
        """Flip traversal direction and persist it as the default."""
        direction = Direction.from_reversed(reversed_)
        self._navigator.direction = direction
        if self._state is not None:
            self._state.direction = direction
        if self._last_start is not None:
            self._last_start["direction"] = direction
        self._settings.update(episode_reverse_order=reversed_)
        self._notify()

    # ------------------------------------------------------------------
    # Playback progress
    # ------------------------------------------------------------------

    def on_time_update(self, current_time: float, duration: float) -> SkipAction:
        """Record a progress tick and let the auto-skip engine react to it."""
        if not self._is_active():
            return SkipAction.NONE

        state = self._state
        if isinstance(current_time, (int, float)) and math.isfinite(current_time):
            state.elapsed = float(current_time)
        if isinstance(duration, (int, float)) and math.isfinite(duration):
            state.duration = float(duration)

        action = self._autoskip.on_time_update(current_time, duration)
        state.outro_active = self._autoskip.outro_active
        self._notify()
        return action

    # ------------------------------------------------------------------
    # History / favorites
    # ------------------------------------------------------------------

    def record_progress(self) -> None:
        """Push the current position to the history sinks."""
        if self._is_active():
            self._emit(self._history, self._history_entry())

    def add_favorite(self) -> bool:
        if not self._is_active():
            return False
        self._emit(self._favorites, self._history_entry())
        return True

    def _history_entry(self) -> HistoryEntry:
        state = self._state
        return HistoryEntry(
            video_id=state.video_id,
            title=state.title or UNKNOWN_TITLE,
            play_url=state.play_url,
            episode_index=state.episode_index,
            source_id=state.source_id,
            position=state.elapsed,
            duration=state.duration,
            poster=state.poster,
            episodes=[ep.to_dict() for ep in self._navigator.episodes],
        )

    def _emit(self, sinks: list[SessionSink], entry: HistoryEntry) -> None:
        for sink in sinks:
            try:
                sink.record(entry)
            except Exception as e:
                logger.warning(f"Failed to record {entry.video_id} in {sink!r}: {e}")

    # ------------------------------------------------------------------
    # Grouped source latency
    # ------------------------------------------------------------------

    def _watch_sources(self, candidates: list[SourceCandidate]) -> None:
        if self._probe is None or len(candidates) < 2:
            return

        urls = {}
        for candidate in candidates:
            resolved = self._settings.resolve_source(candidate.source)
            if isinstance(resolved, ConfiguredSource) and resolved.config.base_url:
                urls[candidate.source] = resolved.config.base_url
        if not urls:
            return

        self._probe.set_sources(urls)
        self._unsubscribe_probe = self._probe.subscribe(self._on_latencies)
        self._probe.start()

    def _on_latencies(self, latencies: dict[str, float]) -> None:
        if self._state is None:
            return
        updated = []
        for item in self._state.grouped_sources:
            latency = latencies.get(item["source"])
            updated.append({**item, "latency": latency} if latency is not None else item)
        self._state.grouped_sources = sorted(
            updated, key=lambda item: latency_rank(item.get("latency"))
        )
        self._notify()
