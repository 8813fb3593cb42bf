"""
Episode navigation: active index, play URL and traversal direction.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from vodhub.exceptions import OutOfRangeError
from vodhub.models.episode import Episode
from vodhub.models.state import Direction

logger = logging.getLogger(__name__)


def _coerce_index(value: object) -> int | None:
    """int for ints and numeric strings, None for anything else."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError:
            return None
    return None


class EpisodeNavigator:
    """Tracks the current episode within a loaded episode list.

    ``index`` is always a valid position in ``episodes`` or None when the
    list is empty. ``on_select`` is invoked with the newly selected Episode
    after every successful selection (the controller pushes history from it).
    """

    def __init__(
        self,
        episodes: Sequence[Episode] = (),
        direction: Direction = Direction.FORWARD,
        on_select: Callable[[Episode], None] | None = None,
    ):
        self._episodes: tuple[Episode, ...] = tuple(episodes)
        self._index: int | None = None
        self.direction = direction
        self._on_select = on_select

    @property
    def episodes(self) -> tuple[Episode, ...]:
        return self._episodes

    @property
    def index(self) -> int | None:
        return self._index

    @property
    def current(self) -> Episode | None:
        if self._index is None:
            return None
        return self._episodes[self._index]

    @property
    def play_url(self) -> str:
        current = self.current
        return current.url if current else ""

    def __len__(self) -> int:
        return len(self._episodes)

    def load(self, episodes: Sequence[Episode]) -> None:
        """Replace the episode list; nothing is selected afterwards."""
        self._episodes = tuple(episodes)
        self._index = None

    def clear(self) -> None:
        self.load(())

    def select_episode(self, index: int) -> Episode:
        """Make ``index`` the current episode.

        Raises:
            OutOfRangeError: If index is outside [0, len).
        """
        if isinstance(index, bool) or not isinstance(index, int) or not (
            0 <= index < len(self._episodes)
        ):
            raise OutOfRangeError(index, len(self._episodes))

        self._index = index
        episode = self._episodes[index]
        if self._on_select is not None:
            self._on_select(episode)
        return episode

    def default_index(self, direction: Direction | None = None) -> int | None:
        if not self._episodes:
            return None
        direction = direction or self.direction
        return len(self._episodes) - 1 if direction is Direction.REVERSED else 0

    def resolve_initial_index(
        self, requested: object = None, direction: Direction | None = None
    ) -> int | None:
        """Pick the episode a session starts on.

        A valid ``requested`` index (int or numeric string) wins; anything
        missing, non-numeric or out of range falls back to the first episode
        (forward) or the last one (reversed). Returns None only for an empty
        list.
        """
        default = self.default_index(direction)
        if default is None:
            return None

        index = _coerce_index(requested)
        if index is None or not (0 <= index < len(self._episodes)):
            if requested is not None:
                logger.debug(f"Requested episode {requested!r} invalid, using {default}")
            return default
        return index

    def target_index(self, direction: Direction | None = None) -> int | None:
        """Index ``next()`` would move to, or None at the end of the list."""
        if self._index is None:
            return None
        direction = direction or self.direction
        target = self._index + direction.step
        if 0 <= target < len(self._episodes):
            return target
        return None

    def has_next(self, direction: Direction | None = None) -> bool:
        return self.target_index(direction) is not None

    def next(self, direction: Direction | None = None) -> Episode | None:
        """Advance one episode in ``direction``; a no-op at the end of the list."""
        target = self.target_index(direction)
        if target is None:
            return None
        return self.select_episode(target)
