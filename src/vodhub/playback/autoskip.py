"""
vodhub.playback.autoskip - Intro skip and auto-next decisions.

AutoSkipEngine is driven entirely by the player's time-update callback;
it has no timer of its own. Per episode it moves through three phases:

    NORMAL --(inside outro window)--> OUTRO_ACTIVE
    OUTRO_ACTIVE --(next episode exists)--> ADVANCING --(reset)--> NORMAL

At most one advance is requested per episode instance, and the intro is
skipped at most once; both guards are cleared by reset(), which the
controller calls on every episode change. With no next episode the engine
parks in OUTRO_ACTIVE and lets playback finish.

Samples that go backwards (rewinds, out-of-order delivery) and unknown
durations (0, NaN, infinite) never trigger anything.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from enum import Enum

from vodhub.config.settings import SkipWindow

logger = logging.getLogger(__name__)


class SkipPhase(Enum):
    NORMAL = "normal"
    OUTRO_ACTIVE = "outro_active"
    ADVANCING = "advancing"


class SkipAction(Enum):
    """What a time-update sample caused."""

    NONE = "none"
    SKIP_INTRO = "skip_intro"
    ADVANCE = "advance"


def _finite(value: float) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)


class AutoSkipEngine:
    """Watches playback time against a SkipWindow.

    Args:
        window: Intro/outro timing for the current title.
        has_next: Returns True if a next episode exists in the active direction.
        on_advance: Requests navigation to the next episode; returns True on
            success.
        on_seek: Seeks the media element (seconds). Intro skipping is inert
            without it.
    """

    def __init__(
        self,
        window: SkipWindow | None = None,
        *,
        has_next: Callable[[], bool],
        on_advance: Callable[[], bool],
        on_seek: Callable[[float], None] | None = None,
    ):
        self._window = window or SkipWindow()
        self._has_next = has_next
        self._on_advance = on_advance
        self._on_seek = on_seek
        self.reset()

    @property
    def window(self) -> SkipWindow:
        return self._window

    @property
    def phase(self) -> SkipPhase:
        return self._phase

    @property
    def outro_active(self) -> bool:
        return self._phase is not SkipPhase.NORMAL

    @property
    def intro_skipped(self) -> bool:
        return self._intro_skipped

    @property
    def advance_requested(self) -> bool:
        return self._advance_requested

    def configure(self, window: SkipWindow) -> None:
        self._window = window

    def reset(self) -> None:
        """Start a new episode instance: NORMAL phase, guards cleared."""
        self._phase = SkipPhase.NORMAL
        self._intro_skipped = False
        self._advance_requested = False
        self._last_time: float | None = None

    def on_time_update(self, current_time: float, duration: float) -> SkipAction:
        """Feed one playback progress sample."""
        if not _finite(current_time) or current_time < 0:
            return SkipAction.NONE

        last, self._last_time = self._last_time, current_time
        if last is not None and current_time < last:
            self._leave_outro_if_outside(current_time, duration)
            return SkipAction.NONE

        if self._should_skip_intro(current_time):
            self._intro_skipped = True
            logger.debug(f"Skipping intro {current_time:.1f}s -> {self._window.intro_end:.1f}s")
            self._on_seek(self._window.intro_end)
            return SkipAction.SKIP_INTRO

        if not self._in_outro(current_time, duration):
            self._leave_outro_if_outside(current_time, duration)
            return SkipAction.NONE

        if self._phase is SkipPhase.NORMAL:
            self._phase = SkipPhase.OUTRO_ACTIVE

        if self._advance_requested or not self._has_next():
            return SkipAction.NONE

        self._advance_requested = True
        self._phase = SkipPhase.ADVANCING
        logger.debug(f"Outro reached at {current_time:.1f}/{duration:.1f}s, advancing")
        advanced = self._on_advance()
        if not advanced and self._phase is SkipPhase.ADVANCING:
            self._phase = SkipPhase.OUTRO_ACTIVE
        return SkipAction.ADVANCE

    def _should_skip_intro(self, current_time: float) -> bool:
        window = self._window
        return (
            self._on_seek is not None
            and window.has_intro
            and not self._intro_skipped
            and window.intro_start <= current_time < window.intro_end
        )

    def _in_outro(self, current_time: float, duration: float) -> bool:
        window = self._window
        if not window.has_outro or not _finite(duration) or duration <= 0:
            return False
        # Episodes shorter than the outro window never auto-advance
        if duration <= window.outro_seconds:
            return False
        return duration - current_time < window.outro_seconds

    def _leave_outro_if_outside(self, current_time: float, duration: float) -> None:
        if self._phase is SkipPhase.OUTRO_ACTIVE and not self._in_outro(current_time, duration):
            self._phase = SkipPhase.NORMAL
