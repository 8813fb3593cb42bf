"""Tests for AutoSkipEngine."""

from unittest.mock import MagicMock

import pytest

from vodhub.config.settings import SkipWindow
from vodhub.playback.autoskip import AutoSkipEngine, SkipAction, SkipPhase


def _engine(window=None, has_next=True, advance_ok=True):
    on_advance = MagicMock(return_value=advance_ok)
    on_seek = MagicMock()
    engine = AutoSkipEngine(
        window or SkipWindow(outro_seconds=60),
        has_next=MagicMock(return_value=has_next),
        on_advance=on_advance,
        on_seek=on_seek,
    )
    return engine, on_advance, on_seek


class TestOutro:
    """Tests for outro detection and auto-next."""

    def test_normal_before_outro(self):
        engine, on_advance, _ = _engine()
        assert engine.on_time_update(100.0, 1200.0) is SkipAction.NONE
        assert engine.phase is SkipPhase.NORMAL
        on_advance.assert_not_called()

    def test_advances_inside_outro_window(self):
        engine, on_advance, _ = _engine()
        engine.on_time_update(1000.0, 1200.0)
        assert engine.on_time_update(1150.0, 1200.0) is SkipAction.ADVANCE
        on_advance.assert_called_once()

    def test_advances_only_once_per_episode(self):
        engine, on_advance, _ = _engine()
        for t in (1141.0, 1150.0, 1160.0, 1170.0, 1199.0):
            engine.on_time_update(t, 1200.0)
        on_advance.assert_called_once()
        assert engine.advance_requested

    def test_reset_allows_next_episode_to_advance(self):
        engine, on_advance, _ = _engine()
        engine.on_time_update(1150.0, 1200.0)
        engine.reset()
        assert engine.phase is SkipPhase.NORMAL
        engine.on_time_update(1150.0, 1200.0)
        assert on_advance.call_count == 2

    def test_no_next_episode_parks_in_outro(self):
        engine, on_advance, _ = _engine(has_next=False)
        for t in (1150.0, 1160.0, 1190.0):
            assert engine.on_time_update(t, 1200.0) is SkipAction.NONE
        assert engine.phase is SkipPhase.OUTRO_ACTIVE
        assert engine.outro_active
        on_advance.assert_not_called()

    def test_failed_advance_is_not_retried(self):
        engine, on_advance, _ = _engine(advance_ok=False)
        engine.on_time_update(1150.0, 1200.0)
        engine.on_time_update(1160.0, 1200.0)
        on_advance.assert_called_once()
        assert engine.phase is SkipPhase.OUTRO_ACTIVE

    def test_advance_callback_resetting_engine(self):
        """When advancing resets the engine (episode change), it ends NORMAL."""
        engine = None

        def advance():
            engine.reset()
            return True

        engine = AutoSkipEngine(
            SkipWindow(outro_seconds=60),
            has_next=lambda: True,
            on_advance=advance,
        )
        assert engine.on_time_update(1150.0, 1200.0) is SkipAction.ADVANCE
        assert engine.phase is SkipPhase.NORMAL
        assert not engine.advance_requested

    @pytest.mark.parametrize("duration", [0.0, float("nan"), float("inf"), -5.0])
    def test_unknown_duration_takes_no_action(self, duration):
        engine, on_advance, _ = _engine()
        assert engine.on_time_update(1150.0, duration) is SkipAction.NONE
        assert engine.phase is SkipPhase.NORMAL
        on_advance.assert_not_called()

    def test_out_of_order_sample_takes_no_action(self):
        engine, on_advance, _ = _engine()
        engine.on_time_update(500.0, 1200.0)
        # Older sample arriving late
        assert engine.on_time_update(400.0, 1200.0) is SkipAction.NONE
        assert engine.phase is SkipPhase.NORMAL
        on_advance.assert_not_called()

    def test_rewind_out_of_outro_returns_to_normal(self):
        engine, _, _ = _engine(has_next=False)
        engine.on_time_update(1150.0, 1200.0)
        assert engine.phase is SkipPhase.OUTRO_ACTIVE
        engine.on_time_update(300.0, 1200.0)
        assert engine.phase is SkipPhase.NORMAL

    def test_disabled_auto_next(self):
        engine, on_advance, _ = _engine(SkipWindow(outro_seconds=60, auto_next=False))
        engine.on_time_update(1190.0, 1200.0)
        on_advance.assert_not_called()
        assert engine.phase is SkipPhase.NORMAL

    def test_short_episode_never_advances(self):
        engine, on_advance, _ = _engine(SkipWindow(outro_seconds=90))
        engine.on_time_update(10.0, 60.0)
        engine.on_time_update(59.0, 60.0)
        on_advance.assert_not_called()


class TestIntroSkip:
    """Tests for the one-shot intro skip."""

    def test_skips_intro_once(self):
        engine, _, on_seek = _engine(SkipWindow(intro_start=0, intro_end=85, outro_seconds=0))
        assert engine.on_time_update(0.5, 1200.0) is SkipAction.SKIP_INTRO
        on_seek.assert_called_once_with(85)
        assert engine.intro_skipped

    def test_manual_rewind_into_intro_not_reskipped(self):
        engine, _, on_seek = _engine(SkipWindow(intro_start=0, intro_end=85, outro_seconds=0))
        engine.on_time_update(0.5, 1200.0)
        engine.on_time_update(86.0, 1200.0)
        # Viewer rewinds, then plays forward through the intro again
        engine.on_time_update(10.0, 1200.0)
        engine.on_time_update(11.0, 1200.0)
        on_seek.assert_called_once()

    def test_crossing_into_window_from_below(self):
        engine, _, on_seek = _engine(SkipWindow(intro_start=30, intro_end=90, outro_seconds=0))
        engine.on_time_update(10.0, 1200.0)
        on_seek.assert_not_called()
        assert engine.on_time_update(30.2, 1200.0) is SkipAction.SKIP_INTRO
        on_seek.assert_called_once_with(90)

    def test_reset_rearms_intro_skip(self):
        engine, _, on_seek = _engine(SkipWindow(intro_start=0, intro_end=85, outro_seconds=0))
        engine.on_time_update(1.0, 1200.0)
        engine.reset()
        engine.on_time_update(1.0, 1200.0)
        assert on_seek.call_count == 2

    def test_no_intro_window_configured(self):
        engine, _, on_seek = _engine(SkipWindow())
        engine.on_time_update(1.0, 1200.0)
        on_seek.assert_not_called()

    def test_intro_skip_works_with_unknown_duration(self):
        engine, _, on_seek = _engine(SkipWindow(intro_start=0, intro_end=85))
        assert engine.on_time_update(1.0, float("nan")) is SkipAction.SKIP_INTRO
        on_seek.assert_called_once_with(85)

    def test_without_seek_callback(self):
        engine = AutoSkipEngine(
            SkipWindow(intro_start=0, intro_end=85),
            has_next=lambda: False,
            on_advance=lambda: False,
        )
        assert engine.on_time_update(1.0, 1200.0) is SkipAction.NONE

    def test_configure_swaps_window(self):
        engine, _, on_seek = _engine(SkipWindow())
        engine.configure(SkipWindow(intro_start=0, intro_end=40))
        engine.on_time_update(2.0, 1200.0)
        on_seek.assert_called_once_with(40)
