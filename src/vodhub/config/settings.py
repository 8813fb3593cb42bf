"""
vodhub.config.settings - Viewer preferences.

Settings is an immutable snapshot; SettingsStore holds the current one and
hands it out via snapshot(). Components receive the store at construction
and re-read the snapshot at the start of every operation that depends on
it, so a preference flipped mid-session applies to the next operation
without any transactional guarantee.

YAML structure (``{root_dir}/settings.yaml``):
    episode_reverse_order: false
    realtime_latency: true
    search_display_mode: grouped
    probe_interval_ms: 5000
    skip:
      default: {intro_start: 0, intro_end: 0, outro_seconds: 90, auto_next: true}
      titles:
        "Some Show": {intro_end: 85, outro_seconds: 120}
    sources:
      - {id: src1, name: Source One, baseUrl: "https://api.example.com"}
    adult_sources: []
    subscriptions: []
"""

from __future__ import annotations

import dataclasses
import logging
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from vodhub.config.defaults import (
    DEFAULT_INTRO_END,
    DEFAULT_INTRO_START,
    DEFAULT_OUTRO_SECONDS,
    DEFAULT_PROBE_INTERVAL_MS,
    DISPLAY_MODES,
    PROBE_TIMEOUT,
)
from vodhub.exceptions import ConfigError
from vodhub.models.source import (
    BareSourceId,
    ConfiguredSource,
    ResolvedSource,
    SourceConfig,
    normalize_title,
)

logger = logging.getLogger(__name__)

_SOURCE_LISTS = ("sources", "adult_sources", "subscriptions")

_SCALAR_TYPES: dict[str, type | tuple[type, ...]] = {
    "episode_reverse_order": bool,
    "realtime_latency": bool,
    "search_display_mode": str,
    "probe_interval_ms": int,
    "probe_timeout": (int, float),
}


def _type_name(expected: type | tuple[type, ...]) -> str:
    if expected is bool:
        return "true or false"
    if expected is int:
        return "an integer"
    if expected is str:
        return "a string"
    return "a number"


@dataclass(frozen=True)
class SkipWindow:
    """Intro/outro timing for one title.

    Attributes:
        intro_start: Start of the intro window in seconds.
        intro_end: End of the intro window; playback seeks here once per episode.
            Intro skipping is off when intro_end <= intro_start.
        outro_seconds: Auto-next fires when fewer seconds than this remain.
            Zero disables auto-next.
        auto_next: Master switch for auto-next.
    """

    intro_start: float = DEFAULT_INTRO_START
    intro_end: float = DEFAULT_INTRO_END
    outro_seconds: float = DEFAULT_OUTRO_SECONDS
    auto_next: bool = True

    @property
    def has_intro(self) -> bool:
        return self.intro_end > self.intro_start

    @property
    def has_outro(self) -> bool:
        return self.auto_next and self.outro_seconds > 0

    @classmethod
    def from_dict(cls, data: dict[str, Any], base: SkipWindow | None = None) -> SkipWindow:
        """Build from a YAML mapping, inheriting unspecified fields from ``base``."""
        base = base or cls()
        auto_next = data.get("auto_next", base.auto_next)
        if not isinstance(auto_next, bool):
            raise ConfigError(f"'auto_next' must be true or false, got {auto_next!r}")
        try:
            window = cls(
                intro_start=float(data.get("intro_start", base.intro_start)),
                intro_end=float(data.get("intro_end", base.intro_end)),
                outro_seconds=float(data.get("outro_seconds", base.outro_seconds)),
                auto_next=auto_next,
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid skip window {data!r}: {e}") from e
        if window.intro_start < 0 or window.outro_seconds < 0:
            raise ConfigError(f"Skip window values must be non-negative: {data!r}")
        return window

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class Settings:
    """Read-only snapshot of viewer preferences."""

    episode_reverse_order: bool = False
    realtime_latency: bool = False
    search_display_mode: str = "normal"
    probe_interval_ms: int = DEFAULT_PROBE_INTERVAL_MS
    probe_timeout: float = PROBE_TIMEOUT

    skip_default: SkipWindow = field(default_factory=SkipWindow)
    # Keyed by normalized title
    skip_titles: dict[str, SkipWindow] = field(default_factory=dict)

    sources: tuple[SourceConfig, ...] = ()
    adult_sources: tuple[SourceConfig, ...] = ()
    subscriptions: tuple[SourceConfig, ...] = ()

    def __post_init__(self):
        if self.search_display_mode not in DISPLAY_MODES:
            raise ConfigError(
                f"search_display_mode must be one of {DISPLAY_MODES}, "
                f"got {self.search_display_mode!r}"
            )
        if self.probe_interval_ms <= 0:
            raise ConfigError("probe_interval_ms must be positive")

    def skip_window_for(self, title: str | None) -> SkipWindow:
        if title:
            window = self.skip_titles.get(normalize_title(title))
            if window is not None:
                return window
        return self.skip_default

    def all_sources(self) -> list[SourceConfig]:
        return [*self.sources, *self.adult_sources, *self.subscriptions]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Build a snapshot from a parsed YAML mapping.

        Raises:
            ConfigError: If any value fails validation.
        """
        kwargs: dict[str, Any] = {}
        for key, expected in _SCALAR_TYPES.items():
            if key not in data:
                continue
            value = data[key]
            if isinstance(value, bool) != (expected is bool) or not isinstance(value, expected):
                raise ConfigError(f"'{key}' must be {_type_name(expected)}, got {value!r}")
            kwargs[key] = value

        skip = data.get("skip") or {}
        if not isinstance(skip, dict):
            raise ConfigError("'skip' must be a mapping")
        default = SkipWindow.from_dict(skip.get("default") or {})
        kwargs["skip_default"] = default
        kwargs["skip_titles"] = {
            normalize_title(str(title)): SkipWindow.from_dict(window or {}, base=default)
            for title, window in (skip.get("titles") or {}).items()
        }

        for key in _SOURCE_LISTS:
            try:
                kwargs[key] = tuple(
                    SourceConfig.model_validate(item) for item in data.get(key) or []
                )
            except ValidationError as e:
                raise ConfigError(f"Invalid entry in '{key}': {e}") from e

        try:
            return cls(**kwargs)
        except TypeError as e:
            raise ConfigError(str(e)) from e

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "episode_reverse_order": self.episode_reverse_order,
            "realtime_latency": self.realtime_latency,
            "search_display_mode": self.search_display_mode,
            "probe_interval_ms": self.probe_interval_ms,
            "probe_timeout": self.probe_timeout,
            "skip": {
                "default": self.skip_default.to_dict(),
                "titles": {k: v.to_dict() for k, v in self.skip_titles.items()},
            },
        }
        for key in _SOURCE_LISTS:
            result[key] = [s.to_payload() for s in getattr(self, key)]
        return result


class SettingsStore:
    """Holds the current Settings snapshot and notifies subscribers on change.

    Args:
        settings: Initial snapshot. Defaults to Settings().
        path: YAML file used by save(); update() writes through when set.
    """

    def __init__(self, settings: Settings | None = None, path: Path | None = None):
        self._settings = settings or Settings()
        self._path = path
        self._subscribers: list[Callable[[Settings], None]] = []

    @classmethod
    def load(cls, path: Path) -> SettingsStore:
        """Load settings from YAML. A missing file yields defaults."""
        if not path.exists():
            logger.debug(f"No settings file at {path}, using defaults")
            return cls(path=path)

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read settings from {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Settings file {path} is not a valid YAML dict")
        return cls(Settings.from_dict(data), path=path)

    @property
    def path(self) -> Path | None:
        return self._path

    def snapshot(self) -> Settings:
        return self._settings

    def update(self, **changes: Any) -> Settings:
        """Replace the snapshot with ``changes`` applied and notify subscribers."""
        try:
            new = dataclasses.replace(self._settings, **changes)
        except TypeError as e:
            raise ConfigError(str(e)) from e
        self._settings = new
        if self._path is not None:
            self.save()
        for callback in list(self._subscribers):
            callback(new)
        return new

    def subscribe(self, callback: Callable[[Settings], None]) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def save(self, path: Path | None = None) -> Path:
        """Persist the snapshot using an atomic write."""
        path = path or self._path
        if path is None:
            raise ConfigError("No settings path configured")
        path.parent.mkdir(parents=True, exist_ok=True)

        temp_fd, temp_path = tempfile.mkstemp(
            suffix=".yaml", prefix="settings_", dir=path.parent
        )
        try:
            with open(temp_fd, "w") as f:
                yaml.safe_dump(self._settings.to_dict(), f, sort_keys=False)
            Path(temp_path).replace(path)
        except Exception:
            Path(temp_path).unlink(missing_ok=True)
            raise
        return path

    def resolve_source(self, source_id: str) -> ResolvedSource:
        """Look ``source_id`` up in the configured source lists."""
        for config in self._settings.all_sources():
            if config.id == source_id:
                return ConfiguredSource(config)
        return BareSourceId(source_id)
