"""Tests for viewer settings and the settings store."""

from unittest.mock import MagicMock

import pytest
import yaml

from vodhub.config.settings import Settings, SettingsStore, SkipWindow
from vodhub.exceptions import ConfigError
from vodhub.models.source import BareSourceId, ConfiguredSource


class TestSkipWindow:
    """Tests for SkipWindow."""

    def test_defaults(self):
        window = SkipWindow()
        assert not window.has_intro
        assert window.has_outro
        assert window.outro_seconds == 90

    def test_outro_disabled(self):
        assert not SkipWindow(outro_seconds=0).has_outro
        assert not SkipWindow(auto_next=False).has_outro

    def test_from_dict_inherits_base(self):
        base = SkipWindow(outro_seconds=120)
        window = SkipWindow.from_dict({"intro_end": 85}, base=base)
        assert window.intro_end == 85
        assert window.outro_seconds == 120

    @pytest.mark.parametrize("data", [{"intro_end": "soon"}, {"outro_seconds": -1}])
    def test_from_dict_rejects_bad_values(self, data):
        with pytest.raises(ConfigError):
            SkipWindow.from_dict(data)


class TestSettings:
    """Tests for Settings snapshots."""

    def test_invalid_display_mode(self):
        with pytest.raises(ConfigError):
            Settings(search_display_mode="tiles")

    def test_invalid_interval(self):
        with pytest.raises(ConfigError):
            Settings(probe_interval_ms=0)

    def test_from_dict(self):
        settings = Settings.from_dict(
            {
                "episode_reverse_order": True,
                "realtime_latency": True,
                "search_display_mode": "grouped",
                "skip": {
                    "default": {"outro_seconds": 60},
                    "titles": {"  Some Show ": {"intro_end": 85}},
                },
                "sources": [{"id": "src1", "name": "One", "baseUrl": "https://one.test"}],
            }
        )
        assert settings.episode_reverse_order
        assert settings.search_display_mode == "grouped"
        assert settings.sources[0].base_url == "https://one.test"
        window = settings.skip_window_for("SOME SHOW")
        assert window.intro_end == 85
        assert window.outro_seconds == 60
        assert settings.skip_window_for("Other") == settings.skip_default

    def test_from_dict_rejects_bad_source(self):
        with pytest.raises(ConfigError):
            Settings.from_dict({"sources": [{"name": "no id"}]})

    def test_from_dict_rejects_bad_skip(self):
        with pytest.raises(ConfigError):
            Settings.from_dict({"skip": ["nope"]})

    @pytest.mark.parametrize(
        "data",
        [
            {"realtime_latency": "no"},
            {"episode_reverse_order": 1},
            {"search_display_mode": 3},
            {"probe_interval_ms": "5000"},
            {"probe_interval_ms": True},
            {"probe_timeout": "slow"},
            {"skip": {"default": {"auto_next": "off"}}},
        ],
    )
    def test_from_dict_rejects_mistyped_values(self, data):
        with pytest.raises(ConfigError):
            Settings.from_dict(data)

    def test_from_dict_accepts_int_timeout(self):
        assert Settings.from_dict({"probe_timeout": 3}).probe_timeout == 3

    def test_all_sources(self):
        settings = Settings.from_dict(
            {
                "sources": [{"id": "a"}],
                "adult_sources": [{"id": "b"}],
                "subscriptions": [{"id": "c"}],
            }
        )
        assert [s.id for s in settings.all_sources()] == ["a", "b", "c"]


class TestSettingsStore:
    """Tests for SettingsStore."""

    def test_load_missing_file(self, tmp_path):
        store = SettingsStore.load(tmp_path / "settings.yaml")
        assert store.snapshot() == Settings()
        assert store.path == tmp_path / "settings.yaml"

    def test_load_non_dict(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- a\n")
        with pytest.raises(ConfigError):
            SettingsStore.load(path)

    def test_update_notifies_subscribers(self):
        store = SettingsStore()
        callback = MagicMock()
        unsubscribe = store.subscribe(callback)

        new = store.update(realtime_latency=True)
        callback.assert_called_once_with(new)
        assert store.snapshot().realtime_latency

        unsubscribe()
        store.update(realtime_latency=False)
        callback.assert_called_once()

    def test_update_unknown_field(self):
        with pytest.raises(ConfigError):
            SettingsStore().update(volume=11)

    def test_update_writes_through(self, tmp_path):
        path = tmp_path / "nested" / "settings.yaml"
        store = SettingsStore(path=path)
        store.update(episode_reverse_order=True)

        data = yaml.safe_load(path.read_text())
        assert data["episode_reverse_order"] is True
        assert SettingsStore.load(path).snapshot().episode_reverse_order is True

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "settings.yaml"
        settings = Settings.from_dict(
            {
                "search_display_mode": "grouped",
                "skip": {"titles": {"Show": {"intro_end": 30}}},
                "sources": [{"id": "src1", "baseUrl": "https://one.test", "key": "k"}],
            }
        )
        SettingsStore(settings).save(path)

        loaded = SettingsStore.load(path).snapshot()
        assert loaded.search_display_mode == "grouped"
        assert loaded.skip_window_for("show").intro_end == 30
        assert loaded.sources[0].to_payload()["key"] == "k"
        assert not list(tmp_path.glob("settings_*.yaml"))

    def test_save_without_path(self):
        with pytest.raises(ConfigError):
            SettingsStore().save()

    def test_resolve_source(self):
        store = SettingsStore(Settings.from_dict({"subscriptions": [{"id": "sub1"}]}))
        resolved = store.resolve_source("sub1")
        assert isinstance(resolved, ConfiguredSource)
        assert resolved.source_id == "sub1"
        assert store.resolve_source("other") == BareSourceId("other")
