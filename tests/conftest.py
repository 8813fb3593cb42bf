"""Pytest configuration and shared fixtures for vodhub tests."""

from unittest.mock import AsyncMock

import pytest

from vodhub.config.loader import clear_config_cache
from vodhub.config.settings import Settings, SettingsStore
from vodhub.models.episode import Episode, VideoDetail


def make_episodes(*urls: str) -> list[Episode]:
    return [Episode(name=f"Episode {i + 1}", url=url, index=i) for i, url in enumerate(urls)]


def make_detail(*urls: str, name: str = "Test Show", **extra) -> VideoDetail:
    return VideoDetail.model_validate(
        {
            "vod_id": "123",
            "vod_name": name,
            "vod_pic": "https://img.example.com/poster.jpg",
            "episodes": [{"url": url} for url in urls],
            **extra,
        }
    )


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch, tmp_path):
    """Keep tests away from the real ~/.vodhub and env overrides."""
    monkeypatch.setenv("VODHUB_ROOT", str(tmp_path / "vodhub-root"))
    monkeypatch.delenv("VODHUB_API_URL", raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def settings_store():
    return SettingsStore(Settings())


@pytest.fixture
def detail_client():
    """DetailClient stand-in returning a three-episode show."""
    client = AsyncMock()
    client.fetch = AsyncMock(return_value=make_detail("e0", "e1", "e2"))
    return client


@pytest.fixture(name="make_episodes")
def make_episodes_fixture():
    return make_episodes


@pytest.fixture(name="make_detail")
def make_detail_fixture():
    return make_detail
