"""
Configuration: resolved paths and API endpoint, plus viewer settings.
"""

from vodhub.config.defaults import DEFAULT_API_BASE_URL, DEFAULT_PROBE_INTERVAL_MS
from vodhub.config.loader import (
    ConfigSource,
    VodhubConfig,
    clear_config_cache,
    get_api_base_url,
    get_config,
    get_root_dir,
)
from vodhub.config.settings import Settings, SettingsStore, SkipWindow

__all__ = [
    "DEFAULT_API_BASE_URL",
    "DEFAULT_PROBE_INTERVAL_MS",
    # Config loader
    "ConfigSource",
    "VodhubConfig",
    "get_config",
    "get_root_dir",
    "get_api_base_url",
    "clear_config_cache",
    # Settings
    "Settings",
    "SettingsStore",
    "SkipWindow",
]
