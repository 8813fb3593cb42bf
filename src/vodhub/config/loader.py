"""
Unified configuration loader with priority resolution.

Root directory (VODHUB_ROOT):
- macOS/Linux: ~/.vodhub
- Windows: %APPDATA%\\vodhub
- Override: VODHUB_ROOT environment variable

API base URL priority (highest to lowest):
1. Environment variable (VODHUB_API_URL) - override
2. Project config (.vodhub/config.yaml)
3. User config ({root_dir}/config.yaml)
4. Default (http://localhost:3000)
"""

import logging
import os
import sys
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from vodhub.config.defaults import DEFAULT_API_BASE_URL

logger = logging.getLogger(__name__)


class ConfigSource(Enum):
    """Source of the configuration value."""

    ENV = "env"
    PROJECT = "project"
    USER = "user"
    DEFAULT = "default"


@dataclass(frozen=True)
class VodhubConfig:
    """Resolved vodhub configuration."""

    root_dir: Path
    api_base_url: str
    source: ConfigSource

    @property
    def settings_path(self) -> Path:
        return self.root_dir / "settings.yaml"

    def __repr__(self) -> str:
        return (
            f"VodhubConfig(root_dir={self.root_dir!r}, "
            f"api_base_url={self.api_base_url!r}, source={self.source.value!r})"
        )


def _load_yaml_config(config_path: Path) -> dict[str, Any] | None:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        Parsed config dict, or None if file doesn't exist or fails to parse.
    """
    if not config_path.exists():
        return None

    try:
        with open(config_path) as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        return None

    if config is None:
        return {}
    if not isinstance(config, dict):
        logger.warning(f"Config file {config_path} is not a valid YAML dict")
        return None
    return config


def _get_api_url_from_yaml(config: dict[str, Any] | None) -> str | None:
    """Extract api_base_url from a parsed YAML config, without trailing slash."""
    if config is None:
        return None

    url = config.get("api_base_url")
    if not url or not isinstance(url, str):
        return None
    return url.strip().rstrip("/")


def _find_project_config() -> Path | None:
    """Find project-level config by walking up from cwd.

    Returns:
        Path to .vodhub/config.yaml if found, None otherwise.
    """
    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        config_path = parent / ".vodhub" / "config.yaml"
        if config_path.exists():
            return config_path
    return None


def _get_root_dir() -> Path:
    """Get the vodhub root directory.

    Priority:
    1. VODHUB_ROOT environment variable
    2. Platform-specific default:
       - Windows: %APPDATA%\\vodhub
       - macOS/Linux: ~/.vodhub
    """
    env_root = os.environ.get("VODHUB_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()

    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "vodhub"
        return Path.home() / "AppData" / "Roaming" / "vodhub"
    return Path.home() / ".vodhub"


def _get_user_config_path() -> Path:
    """Get the user-level config path ({root_dir}/config.yaml)."""
    return _get_root_dir() / "config.yaml"


def _resolve_config() -> VodhubConfig:
    """Resolve configuration from all sources in priority order."""
    root_dir = _get_root_dir()

    env_url = os.environ.get("VODHUB_API_URL")
    if env_url:
        api_url = env_url.strip().rstrip("/")
        logger.info(f"Using api_base_url from VODHUB_API_URL: {api_url}")
        return VodhubConfig(root_dir=root_dir, api_base_url=api_url, source=ConfigSource.ENV)

    project_config_path = _find_project_config()
    if project_config_path:
        api_url = _get_api_url_from_yaml(_load_yaml_config(project_config_path))
        if api_url:
            logger.info(
                f"Using api_base_url from project config {project_config_path}: {api_url}"
            )
            return VodhubConfig(
                root_dir=root_dir, api_base_url=api_url, source=ConfigSource.PROJECT
            )

    user_config_path = _get_user_config_path()
    api_url = _get_api_url_from_yaml(_load_yaml_config(user_config_path))
    if api_url:
        logger.info(f"Using api_base_url from user config {user_config_path}: {api_url}")
        return VodhubConfig(root_dir=root_dir, api_base_url=api_url, source=ConfigSource.USER)

    logger.debug(f"Using default api_base_url: {DEFAULT_API_BASE_URL}")
    return VodhubConfig(
        root_dir=root_dir, api_base_url=DEFAULT_API_BASE_URL, source=ConfigSource.DEFAULT
    )


@lru_cache(maxsize=1)
def get_config() -> VodhubConfig:
    """Get resolved vodhub configuration.

    Results are cached - configuration is resolved once per process.
    To force re-resolution (e.g., after env change), use clear_config_cache().
    """
    return _resolve_config()


def get_root_dir(ensure_exists: bool = True) -> Path:
    """Get the resolved root directory.

    Args:
        ensure_exists: If True (default), create the directory if it doesn't exist.
    """
    root_dir = get_config().root_dir
    if ensure_exists:
        root_dir.mkdir(parents=True, exist_ok=True)
    return root_dir


def get_api_base_url() -> str:
    return get_config().api_base_url


def clear_config_cache() -> None:
    """Clear the cached configuration.

    Call this if environment variables or config files have changed
    and you need to re-resolve the configuration.
    """
    get_config.cache_clear()
