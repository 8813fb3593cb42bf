"""
Default configuration values for vodhub.

Note: The API base URL is configured via config/loader.py which supports
environment variables (VODHUB_API_URL), project config, and user config.
Viewer preferences live in config/settings.py.
"""

# Backend serving /api/detail and /api/ping
DEFAULT_API_BASE_URL = "http://localhost:3000"

DETAIL_PATH = "/api/detail"
PING_PATH = "/api/ping"

# Real-time latency polling cadence
DEFAULT_PROBE_INTERVAL_MS = 5000

# Timeouts (seconds)
PROBE_TIMEOUT = 5.0
DETAIL_TIMEOUT = 15.0

# Auto-next fires when fewer than this many seconds remain
DEFAULT_OUTRO_SECONDS = 90.0

# Intro skipping is off unless a window is configured
DEFAULT_INTRO_START = 0.0
DEFAULT_INTRO_END = 0.0

DISPLAY_MODES = ("normal", "grouped")

UNKNOWN_TITLE = "Unknown video"
