"""
Custom exceptions for vodhub.

All vodhub exceptions inherit from VodhubError for easy catching.
Errors that reach the viewer inherit from SessionError and carry a
structured form stored in PlaybackState.last_error.
"""

from __future__ import annotations

from typing import Any


class VodhubError(Exception):
    """Base exception for all vodhub errors."""

    pass


class SessionError(VodhubError):
    """Error that ends the current playback attempt with a retry affordance.

    Attributes:
        message: Human-readable error message
        category: Error classification (e.g., "unavailable", "network")
        details: Additional diagnostic information
        suggestion: Recommended remediation steps
    """

    def __init__(
        self,
        message: str,
        *,
        category: str = "unknown",
        details: dict[str, Any] | None = None,
        suggestion: str = "",
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.details = details or {}
        self.suggestion = suggestion

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a structured dict for the session state."""
        result: dict[str, Any] = {
            "type": self.__class__.__name__,
            "message": self.message,
            "category": self.category,
        }
        if self.details:
            result["details"] = self.details
        if self.suggestion:
            result["suggestion"] = self.suggestion
        return result


class DetailUnavailableError(SessionError):
    """The source confirmed it has no such video (HTTP 404)."""

    def __init__(
        self,
        message: str = (
            "This video source is not available. "
            "Please go back and try another source."
        ),
        *,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message,
            category="unavailable",
            details=details,
            suggestion="Switch to another source for this title.",
        )


class DetailError(SessionError):
    """Transient or unknown upstream failure while fetching video details."""

    def __init__(
        self,
        message: str,
        *,
        category: str = "upstream",
        details: dict[str, Any] | None = None,
        http_code: int | None = None,
    ):
        details = details or {}
        if http_code:
            details["http_code"] = http_code

        super().__init__(
            message,
            category=category,
            details=details,
            suggestion="Retry, or try another source.",
        )
        self.http_code = http_code


class NoEpisodesError(SessionError):
    """Detail lookup succeeded but returned no playable episodes."""

    def __init__(
        self,
        message: str = "No playable episodes available for this video from this source",
        *,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message,
            category="no_episodes",
            details=details,
            suggestion="Try another source for this title.",
        )


class OutOfRangeError(VodhubError, IndexError):
    """Navigation request outside the episode sequence. Never shown to viewers."""

    def __init__(self, index: object, length: int):
        self.index = index
        self.length = length
        super().__init__(f"Episode index {index!r} outside [0, {length})")


class MissingParameterError(VodhubError):
    """A required player entry parameter is absent."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing required player parameter '{name}'")


class ConfigError(VodhubError):
    """Invalid configuration or settings file."""

    pass
