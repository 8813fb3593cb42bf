"""
Utility helpers.
"""

from vodhub.utils.logging import log_timed

__all__ = ["log_timed"]
