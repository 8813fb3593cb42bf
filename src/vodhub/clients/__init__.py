"""
External collaborators consumed by the playback core.
"""

from vodhub.clients.detail import DetailClient
from vodhub.clients.sinks import HistoryEntry, SessionSink

__all__ = ["DetailClient", "HistoryEntry", "SessionSink"]
