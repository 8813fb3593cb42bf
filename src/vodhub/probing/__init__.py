"""
Source latency probing.
"""

from vodhub.probing.latency import LatencyProbe

__all__ = ["LatencyProbe"]
