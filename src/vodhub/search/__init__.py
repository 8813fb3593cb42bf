"""
Search result aggregation.
"""

from vodhub.search.grouping import (
    arrange_results,
    decode_candidates,
    encode_candidates,
    group_sources,
    latency_rank,
)

__all__ = [
    "arrange_results",
    "decode_candidates",
    "encode_candidates",
    "group_sources",
    "latency_rank",
]
