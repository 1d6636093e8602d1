"""
Domain Services for the Search Index
"""

from .shard_registry import ShardRegistry, DEFAULT_BUCKETS
from .query_engine import QueryEngine, SubstringScope
from .result_ranker import ResultRanker, ResultRow, DEFAULT_MAX_RESULTS

__all__ = [
    "ShardRegistry",
    "DEFAULT_BUCKETS",
    "QueryEngine",
    "SubstringScope",
    "ResultRanker",
    "ResultRow",
    "DEFAULT_MAX_RESULTS",
]
