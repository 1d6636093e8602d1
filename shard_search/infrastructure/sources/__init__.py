"""
Shard sources: where raw shard payloads come from.
"""

from .http_shard_source import HttpShardSource, DEFAULT_SHARD_SUFFIX, MANIFEST_NAME
from .local_shard_source import LocalShardSource

__all__ = [
    "HttpShardSource",
    "LocalShardSource",
    "DEFAULT_SHARD_SUFFIX",
    "MANIFEST_NAME",
]
