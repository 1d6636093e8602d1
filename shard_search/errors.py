"""
Error taxonomy for the sharded search engine.

- MalformedEntryError: one wire row is unusable; the parser skips it.
- ShardFetchError: a shard could not be retrieved or read; not cached, retried later.
- ShardIdMismatchError: build-time and runtime partitioning disagree; fatal.
"""

from typing import Any, Optional


class ShardSearchError(Exception):
    """Base class for all search engine errors."""


class MalformedEntryError(ShardSearchError):
    """A shard row is missing required fields or breaks the key ordering."""

    def __init__(self, shard_id: str, row_index: int, reason: str, row: Any = None):
        self.shard_id = shard_id
        self.row_index = row_index
        self.reason = reason
        self.row = row
        super().__init__(f"Malformed entry #{row_index} in {shard_id}: {reason}")


class ShardFetchError(ShardSearchError):
    """A shard could not be fetched from its source."""

    def __init__(self, shard_id: str, reason: str):
        self.shard_id = shard_id
        self.reason = reason
        super().__init__(f"Failed to fetch shard {shard_id}: {reason}")


class ShardParseError(ShardFetchError):
    """A shard payload was fetched but cannot be read as a shard at all."""


class ShardIdMismatchError(ShardSearchError):
    """
    The shard partitioning used at build time disagrees with the runtime registry.

    This means the index is structurally unreadable and must never be
    swallowed as an ordinary fetch failure.
    """

    def __init__(self, shard_id: str, reason: str, key: Optional[str] = None):
        self.shard_id = shard_id
        self.reason = reason
        self.key = key
        super().__init__(f"Shard id mismatch for {shard_id}: {reason}")
