"""
Repository Interface: Shard Source

Defines the contract for retrieving raw shard payloads.
"""

from typing import Protocol


class IShardSource(Protocol):
    """
    Interface for shard payload access.

    Sources only move bytes; parsing and caching live in the loader.
    """

    async def fetch(self, shard_id: str) -> str:
        """
        Fetch the raw payload of one shard.

        Args:
            shard_id: Identifier like "all_6"

        Returns:
            The shard file contents as text

        Raises:
            ShardFetchError: On network or storage failure
        """
        ...

    async def fetch_manifest(self) -> str:
        """
        Fetch the raw index manifest (searchdata.json).

        Raises:
            ShardFetchError: If the manifest cannot be retrieved
        """
        ...

    async def close(self) -> None:
        """Release any held resources."""
        ...
