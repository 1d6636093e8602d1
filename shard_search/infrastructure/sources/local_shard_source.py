"""
Infrastructure: Local Shard Source

Reads shard files from a local documentation build directory.
"""

import asyncio
from pathlib import Path
from typing import Union

from shard_search.errors import ShardFetchError
from .http_shard_source import DEFAULT_SHARD_SUFFIX, MANIFEST_NAME


class LocalShardSource:
    """Shard source for a generated site on disk (e.g. html/search/)."""

    def __init__(self, directory: Union[str, Path], suffix: str = DEFAULT_SHARD_SUFFIX):
        self.directory = Path(directory)
        self.suffix = suffix

    def path_for(self, shard_id: str) -> Path:
        return self.directory / f"{shard_id}{self.suffix}"

    async def fetch(self, shard_id: str) -> str:
        """
        Read one shard file off the event loop.

        Raises:
            ShardFetchError: If the file is missing or unreadable
        """
        return await self._read(shard_id, self.path_for(shard_id))

    async def fetch_manifest(self) -> str:
        return await self._read("manifest", self.directory / MANIFEST_NAME)

    async def _read(self, shard_id: str, path: Path) -> str:
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ShardFetchError(shard_id, f"Cannot read {path}: {e}") from e

    async def close(self) -> None:
        pass
