"""
Infrastructure: HTTP Shard Source

Fetches static shard files from the documentation site, e.g.
https://example.org/docs/search/all_6.js
"""

import asyncio
from typing import Optional

import aiohttp

from shard_search.errors import ShardFetchError

DEFAULT_SHARD_SUFFIX = ".js"
MANIFEST_NAME = "searchdata.json"


class HttpShardSource:
    """
    Shard source backed by plain HTTP GETs.

    A single aiohttp session is opened lazily and reused for every shard.
    """

    def __init__(
        self,
        base_url: str,
        suffix: str = DEFAULT_SHARD_SUFFIX,
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize HTTP shard source.

        Args:
            base_url: URL of the directory holding the shard files
            suffix: File extension appended to the shard id
            timeout: Total request timeout in seconds
            session: Optional externally managed session
        """
        self._base_url = base_url.rstrip("/")
        self._suffix = suffix
        self._timeout = timeout
        self._session = session
        self._owns_session = session is None

    def url_for(self, shard_id: str) -> str:
        return f"{self._base_url}/{shard_id}{self._suffix}"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout)
            )
        return self._session

    async def fetch(self, shard_id: str) -> str:
        """
        GET one shard file.

        Raises:
            ShardFetchError: On non-200 status, client error or timeout
        """
        return await self._get_text(shard_id, self.url_for(shard_id))

    async def fetch_manifest(self) -> str:
        return await self._get_text("manifest", f"{self._base_url}/{MANIFEST_NAME}")

    async def _get_text(self, shard_id: str, url: str) -> str:
        session = self._get_session()
        try:
            async with session.get(url) as response:
                if response.status != 200:
                    raise ShardFetchError(shard_id, f"HTTP {response.status} for {url}")
                return await response.text()

        except asyncio.TimeoutError as e:
            raise ShardFetchError(shard_id, f"Timeout after {self._timeout}s") from e

        except aiohttp.ClientError as e:
            raise ShardFetchError(shard_id, f"HTTP Client Error: {str(e)}") from e

    async def close(self):
        """Close the session if this source opened it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
