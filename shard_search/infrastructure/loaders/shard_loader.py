"""
Infrastructure: Shard Loader

Asynchronous, memoized, request-coalescing shard loading.
"""

import asyncio
import json
import logging
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from shard_search.domain.index.entities import Shard
from shard_search.domain.index.repositories import IShardSource
from shard_search.domain.index.services import ShardRegistry
from shard_search.errors import ShardFetchError, ShardIdMismatchError, ShardParseError
from shard_search.logging_utils import StructuredLogger, ComponentType
from shard_search.models import EventType, IndexManifest
from .shard_parser import ShardParser


class ShardLoader:
    """
    Loads shards on demand and keeps them for the life of the session.

    Lazy Loading Architecture:
    1. Check if shard already loaded (cache hit)
    2. Attach to an in-flight fetch for the same shard if there is one
    3. Otherwise start a fetch, parse, cache on success

    Failures are never cached, so the next request for the shard retries.
    One loader instance is created per page session; nothing is module-global.
    """

    def __init__(
        self,
        source: IShardSource,
        registry: ShardRegistry,
        parser: Optional[ShardParser] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Initialize shard loader.

        Args:
            source: Where raw shard payloads come from
            registry: Registry used to validate shard ids and keys
            parser: Wire-format parser (defaults to one bound to registry)
            logger: Structured logger (defaults to the ShardLoader component)
        """
        self.source = source
        self.registry = registry
        self.logger = logger or StructuredLogger(ComponentType.SHARD_LOADER)
        self.parser = parser or ShardParser(registry, logger=self.logger)

        self._loaded_shards: Dict[str, Shard] = {}
        self._in_flight: Dict[str, asyncio.Task] = {}
        self._fetch_counts: Dict[str, int] = {}
        self._lock: Optional[asyncio.Lock] = None

    def _get_lock(self) -> asyncio.Lock:
        # Created lazily so the lock binds to the running loop
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def load(self, shard_id: str) -> Shard:
        """
        Load a shard, fetching it at most once at a time.

        Args:
            shard_id: Identifier like "all_6"

        Returns:
            The parsed Shard

        Raises:
            ShardFetchError: If the fetch or parse failed (not cached)
            ShardIdMismatchError: If the shard does not fit the registry layout
        """
        # Fast path: already loaded
        cached = self._loaded_shards.get(shard_id)
        if cached is not None:
            return cached

        parsed = self.registry.parse_shard_id(shard_id)
        if parsed is None or parsed[0] != self.registry.section:
            raise ShardIdMismatchError(shard_id, "not a shard id of the current registry layout")

        async with self._get_lock():
            # Double-check after acquiring lock
            cached = self._loaded_shards.get(shard_id)
            if cached is not None:
                return cached

            task = self._in_flight.get(shard_id)
            if task is None:
                task = asyncio.ensure_future(self._fetch_and_parse(shard_id))
                self._in_flight[shard_id] = task
                task.add_done_callback(lambda t, sid=shard_id: self._on_fetch_done(sid, t))

        # Shielded so a cancelled waiter never cancels the shared fetch
        return await asyncio.shield(task)

    def _on_fetch_done(self, shard_id: str, task: asyncio.Task) -> None:
        if self._in_flight.get(shard_id) is task:
            del self._in_flight[shard_id]
        if not task.cancelled():
            # Marks the exception retrieved when every waiter went away
            task.exception()

    async def _fetch_and_parse(self, shard_id: str) -> Shard:
        self._fetch_counts[shard_id] = self._fetch_counts.get(shard_id, 0) + 1
        self.logger.log_event(
            trace_id=shard_id,
            event_type=EventType.SHARD_FETCH_STARTED,
            payload={"shard_id": shard_id},
            metrics={"attempt": self._fetch_counts[shard_id]},
            level=logging.DEBUG,
        )

        try:
            payload = await self.source.fetch(shard_id)
            shard = self.parser.parse(shard_id, payload)
        except ShardIdMismatchError as e:
            self.logger.log_event(
                trace_id=shard_id,
                event_type=EventType.SHARD_ID_MISMATCH,
                payload={"shard_id": shard_id, "reason": e.reason, "key": e.key},
                level=logging.CRITICAL,
            )
            raise
        except ShardFetchError as e:
            self.logger.log_event(
                trace_id=shard_id,
                event_type=EventType.SHARD_FETCH_FAILED,
                payload={"shard_id": shard_id, "reason": e.reason},
                level=logging.WARNING,
            )
            raise

        self._loaded_shards[shard_id] = shard
        self.logger.log_event(
            trace_id=shard_id,
            event_type=EventType.SHARD_LOADED,
            payload={"shard_id": shard_id},
            metrics={"entries": len(shard), "skipped_rows": shard.skipped_rows},
        )
        return shard

    async def load_many(self, shard_ids: List[str]) -> Dict[str, Union[Shard, ShardFetchError]]:
        """
        Load several shards concurrently.

        Returns:
            Mapping of shard id to Shard, or to the ShardFetchError it failed with.
            Any other error (ShardIdMismatchError included) propagates.
        """
        results = await asyncio.gather(
            *(self.load(sid) for sid in shard_ids), return_exceptions=True
        )
        outcome: Dict[str, Union[Shard, ShardFetchError]] = {}
        for shard_id, result in zip(shard_ids, results):
            if isinstance(result, BaseException) and not isinstance(result, ShardFetchError):
                raise result
            outcome[shard_id] = result
        return outcome

    async def verify_manifest(self) -> Optional[IndexManifest]:
        """
        Check the extractor's manifest against the registry layout.

        Returns:
            The manifest, or None if the source has none

        Raises:
            ShardIdMismatchError: If the manifest's layout disagrees with the registry
            ShardParseError: If the manifest exists but cannot be read
        """
        try:
            raw = await self.source.fetch_manifest()
        except ShardFetchError as e:
            self.logger.logger.info(f"No index manifest available: {e.reason}")
            return None

        try:
            manifest = IndexManifest(**json.loads(raw))
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            raise ShardParseError("manifest", f"unreadable manifest: {e}") from e

        manifest_buckets = [b.strip().lower() for b in manifest.buckets]
        registry_buckets = [b.strip().lower() for b in self.registry.buckets]
        fingerprint_differs = (
            manifest.layout_fingerprint is not None
            and manifest.layout_fingerprint != self.registry.layout_fingerprint()
        )
        if manifest_buckets != registry_buckets or fingerprint_differs:
            self.logger.log_event(
                trace_id="manifest",
                event_type=EventType.SHARD_ID_MISMATCH,
                payload={"manifest_buckets": manifest.buckets, "registry_buckets": list(self.registry.buckets)},
                level=logging.CRITICAL,
            )
            raise ShardIdMismatchError(
                "manifest", "extractor bucket layout differs from runtime registry"
            )
        return manifest

    def is_shard_loaded(self, shard_id: str) -> bool:
        """Check if a shard is already loaded."""
        return shard_id in self._loaded_shards

    def get_loaded_shard(self, shard_id: str) -> Optional[Shard]:
        return self._loaded_shards.get(shard_id)

    def loaded_shard_ids(self) -> List[str]:
        return sorted(self._loaded_shards)

    def fetch_count(self, shard_id: str) -> int:
        """How many fetches were started for a shard (coalesced requests count once)."""
        return self._fetch_counts.get(shard_id, 0)

    async def close(self) -> None:
        await self.source.close()
