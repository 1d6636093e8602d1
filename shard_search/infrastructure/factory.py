"""
Infrastructure: Search Engine Factory

Dependency injection factory for assembling one search session.
Everything is created per page session; nothing is shared across sessions.
"""

from typing import Optional

from shard_search.application.session import QuerySessionController
from shard_search.application.use_cases import SearchShardsUseCase
from shard_search.config import SearchSettings
from shard_search.domain.index.repositories import IShardSource
from shard_search.domain.index.services import QueryEngine, ResultRanker, ShardRegistry
from shard_search.logging_utils import StructuredLogger, ComponentType
from .adapters import LoggerAdapter
from .loaders import ShardLoader, ShardParser
from .sources import HttpShardSource, LocalShardSource


class SearchEngineFactory:
    """
    Factory for creating search components.

    Implements dependency injection pattern.
    """

    @staticmethod
    def create_registry(settings: SearchSettings) -> ShardRegistry:
        return ShardRegistry(buckets=settings.buckets, section=settings.section)

    @staticmethod
    def create_source(settings: SearchSettings) -> IShardSource:
        """
        Pick the shard source from settings: HTTP if base_url is set, else local files.

        Raises:
            ValueError: If neither base_url nor local_directory is configured
        """
        if settings.base_url:
            return HttpShardSource(
                base_url=settings.base_url,
                suffix=settings.shard_suffix,
                timeout=settings.http_timeout,
            )
        if settings.local_directory:
            return LocalShardSource(settings.local_directory, suffix=settings.shard_suffix)
        raise ValueError("No shard source configured: set shards.base_url or shards.local_directory")

    @staticmethod
    def create_loader(
        settings: SearchSettings,
        registry: ShardRegistry,
        source: Optional[IShardSource] = None,
    ) -> ShardLoader:
        source = source or SearchEngineFactory.create_source(settings)
        logger = StructuredLogger(ComponentType.SHARD_LOADER)
        return ShardLoader(
            source=source,
            registry=registry,
            parser=ShardParser(registry, logger=logger),
            logger=logger,
        )

    @staticmethod
    def create_use_case(
        settings: Optional[SearchSettings] = None,
        source: Optional[IShardSource] = None,
    ) -> SearchShardsUseCase:
        """
        Create fully wired SearchShardsUseCase.

        Args:
            settings: Search settings (defaults to the YAML config)
            source: Optional shard source overriding the configured one

        Returns:
            Fully configured SearchShardsUseCase instance
        """
        settings = settings or SearchSettings.from_config()
        registry = SearchEngineFactory.create_registry(settings)

        return SearchShardsUseCase(
            registry=registry,
            loader=SearchEngineFactory.create_loader(settings, registry, source),
            query_engine=QueryEngine(substring_scope=settings.substring_scope),
            ranker=ResultRanker(max_results=settings.max_results),
            logger=LoggerAdapter(StructuredLogger(ComponentType.QUERY_ENGINE)),
        )

    @staticmethod
    def create_session(
        settings: Optional[SearchSettings] = None,
        source: Optional[IShardSource] = None,
    ) -> QuerySessionController:
        """Create a session controller for one search box."""
        return QuerySessionController(
            use_case=SearchEngineFactory.create_use_case(settings, source),
            logger=LoggerAdapter(StructuredLogger(ComponentType.SESSION_CONTROLLER)),
        )

    @staticmethod
    async def open_session(
        settings: Optional[SearchSettings] = None,
        source: Optional[IShardSource] = None,
    ) -> QuerySessionController:
        """
        Create a session and, if configured, check the index manifest first.

        Raises:
            ShardIdMismatchError: If the manifest's layout disagrees with the registry
        """
        settings = settings or SearchSettings.from_config()
        session = SearchEngineFactory.create_session(settings, source)
        if settings.verify_manifest:
            await session.use_case.loader.verify_manifest()
        return session
