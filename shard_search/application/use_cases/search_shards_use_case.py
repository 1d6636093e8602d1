"""
Use Case: Search Shards

Application layer orchestrator for one query.
Implements the search pipeline: normalize → route → load → match → rank
"""

from typing import Dict, List, Protocol, Tuple, Union

from ..dtos import SearchRequestDTO, SearchResultsDTO, SearchStatus
from shard_search.domain.index.entities import Match, Shard
from shard_search.domain.index.services import (
    QueryEngine,
    ResultRanker,
    ShardRegistry,
    SubstringScope,
)
from shard_search.errors import ShardFetchError


class IShardLoader(Protocol):
    """Interface for shard loading."""

    async def load(self, shard_id: str) -> Shard:
        """Load one shard (cached after the first success)."""
        ...

    async def load_many(self, shard_ids: List[str]) -> Dict[str, Union[Shard, ShardFetchError]]:
        """Load several shards; failures are returned, not raised."""
        ...


class ILogger(Protocol):
    """Interface for logging operations."""

    def log_message(
        self, trace_id: str, direction: str, message_type: str, payload: Dict, metadata: Dict = None
    ) -> None:
        ...

    def log_event(self, trace_id: str, event_type: str, data: Dict, metrics: Dict = None) -> None:
        ...


class SearchShardsUseCase:
    """
    Use case for running one query against the sharded index.

    Orchestrates:
    1. Query normalization
    2. Routing to the home shard via the registry
    3. Lazy shard loading (plus every other shard when substring search spans the index)
    4. Tiered matching
    5. Ranking and truncation
    """

    def __init__(
        self,
        registry: ShardRegistry,
        loader: IShardLoader,
        query_engine: QueryEngine,
        ranker: ResultRanker,
        logger: ILogger,
    ):
        """
        Initialize use case.

        Args:
            registry: Maps normalized queries to shard ids
            loader: Loads shards on demand
            query_engine: Normalizes and matches queries
            ranker: Orders and truncates matches
            logger: Logger for audit trail
        """
        self.registry = registry
        self.loader = loader
        self.query_engine = query_engine
        self.ranker = ranker
        self.logger = logger

    async def execute(self, request: SearchRequestDTO) -> SearchResultsDTO:
        """
        Execute the search pipeline for one query.

        Args:
            request: SearchRequestDTO with generation and raw text

        Returns:
            SearchResultsDTO; status UNAVAILABLE if the home shard could not be loaded

        Raises:
            ShardIdMismatchError: If the index does not match the registry layout
        """
        normalized = self.query_engine.normalize(request.query_text)

        # Empty query: search is inert, nothing is fetched
        if not normalized:
            return SearchResultsDTO.empty(request.generation, request.query_text)

        self.logger.log_message(
            trace_id=request.trace_id,
            direction="request",
            message_type="search_query",
            payload={"query_text": request.query_text, "normalized_query": normalized},
        )

        home_shard_id = self.registry.shard_id_for(normalized)
        try:
            home_shard = await self.loader.load(home_shard_id)
        except ShardFetchError as e:
            self.logger.log_event(
                trace_id=request.trace_id,
                event_type="SHARD_FETCH_FAILED",
                data={"shard_id": home_shard_id, "reason": e.reason},
            )
            return SearchResultsDTO(
                generation=request.generation,
                query=request.query_text,
                normalized_query=normalized,
                status=SearchStatus.UNAVAILABLE,
                unavailable_shards=[home_shard_id],
            )

        matches_by_shard: List[Tuple[str, List[Match]]] = [
            (home_shard_id, self.query_engine.match(normalized, home_shard))
        ]
        unavailable: List[str] = []

        if self.query_engine.substring_scope == SubstringScope.ALL_SHARDS:
            other_ids = [sid for sid in self.registry.all_shard_ids() if sid != home_shard_id]
            outcomes = await self.loader.load_many(other_ids)
            for shard_id in other_ids:
                outcome = outcomes[shard_id]
                if isinstance(outcome, ShardFetchError):
                    unavailable.append(shard_id)
                    continue
                matches_by_shard.append((shard_id, self.query_engine.match(normalized, outcome)))
            if unavailable:
                # Sites omit empty letters, so these are refetched on every keystroke
                self.logger.log_event(
                    trace_id=request.trace_id,
                    event_type="SHARDS_SKIPPED",
                    data={"shard_ids": unavailable},
                    metrics={"skipped": len(unavailable)},
                )

        rows = self.ranker.rank_by_shard(matches_by_shard)
        results = SearchResultsDTO(
            generation=request.generation,
            query=request.query_text,
            normalized_query=normalized,
            rows=rows,
            unavailable_shards=unavailable,
        )

        self.logger.log_message(
            trace_id=request.trace_id,
            direction="response",
            message_type="search_results",
            payload={"labels": [row.label for row in rows]},
            metadata={
                "home_shard": home_shard_id,
                "row_count": len(rows),
                "match_count": sum(len(m) for _, m in matches_by_shard),
                "unavailable_shards": unavailable,
            },
        )
        return results
