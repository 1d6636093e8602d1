"""
Query Session Controller

Sequences queries that arrive faster than shards load, so that only the
freshest query's results ever reach the UI.

States: IDLE (no query) → PENDING (in flight) → SETTLED (delivered),
back to PENDING on the next keystroke or IDLE on clear. FAILED is terminal
and means the index itself is unusable.
"""

import asyncio
from enum import Enum
from typing import Callable, List, Optional, Set

from ..dtos import SearchRequestDTO, SearchResultsDTO
from ..use_cases import ILogger, SearchShardsUseCase
from shard_search.domain.index.services import QueryEngine
from shard_search.errors import ShardIdMismatchError

ResultsHandler = Callable[[SearchResultsDTO], None]


class SessionState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SETTLED = "settled"
    FAILED = "failed"


class QuerySessionController:
    """
    Reducer over (generation, results) messages for one search box.

    Each submission gets a monotonically increasing generation number.
    Results are applied only if their generation is still the highest one
    issued; older results are dropped. In-flight work is never cancelled,
    since the underlying shard fetch may be shared with a newer query.
    """

    def __init__(self, use_case: SearchShardsUseCase, logger: ILogger):
        self.use_case = use_case
        self.logger = logger

        self._generation = 0
        self._state = SessionState.IDLE
        self._results = SearchResultsDTO.empty(0)
        self._handlers: List[ResultsHandler] = []
        self._tasks: Set[asyncio.Task] = set()
        self._errors: List[BaseException] = []
        self._fatal_error: Optional[ShardIdMismatchError] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def latest_generation(self) -> int:
        return self._generation

    @property
    def results(self) -> SearchResultsDTO:
        """The results currently visible to the UI."""
        return self._results

    def subscribe_results(self, handler: ResultsHandler) -> Callable[[], None]:
        """
        Register a handler called with every applied result set.

        Returns:
            A callable that unsubscribes the handler
        """
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def submit_query(self, text: str) -> None:
        """
        Issue a query; results arrive through subscribed handlers.

        Must be called from within a running event loop.

        Raises:
            ShardIdMismatchError: If an earlier query found the index unusable
        """
        if self._fatal_error is not None:
            raise self._fatal_error

        self._generation += 1
        generation = self._generation
        self.logger.log_event(
            trace_id=f"q{generation}",
            event_type="QUERY_SUBMITTED",
            data={"query_text": text},
        )

        if not QueryEngine.normalize(text):
            self.apply(generation, SearchResultsDTO.empty(generation, text))
            return

        self._state = SessionState.PENDING
        task = asyncio.get_running_loop().create_task(self._run(generation, text))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def clear(self) -> None:
        """
        Clear the query; any in-flight results become stale.

        Raises:
            ShardIdMismatchError: If an earlier query found the index unusable
        """
        if self._fatal_error is not None:
            raise self._fatal_error

        self._generation += 1
        self.apply(self._generation, SearchResultsDTO.empty(self._generation))

    def apply(self, generation: int, results: SearchResultsDTO) -> bool:
        """
        Apply results for a generation if it is still the latest.

        A FAILED session accepts nothing; it stays failed.

        Returns:
            True if the results became visible, False if they were stale
        """
        if self._fatal_error is not None:
            return False

        if generation != self._generation:
            self.logger.log_event(
                trace_id=f"q{generation}",
                event_type="STALE_RESULTS_DISCARDED",
                data={"latest_generation": self._generation},
            )
            return False

        self._results = results
        self._state = SessionState.SETTLED if results.normalized_query else SessionState.IDLE
        self.logger.log_event(
            trace_id=f"q{generation}",
            event_type="RESULTS_DELIVERED",
            data={"status": results.status.value, "unavailable_shards": results.unavailable_shards},
            metrics={"row_count": len(results.rows)},
        )
        for handler in list(self._handlers):
            handler(results)
        return True

    async def _run(self, generation: int, text: str) -> None:
        results = await self.use_case.execute(SearchRequestDTO(generation=generation, query_text=text))
        self.apply(generation, results)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is None:
            return
        if isinstance(error, ShardIdMismatchError):
            self._fatal_error = error
            self._state = SessionState.FAILED
            self.logger.log_event(
                trace_id=error.shard_id,
                event_type="SHARD_ID_MISMATCH",
                data={"reason": error.reason, "key": error.key},
            )
        else:
            self._errors.append(error)

    async def drain(self) -> None:
        """
        Wait until no query is in flight.

        Raises:
            ShardIdMismatchError: If the index turned out to be unusable
            Exception: The first unexpected error raised by a query
        """
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        if self._fatal_error is not None:
            raise self._fatal_error
        if self._errors:
            error = self._errors.pop(0)
            raise error

    async def close(self) -> None:
        """Cancel this session's pending queries (shared shard fetches keep running)."""
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._handlers.clear()
