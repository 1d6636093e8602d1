"""
Shard Search Core Package

Incremental, sharded symbol search for generated API-reference sites.

Architecture: lazily loaded static shards
- Keys are routed to shards by their leading character (ShardRegistry)
- Shards are fetched on demand, once, and kept for the session (ShardLoader)
- Queries match by exact, prefix and substring tiers (QueryEngine)
- Results are grouped per symbol and ranked (ResultRanker)
- Only the newest query's results reach the UI (QuerySessionController)
"""

__version__ = "0.1.0"

from .errors import (
    ShardSearchError, MalformedEntryError, ShardFetchError, ShardParseError, ShardIdMismatchError
)
from .domain.index.entities import Shard, Entry, Target, SymbolKind, IndexSection, Match, MatchStrength
from .domain.index.services import ShardRegistry, QueryEngine, SubstringScope, ResultRanker, ResultRow
from .application import SearchResultsDTO, SearchStatus, QuerySessionController, SessionState
from .infrastructure import SearchEngineFactory
