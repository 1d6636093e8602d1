"""
Domain Service: Query Engine

Normalizes raw query text and matches it against shard entries.
Pure business logic with no infrastructure dependencies.
"""

from enum import Enum
from typing import Iterable, List, Optional

from ..entities import Match, MatchStrength, Shard


class SubstringScope(str, Enum):
    """Which shards are scanned for substring matches."""

    HOME_SHARD = "home_shard"  # only the query's first-character bucket
    ALL_SHARDS = "all_shards"  # every shard of the section (loads the whole index)


class QueryEngine:
    """
    Domain service for query normalization and tiered matching.

    Tiers are evaluated per entry in priority order; the first one
    satisfied wins:
    1. EXACT: key equals query
    2. PREFIX: key starts with query
    3. SUBSTRING: query occurs inside key
    """

    def __init__(self, substring_scope: SubstringScope = SubstringScope.HOME_SHARD):
        self.substring_scope = SubstringScope(substring_scope)

    @staticmethod
    def normalize(raw_query: Optional[str]) -> str:
        """Trim, lowercase and collapse internal whitespace."""
        if not raw_query:
            return ""
        return " ".join(raw_query.split()).lower()

    @staticmethod
    def classify(key: str, query: str) -> Optional[MatchStrength]:
        """Strength of the match between a key and a normalized query, or None."""
        if not query:
            return None
        if key == query:
            return MatchStrength.EXACT
        if key.startswith(query):
            return MatchStrength.PREFIX
        if query in key:
            return MatchStrength.SUBSTRING
        return None

    def match(self, raw_query: str, shard: Shard) -> List[Match]:
        """
        Match a query against every entry of one shard.

        Args:
            raw_query: Query text as typed
            shard: Loaded shard to scan

        Returns:
            Matches in shard order; empty for an empty query
        """
        query = self.normalize(raw_query)
        if not query:
            return []

        matches = []
        for entry in shard.entries:
            strength = self.classify(entry.key, query)
            if strength is not None:
                matches.append(Match(entry=entry, strength=strength))
        return matches

    def match_many(self, raw_query: str, shards: Iterable[Shard]) -> List[Match]:
        """Match across several shards, concatenating results in shard order."""
        matches: List[Match] = []
        for shard in shards:
            matches.extend(self.match(raw_query, shard))
        return matches
