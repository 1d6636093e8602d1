"""
DTO: Search Results

Data Transfer Object for the ordered result list handed to the UI.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from shard_search.domain.index.services import ResultRow


class SearchStatus(str, Enum):
    OK = "ok"
    UNAVAILABLE = "unavailable"  # search temporarily unavailable for this prefix


@dataclass
class SearchResultsDTO:
    """Results of one query generation."""

    generation: int
    query: str
    normalized_query: str
    rows: List[ResultRow] = field(default_factory=list)
    status: SearchStatus = SearchStatus.OK
    unavailable_shards: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """A valid "no matches" state, not an error."""
        return not self.rows

    @property
    def is_unavailable(self) -> bool:
        return self.status == SearchStatus.UNAVAILABLE

    @classmethod
    def empty(cls, generation: int, query: str = "", normalized_query: str = "") -> "SearchResultsDTO":
        return cls(generation=generation, query=query, normalized_query=normalized_query)

    def to_dict(self) -> Dict:
        return {
            "generation": self.generation,
            "query": self.query,
            "normalized_query": self.normalized_query,
            "status": self.status.value,
            "unavailable_shards": list(self.unavailable_shards),
            "rows": [row.to_dict() for row in self.rows],
        }
