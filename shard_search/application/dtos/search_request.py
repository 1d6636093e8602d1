"""
DTO: Search Request

Data Transfer Object for one query issued by the search box.
"""

from dataclasses import dataclass


@dataclass
class SearchRequestDTO:
    """Request to run one query."""

    generation: int
    query_text: str

    @property
    def trace_id(self) -> str:
        return f"q{self.generation}"
