"""
DTOs for the Search Application Layer
"""

from .search_request import SearchRequestDTO
from .search_results import SearchResultsDTO, SearchStatus

__all__ = [
    "SearchRequestDTO",
    "SearchResultsDTO",
    "SearchStatus",
]
