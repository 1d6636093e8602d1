"""
Application Layer

This layer contains use cases (application logic) and DTOs (data transfer objects).
It orchestrates domain logic without containing business rules itself.

- Use cases coordinate one query through the index
- The session controller sequences queries from one search box
- DTOs define request/response contracts with the UI
"""

from .dtos import SearchRequestDTO, SearchResultsDTO, SearchStatus
from .use_cases import SearchShardsUseCase, IShardLoader, ILogger
from .session import QuerySessionController, SessionState

__all__ = [
    "SearchRequestDTO",
    "SearchResultsDTO",
    "SearchStatus",
    "SearchShardsUseCase",
    "IShardLoader",
    "ILogger",
    "QuerySessionController",
    "SessionState",
]
