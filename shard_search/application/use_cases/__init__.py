"""
Use Cases for the Search Application Layer
"""

from .search_shards_use_case import SearchShardsUseCase, IShardLoader, ILogger

__all__ = ["SearchShardsUseCase", "IShardLoader", "ILogger"]
