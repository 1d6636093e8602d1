"""
Repository Interfaces for the Search Index

These interfaces define contracts for data access without
specifying implementation details (Dependency Inversion Principle).
"""

from .shard_source import IShardSource

__all__ = [
    "IShardSource",
]
