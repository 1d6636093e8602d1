"""
Infrastructure Layer

This layer contains concrete implementations of interfaces defined
in the domain and application layers. It handles external concerns
like HTTP, file I/O and the shard wire format.
"""

from .factory import SearchEngineFactory

__all__ = ["SearchEngineFactory"]
