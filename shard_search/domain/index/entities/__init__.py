"""
Domain Entities for the Search Index

These are pure domain objects with no external dependencies.
"""

from .shard import Shard, Entry, Target, SymbolKind, IndexSection
from .match import Match, MatchStrength

__all__ = [
    "Shard",
    "Entry",
    "Target",
    "SymbolKind",
    "IndexSection",
    "Match",
    "MatchStrength",
]
