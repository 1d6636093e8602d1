"""
Domain Entity: Match

How a query relates to one entry key.
"""

from dataclasses import dataclass
from enum import IntEnum

from .shard import Entry


class MatchStrength(IntEnum):
    """
    Closed set of match tiers with an explicit total order.

    Lower value = more relevant, so sorting ascending puts EXACT first.
    """

    EXACT = 0
    PREFIX = 1
    SUBSTRING = 2

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class Match:
    """An entry matched by a query at a given strength."""

    entry: Entry
    strength: MatchStrength
