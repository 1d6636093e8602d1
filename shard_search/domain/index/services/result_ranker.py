"""
Domain Service: Result Ranker

Turns raw matches into the ordered, display-ready result list.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from ..entities import Match, MatchStrength, Target

DEFAULT_MAX_RESULTS = 20


@dataclass(frozen=True)
class ResultRow:
    """
    One display row: an entry with its overloads grouped under one label.

    Targets keep the order recorded in the shard.
    """

    key: str
    label: str
    strength: MatchStrength
    targets: Tuple[Target, ...]
    shard_id: str = ""

    def to_dict(self) -> Dict:
        return {
            "key": self.key,
            "label": self.label,
            "strength": self.strength.label,
            "shard_id": self.shard_id,
            "targets": [t.to_dict() for t in self.targets],
        }


class ResultRanker:
    """
    Orders matches by (strength, case-insensitive label) and truncates.

    Python's sort is stable, so entries tying on both keys keep the order
    they arrived in (shard order).
    """

    def __init__(self, max_results: int = DEFAULT_MAX_RESULTS):
        if max_results < 1:
            raise ValueError(f"max_results must be positive, got {max_results}")
        self.max_results = max_results

    @staticmethod
    def sort_key(match: Match) -> Tuple[int, str]:
        return (int(match.strength), match.entry.label.casefold())

    def rank(self, matches: Iterable[Match], shard_id: str = "") -> List[ResultRow]:
        """
        Rank matches into display rows.

        Args:
            matches: Matches in shard order
            shard_id: Shard the matches came from, recorded on each row

        Returns:
            At most max_results rows, most relevant first
        """
        return self.rank_by_shard([(shard_id, list(matches))])

    def rank_by_shard(self, matches_by_shard: List[Tuple[str, List[Match]]]) -> List[ResultRow]:
        """Rank matches gathered from several shards, keeping each row's shard id."""
        tagged = [
            (shard_id, m)
            for shard_id, matches in matches_by_shard
            for m in matches
        ]
        tagged.sort(key=lambda item: self.sort_key(item[1]))
        return [
            ResultRow(
                key=m.entry.key,
                label=m.entry.label,
                strength=m.strength,
                targets=m.entry.targets,
                shard_id=shard_id,
            )
            for shard_id, m in tagged[: self.max_results]
        ]
