"""
Domain Service: Shard Registry

Deterministic routing of lookup keys to shard identifiers.

Shard naming convention: {section}_{bucket_index_hex}, e.g. "all_6" for keys
starting with "g" under the default one-letter-per-bucket layout. The same
layout must be used by the extractor that wrote the shards.
"""

import hashlib
import re
import string
import unicodedata
from typing import Dict, List, Optional, Sequence, Tuple

from ..entities import IndexSection

DEFAULT_BUCKETS: Tuple[str, ...] = tuple(string.ascii_lowercase)

_SHARD_ID_PATTERN = re.compile(r"^([a-z]+)_([0-9a-f]+)$")
_RANGE_PATTERN = re.compile(r"^([a-z])(?:-([a-z]))?$")


class ShardRegistry:
    """
    Maps any key to exactly one shard id.

    Keys are bucketed by their first significant character. Letters go to the
    bucket whose range contains them; anything ordered before "a" (digits,
    "_", punctuation) collapses into the first bucket and anything after "z"
    into the last, so every key is routable.
    """

    def __init__(
        self,
        buckets: Sequence[str] = DEFAULT_BUCKETS,
        section: IndexSection = IndexSection.ALL,
    ):
        """
        Initialize registry.

        Args:
            buckets: Ordered letter ranges ("a", "b-d", ...) covering a-z
                     contiguously with no gaps or overlaps
            section: Index section whose shards this registry addresses

        Raises:
            ValueError: If the bucket layout does not cover a-z exactly once
        """
        self.section = IndexSection(section)
        self.buckets: Tuple[str, ...] = tuple(buckets)
        self._letter_to_bucket: Dict[str, int] = self._build_letter_table(self.buckets)

    @staticmethod
    def _build_letter_table(buckets: Sequence[str]) -> Dict[str, int]:
        if not buckets:
            raise ValueError("Bucket layout must not be empty")

        table: Dict[str, int] = {}
        expected = "a"
        for index, bucket_range in enumerate(buckets):
            match = _RANGE_PATTERN.match(bucket_range.strip().lower())
            if not match:
                raise ValueError(f"Invalid bucket range {bucket_range!r}")
            start, end = match.group(1), match.group(2) or match.group(1)
            if start != expected or end < start:
                raise ValueError(
                    f"Bucket {bucket_range!r} leaves a gap or overlap (expected to start at {expected!r})"
                )
            for code in range(ord(start), ord(end) + 1):
                table[chr(code)] = index
            expected = chr(ord(end) + 1)

        if expected != chr(ord("z") + 1):
            raise ValueError(f"Bucket layout stops before 'z' (next letter {expected!r})")
        return table

    @staticmethod
    def fold_char(char: str) -> str:
        """Lowercase a character and strip accents (e.g. 'É' -> 'e')."""
        decomposed = unicodedata.normalize("NFKD", char.lower())
        return decomposed[0] if decomposed else char

    def bucket_for(self, char: str) -> int:
        """
        Bucket index for a leading character.

        Args:
            char: A single character (only the first one is considered)

        Returns:
            Index into self.buckets
        """
        if not char:
            raise ValueError("Cannot route an empty character")
        folded = self.fold_char(char[0])
        if folded in self._letter_to_bucket:
            return self._letter_to_bucket[folded]
        if folded < "a":
            return 0
        return len(self.buckets) - 1

    def shard_id_for(self, key: str) -> str:
        """
        Shard id that contains (or would contain) the given key.

        Args:
            key: Normalized key, or just its leading character

        Returns:
            Shard id like "all_6"
        """
        stripped = key.lstrip()
        if not stripped:
            raise ValueError("Cannot route an empty key")
        return self.format_shard_id(self.bucket_for(stripped[0]))

    def format_shard_id(self, bucket: int) -> str:
        return f"{self.section.value}_{bucket:x}"

    def all_shard_ids(self) -> List[str]:
        """Every shard id of this section, in bucket order."""
        return [self.format_shard_id(i) for i in range(len(self.buckets))]

    def owns(self, shard_id: str, key: str) -> bool:
        """True if the key routes to shard_id."""
        return self.shard_id_for(key) == shard_id

    def parse_shard_id(self, shard_id: str) -> Optional[Tuple[IndexSection, int]]:
        """
        Split a shard id into (section, bucket).

        Returns:
            (section, bucket) or None if the id does not follow the convention
            or names a bucket outside this layout
        """
        match = _SHARD_ID_PATTERN.match(shard_id)
        if not match:
            return None
        try:
            section = IndexSection(match.group(1))
        except ValueError:
            return None
        bucket = int(match.group(2), 16)
        if bucket >= len(self.buckets):
            return None
        return section, bucket

    def layout_fingerprint(self) -> str:
        """Stable hash of the bucket layout, shared with the extractor's manifest."""
        canonical = ",".join(b.strip().lower() for b in self.buckets)
        return hashlib.sha1(canonical.encode("utf-8")).hexdigest()[:16]
