"""
Domain Entity: Shard

One immutable partition of the symbol search index.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple


class IndexSection(str, Enum):
    """Index category a shard belongs to; the prefix of every shard id."""

    ALL = "all"
    CLASSES = "classes"
    FUNCTIONS = "functions"
    VARIABLES = "variables"
    TYPEDEFS = "typedefs"
    ENUMS = "enums"
    NAMESPACES = "namespaces"
    FILES = "files"


class SymbolKind(str, Enum):
    """Category of a documented entity."""

    FUNCTION = "function"
    METHOD = "method"
    FIELD = "field"
    TYPE = "type"
    NAMESPACE = "namespace"
    FILE = "file"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SymbolKind":
        """Map a wire value to a kind; unknown or missing values become UNKNOWN."""
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value.lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Target:
    """
    One concrete documented symbol behind an Entry.

    The locator is opaque: the engine hands it to the UI untouched.
    """

    name: str  # e.g. "ASTFunction::getName()"
    locator: str  # e.g. "../classASTFunction.html#ac0f45..."
    scope: Optional[str] = None  # enclosing container, e.g. "ASTFunction"
    kind: SymbolKind = SymbolKind.UNKNOWN

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "scope": self.scope,
            "locator": self.locator,
            "kind": self.kind.value,
        }


@dataclass(frozen=True)
class Entry:
    """A lookup key, its display label and its overload targets (order preserved)."""

    key: str
    label: str
    targets: Tuple[Target, ...]

    def __post_init__(self):
        if not self.key:
            raise ValueError("Entry key must not be empty")
        if not self.targets:
            raise ValueError(f"Entry {self.key!r} has no targets")


@dataclass(frozen=True)
class Shard:
    """
    An immutable, key-sorted table of entries loaded from one partition file.

    Entries are strictly increasing by key, so every key is unique.
    """

    shard_id: str  # e.g. "all_6"
    entries: Tuple[Entry, ...] = ()
    section: IndexSection = IndexSection.ALL
    skipped_rows: int = 0  # malformed rows dropped while parsing
    _by_key: Dict[str, Entry] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        for previous, current in zip(self.entries, self.entries[1:]):
            if not previous.key < current.key:
                raise ValueError(
                    f"Shard {self.shard_id} is not strictly sorted: "
                    f"{previous.key!r} before {current.key!r}"
                )
        self._by_key.update((e.key, e) for e in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def get(self, key: str) -> Optional[Entry]:
        """Look up an entry by exact key."""
        return self._by_key.get(key)

    @property
    def keys(self) -> Tuple[str, ...]:
        return tuple(e.key for e in self.entries)
