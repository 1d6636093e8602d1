"""
Infrastructure: Shard Parser

Reads shard payloads written by the index extractor.

Accepted encodings:
1. Generated JavaScript:   var searchData=[ ['key',['Label',[locator,flag,'Scope::name()'],...]], ... ];
2. Canonical JSON rows:    [ ["key", "Label", [["name", "Scope"|null, "locator", "kind"?], ...]], ... ]
3. Versioned envelope:     {"schema_version": 1, "shard_id": "all_6", "entries": [<canonical rows>]}

Malformed rows are skipped; the rest of the shard still loads.
"""

import ast
import json
import logging
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from shard_search.domain.index.entities import Entry, IndexSection, Shard, SymbolKind, Target
from shard_search.domain.index.services import ShardRegistry
from shard_search.errors import MalformedEntryError, ShardIdMismatchError, ShardParseError
from shard_search.logging_utils import StructuredLogger, ComponentType
from shard_search.models import (
    EventType,
    LegacyWireTarget,
    ShardEnvelope,
    WireEntry,
)

SUPPORTED_SCHEMA_VERSIONS = (1,)
JS_ASSIGNMENT_PREFIX = "var "


class ShardParser:
    """
    Parses raw shard payloads into Shard entities.

    The registry is used to check that every key actually belongs to the
    shard it was found in; a key routed elsewhere means the extractor used a
    different partitioning and raises ShardIdMismatchError.
    """

    def __init__(self, registry: ShardRegistry, logger: Optional[StructuredLogger] = None):
        self.registry = registry
        self.logger = logger or StructuredLogger(ComponentType.SHARD_LOADER)

    def parse(self, shard_id: str, payload: str) -> Shard:
        """
        Parse one shard payload.

        Args:
            shard_id: Id the payload was fetched under
            payload: Raw file contents

        Returns:
            Shard with every well-formed row

        Raises:
            ShardParseError: If the payload is not a readable shard at all
            ShardIdMismatchError: If the payload belongs to a different shard
        """
        rows, declared_id = self._decode(shard_id, payload)
        if declared_id is not None and declared_id != shard_id:
            raise ShardIdMismatchError(
                shard_id, f"payload declares shard id {declared_id!r}"
            )

        parsed = self.registry.parse_shard_id(shard_id)
        section = parsed[0] if parsed else IndexSection.ALL

        entries: List[Entry] = []
        skipped = 0
        for index, row in enumerate(rows):
            try:
                entry = self._parse_row(shard_id, index, row)
                if entries and not entries[-1].key < entry.key:
                    raise MalformedEntryError(
                        shard_id, index,
                        f"key {entry.key!r} does not sort after {entries[-1].key!r}",
                    )
            except MalformedEntryError as e:
                skipped += 1
                self.logger.log_event(
                    trace_id=shard_id,
                    event_type=EventType.MALFORMED_ENTRY_SKIPPED,
                    payload={"row_index": e.row_index, "reason": e.reason},
                    level=logging.WARNING,
                )
                continue

            if not self.registry.owns(shard_id, entry.key):
                raise ShardIdMismatchError(
                    shard_id,
                    f"key {entry.key!r} routes to {self.registry.shard_id_for(entry.key)}",
                    key=entry.key,
                )
            entries.append(entry)

        if skipped:
            self.logger.logger.info(
                f"Shard {shard_id}: skipped {skipped} malformed of {len(rows)} rows"
            )

        return Shard(
            shard_id=shard_id,
            entries=tuple(entries),
            section=section,
            skipped_rows=skipped,
        )

    def _decode(self, shard_id: str, payload: str) -> Tuple[List[Any], Optional[str]]:
        """Turn the payload into a list of raw rows plus the declared shard id, if any."""
        text = payload.strip() if payload else ""
        if not text:
            raise ShardParseError(shard_id, "empty payload")

        if text.startswith(JS_ASSIGNMENT_PREFIX):
            _, sep, literal = text.partition("=")
            if not sep:
                raise ShardParseError(shard_id, "javascript payload has no assignment")
            try:
                data = ast.literal_eval(literal.strip().rstrip(";").strip())
            except (ValueError, SyntaxError, MemoryError, RecursionError) as e:
                raise ShardParseError(shard_id, f"unreadable javascript literal: {e}") from e
        else:
            try:
                data = json.loads(text)
            except json.JSONDecodeError as e:
                raise ShardParseError(shard_id, f"invalid JSON: {e}") from e

        if isinstance(data, dict):
            try:
                envelope = ShardEnvelope(**data)
            except ValidationError as e:
                raise ShardParseError(shard_id, f"invalid envelope: {e}") from e
            if envelope.schema_version not in SUPPORTED_SCHEMA_VERSIONS:
                raise ShardParseError(
                    shard_id, f"unsupported schema_version {envelope.schema_version}"
                )
            return envelope.entries, envelope.shard_id

        if not isinstance(data, (list, tuple)):
            raise ShardParseError(shard_id, f"expected a list of rows, got {type(data).__name__}")
        return list(data), None

    def _parse_row(self, shard_id: str, index: int, row: Any) -> Entry:
        """Parse one row in either the generated or the canonical layout."""
        if not isinstance(row, (list, tuple)):
            raise MalformedEntryError(shard_id, index, "row is not a list", row)

        try:
            if len(row) == 2 and isinstance(row[1], (list, tuple)):
                return self._parse_generated_row(row)
            if len(row) == 3:
                return self._parse_canonical_row(row)
        except (ValidationError, TypeError, ValueError) as e:
            raise MalformedEntryError(shard_id, index, str(e), row) from e

        raise MalformedEntryError(shard_id, index, f"unrecognized row layout of length {len(row)}", row)

    def _parse_canonical_row(self, row: Any) -> Entry:
        key, label, raw_targets = row
        wire = WireEntry(
            key=key,
            label=label,
            targets=[self._canonical_target_fields(t) for t in raw_targets],
        )
        return Entry(
            key=wire.key,
            label=wire.label,
            targets=tuple(
                Target(
                    name=t.name,
                    locator=t.locator,
                    scope=t.container,
                    kind=SymbolKind.parse(t.kind),
                )
                for t in wire.targets
            ),
        )

    @staticmethod
    def _canonical_target_fields(raw: Any) -> dict:
        if not isinstance(raw, (list, tuple)) or len(raw) not in (3, 4):
            raise ValueError(f"target must be [name, container, locator, kind?], got {raw!r}")
        fields = {"name": raw[0], "container": raw[1], "locator": raw[2]}
        if len(raw) == 4:
            fields["kind"] = raw[3]
        return fields

    def _parse_generated_row(self, row: Any) -> Entry:
        key, body = row
        if len(body) < 2 or not isinstance(body[0], str):
            raise ValueError("generated row needs a label and at least one target")

        label = body[0]
        targets = []
        for raw in body[1:]:
            if not isinstance(raw, (list, tuple)) or len(raw) != 3:
                raise ValueError(f"target must be [locator, flag, qualified_name], got {raw!r}")
            wire = LegacyWireTarget(locator=raw[0], flag=raw[1], qualified_name=raw[2])
            scope, kind = self.split_qualified_name(wire.qualified_name)
            targets.append(
                Target(name=wire.qualified_name, locator=wire.locator, scope=scope, kind=kind)
            )

        # Reuse the canonical validation for key/label constraints
        WireEntry(
            key=key,
            label=label,
            targets=[{"name": t.name, "locator": t.locator} for t in targets],
        )
        return Entry(key=key, label=label, targets=tuple(targets))

    @staticmethod
    def split_qualified_name(qualified_name: str) -> Tuple[Optional[str], SymbolKind]:
        """
        Derive the enclosing scope and kind from a generated target name.

        "ASTFunction::getName()" -> ("ASTFunction", METHOD)
        "TipRecord::fields"      -> ("TipRecord", FIELD)
        "CodeGenerator"          -> ("CodeGenerator", UNKNOWN)
        """
        name = qualified_name.strip()
        if "::" in name:
            scope, _, member = name.rpartition("::")
            kind = SymbolKind.METHOD if member.endswith(")") else SymbolKind.FIELD
            return scope, kind
        if name.endswith(")"):
            return None, SymbolKind.FUNCTION
        return name or None, SymbolKind.UNKNOWN
