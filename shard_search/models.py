from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any, Union
from enum import Enum
import time


class ComponentType(str, Enum):
    SHARD_LOADER = "ShardLoader"
    QUERY_ENGINE = "QueryEngine"
    SESSION_CONTROLLER = "SessionController"


class EventType(str, Enum):
    SHARD_FETCH_STARTED = "Shard_Fetch_Started"
    SHARD_LOADED = "Shard_Loaded"
    SHARD_FETCH_FAILED = "Shard_Fetch_Failed"
    MALFORMED_ENTRY_SKIPPED = "Malformed_Entry_Skipped"
    SHARD_ID_MISMATCH = "Shard_Id_Mismatch"
    QUERY_SUBMITTED = "Query_Submitted"
    RESULTS_DELIVERED = "Results_Delivered"
    STALE_RESULTS_DISCARDED = "Stale_Results_Discarded"
    SHARDS_SKIPPED = "Shards_Skipped"


class LogEntry(BaseModel):
    trace_id: str
    timestamp: float = Field(default_factory=time.time)
    component: ComponentType
    event_type: EventType
    payload_hash: Optional[str] = None
    metrics: Dict[str, Any] = Field(default_factory=dict)
    message: Optional[str] = None


# Wire format models. A row that fails validation is a malformed entry.

class WireTarget(BaseModel):
    """One target of a canonical row: [name, container|null, locator, kind?]"""
    name: str = Field(min_length=1)
    container: Optional[str] = None
    locator: str = Field(min_length=1)
    kind: Optional[str] = None


class WireEntry(BaseModel):
    """One canonical row: [key, label, [target, ...]]"""
    key: str = Field(min_length=1)
    label: str = Field(min_length=1)
    targets: List[WireTarget] = Field(min_length=1)

    @field_validator("key")
    @classmethod
    def key_is_normalized(cls, value: str) -> str:
        if value != value.lower() or value != value.strip():
            raise ValueError(f"key {value!r} is not lowercase-normalized")
        return value


class LegacyWireTarget(BaseModel):
    """One target of a generated searchData row: [locator, flag, qualified_name]"""
    locator: str = Field(min_length=1)
    flag: Union[int, str, None] = None
    qualified_name: str = Field(min_length=1)


class ShardEnvelope(BaseModel):
    """Versioned JSON shard: {"schema_version": 1, "shard_id": ..., "entries": [...]}"""
    schema_version: int
    shard_id: Optional[str] = None
    entries: List[Any]


class IndexManifest(BaseModel):
    """Optional searchdata.json describing how the extractor partitioned the index."""
    schema_version: int = 1
    buckets: List[str]
    sections: List[str] = Field(default_factory=lambda: ["all"])
    layout_fingerprint: Optional[str] = None
