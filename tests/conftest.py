"""
Shared test fixtures and utilities for search tests
"""

import asyncio
import json
from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from shard_search.domain.index.services import QueryEngine, ResultRanker, ShardRegistry
from shard_search.errors import ShardFetchError

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Order in which the generated site lists the getName() overloads
GETNAME_SCOPES = ["ASTDeclNode", "ASTFunction", "ASTProgram", "ASTVariableExpr", "TipAlpha"]


def load_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


def canonical_payload(rows: List, shard_id: Optional[str] = None, schema_version: int = 1) -> str:
    """Serialize canonical rows, wrapped in a versioned envelope when shard_id is given."""
    if shard_id is None:
        return json.dumps(rows)
    return json.dumps({"schema_version": schema_version, "shard_id": shard_id, "entries": rows})


def create_mock_aiohttp_session(status=200, text_data="", exception=None):
    """
    Helper to create a mocked aiohttp ClientSession whose get() is an async context manager.

    Args:
        status: HTTP status code
        text_data: String to return from response.text()
        exception: Exception to raise from session.get() instead

    Returns:
        Tuple of (mock_session, mock_response)
    """
    mock_response = MagicMock()
    mock_response.status = status
    mock_response.text = AsyncMock(return_value=text_data)

    mock_get_context = AsyncMock()
    mock_get_context.__aenter__.return_value = mock_response
    mock_get_context.__aexit__.return_value = None

    mock_session = MagicMock()
    mock_session.close = AsyncMock()
    if exception is not None:
        mock_session.get.side_effect = exception
    else:
        mock_session.get.return_value = mock_get_context

    return mock_session, mock_response


class FakeShardSource:
    """
    In-memory shard source that records every fetch.

    failures[shard_id] = n makes the next n fetches of that shard fail.
    gates[shard_id] = asyncio.Event holds fetches of that shard until set.
    """

    def __init__(self, payloads: Dict[str, str], manifest: Optional[str] = None):
        self.payloads = dict(payloads)
        self.manifest = manifest
        self.fetch_calls: List[str] = []
        self.failures: Dict[str, int] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.closed = False

    async def fetch(self, shard_id: str) -> str:
        self.fetch_calls.append(shard_id)
        gate = self.gates.get(shard_id)
        if gate is not None:
            await gate.wait()
        if self.failures.get(shard_id, 0) > 0:
            self.failures[shard_id] -= 1
            raise ShardFetchError(shard_id, "simulated outage")
        if shard_id not in self.payloads:
            raise ShardFetchError(shard_id, "HTTP 404")
        return self.payloads[shard_id]

    async def fetch_manifest(self) -> str:
        if self.manifest is None:
            raise ShardFetchError("manifest", "HTTP 404")
        return self.manifest

    async def close(self) -> None:
        self.closed = True


class MockLogger:
    """Records ILogger calls."""

    def __init__(self):
        self.messages = []
        self.events = []

    def log_message(self, trace_id, direction, message_type, payload, metadata=None):
        self.messages.append((trace_id, direction, message_type, payload, metadata))

    def log_event(self, trace_id, event_type, data, metrics=None):
        self.events.append((trace_id, event_type, data, metrics))

    def event_types(self) -> List[str]:
        return [event[1] for event in self.events]


@pytest.fixture
def registry():
    return ShardRegistry()


@pytest.fixture
def query_engine():
    return QueryEngine()


@pytest.fixture
def ranker():
    return ResultRanker(max_results=20)


@pytest.fixture
def generated_shard_text():
    """The 'g' shard of a generated API-reference site."""
    return load_fixture("all_6.js")


@pytest.fixture
def fake_source(generated_shard_text):
    return FakeShardSource({"all_6": generated_shard_text})


@pytest.fixture
def mock_logger():
    return MockLogger()
