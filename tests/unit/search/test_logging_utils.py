"""
Unit tests for structured logging and the ILogger adapter
"""

import json
import logging
from unittest.mock import MagicMock

import pytest

from shard_search.infrastructure.adapters import LoggerAdapter
from shard_search.logging_utils import StructuredLogger, get_logger
from shard_search.models import ComponentType, EventType


@pytest.fixture
def structured():
    logger = StructuredLogger(ComponentType.QUERY_ENGINE)
    logger.logger = MagicMock()
    return logger


def test_get_logger_attaches_one_handler():
    first = get_logger("shard_search_test")
    second = get_logger("shard_search_test")

    assert first is second
    assert len(second.handlers) == 1
    assert second.propagate is False


def test_log_event_writes_json_entry(structured):
    structured.log_event("q1", EventType.RESULTS_DELIVERED, {"status": "ok"}, metrics={"row_count": 2})

    level, line = structured.logger.log.call_args[0]
    entry = json.loads(line)
    assert level == logging.INFO
    assert entry["trace_id"] == "q1"
    assert entry["component"] == "QueryEngine"
    assert entry["event_type"] == "Results_Delivered"
    assert entry["metrics"] == {"row_count": 2}
    assert len(entry["payload_hash"]) == 16


def test_log_message_request_payload(structured):
    structured.log_message("q1", "request", "search_query", {"query_text": "getName"})

    entry = json.loads(structured.logger.info.call_args[0][0])
    assert entry["request_payload"] == {"query_text": "getName"}
    assert entry["truncated"] is False


def test_hash_is_stable_across_key_order(structured):
    assert structured.hash_payload({"a": 1, "b": 2}) == structured.hash_payload({"b": 2, "a": 1})


@pytest.mark.parametrize("event_name, level", [
    ("RESULTS_DELIVERED", logging.INFO),
    ("STALE_RESULTS_DISCARDED", logging.DEBUG),
    ("SHARDS_SKIPPED", logging.DEBUG),
    ("SHARD_FETCH_FAILED", logging.WARNING),
    ("SHARD_ID_MISMATCH", logging.CRITICAL),
])
def test_adapter_maps_event_levels(event_name, level):
    wrapped = MagicMock()
    LoggerAdapter(wrapped).log_event("q3", event_name, {"shard_id": "all_6"})

    kwargs = wrapped.log_event.call_args.kwargs
    assert kwargs["event_type"] == EventType[event_name]
    assert kwargs["level"] == level


def test_adapter_logs_unknown_event_as_plain_line():
    wrapped = MagicMock()
    LoggerAdapter(wrapped).log_event("q3", "SOMETHING_ELSE", {"x": 1})

    wrapped.log_event.assert_not_called()
    wrapped.logger.info.assert_called_once()


def test_large_result_payload_is_truncated(structured, monkeypatch):
    monkeypatch.setattr("shard_search.logging_utils.MAX_PAYLOAD_SIZE_BYTES", 32)
    labels = [f"getName{i}" for i in range(20)]

    structured.log_message("q2", "response", "search_results", {"labels": labels}, {"row_count": 20})

    entry = json.loads(structured.logger.info.call_args[0][0])
    assert entry["truncated"] is True
    assert len(entry["response_payload"]) == 32
    assert entry["metadata"] == {"row_count": 20}


def test_query_text_hashed_when_payload_logging_disabled(structured, monkeypatch):
    monkeypatch.setattr("shard_search.logging_utils.LOG_QUERY_PAYLOADS", False)

    structured.log_message("q1", "request", "search_query", {"query_text": "getName"})

    entry = json.loads(structured.logger.info.call_args[0][0])
    assert "request_payload" not in entry
    assert entry["payload_hash"] == structured.hash_payload({"query_text": "getName"})
