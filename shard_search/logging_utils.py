"""
Structured JSON logging for shard search.

Every line carries the component (loader, query engine, session) and a
trace id: the shard id for loader events, "q{generation}" for queries.
"""

import logging
import json
import os
import time
import hashlib
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger
from .models import LogEntry, ComponentType, EventType

# Query texts and result labels are logged verbatim unless disabled
LOG_QUERY_PAYLOADS = os.getenv("SHARD_SEARCH_LOG_PAYLOADS", "true").lower() == "true"
MAX_PAYLOAD_SIZE_BYTES = int(os.getenv("MAX_PAYLOAD_SIZE_BYTES", "100000"))
LOG_LEVEL = os.getenv("SHARD_SEARCH_LOG_LEVEL", "INFO").upper()


class SearchJSONFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super(SearchJSONFormatter, self).add_fields(log_record, record, message_dict)
        if not log_record.get('timestamp'):
            log_record['timestamp'] = time.time()
        if log_record.get('level'):
            log_record['level'] = log_record['level'].upper()
        else:
            log_record['level'] = record.levelname


def get_logger(name: str):
    logger = logging.getLogger(name)
    # Loggers are process-wide; only attach the JSON handler once
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = SearchJSONFormatter('%(timestamp)s %(level)s %(name)s %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    logger.propagate = False
    return logger


class StructuredLogger:
    def __init__(self, component: ComponentType):
        self.logger = get_logger(component.value)
        self.component = component

    def hash_payload(self, payload: Any) -> str:
        """Short digest of a payload, logged in place of query text when payload logging is off."""
        dumped = json.dumps(payload, sort_keys=True, default=str)
        return hashlib.md5(dumped.encode()).hexdigest()[:16]

    def log_event(self,
                  trace_id: str,
                  event_type: EventType,
                  payload: Any,
                  metrics: Dict[str, Any] = None,
                  level: int = logging.INFO):

        entry = LogEntry(
            trace_id=trace_id,
            component=self.component,
            event_type=event_type,
            payload_hash=self.hash_payload(payload),
            metrics=metrics or {},
            message=str(payload)[:200]
        )

        self.logger.log(level, json.dumps(entry.model_dump(), default=str))

    def log_message(self,
                    trace_id: str,
                    direction: str,
                    message_type: str,
                    payload: Dict[str, Any],
                    metadata: Optional[Dict] = None):
        """
        Log a query or its results, correlated by generation.

        Args:
            trace_id: "q{generation}" of the query
            direction: "request" for the submitted query, "response" for its results
            message_type: "search_query" or "search_results"
            payload: Query text, or the labels of the ranked rows
            metadata: Home shard, row and match counts, unavailable shards
        """
        entry = {
            "trace_id": trace_id,
            "component": self.component.value,
            "direction": direction,
            "message_type": message_type,
            "metadata": metadata or {},
        }
        if not LOG_QUERY_PAYLOADS:
            entry["payload_hash"] = self.hash_payload(payload)
            self.logger.info(json.dumps(entry, default=str))
            return

        serialized = json.dumps(payload, default=str)
        size = len(serialized.encode('utf-8'))
        # A broad query on a big shard can list thousands of labels
        if size > MAX_PAYLOAD_SIZE_BYTES:
            payload = serialized[:MAX_PAYLOAD_SIZE_BYTES]

        entry["content_size_bytes"] = size
        entry["truncated"] = size > MAX_PAYLOAD_SIZE_BYTES
        entry[f"{direction}_payload"] = payload
        self.logger.info(json.dumps(entry, default=str))
