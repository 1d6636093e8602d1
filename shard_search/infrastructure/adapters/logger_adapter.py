"""
Infrastructure: Logger Adapter

Adapter for StructuredLogger to implement the ILogger interface.
"""

import logging
from typing import Dict, Any, Optional
from shard_search.logging_utils import StructuredLogger
from shard_search.models import EventType

EVENT_LEVELS = {
    EventType.STALE_RESULTS_DISCARDED: logging.DEBUG,
    EventType.SHARDS_SKIPPED: logging.DEBUG,
    EventType.SHARD_FETCH_FAILED: logging.WARNING,
    EventType.MALFORMED_ENTRY_SKIPPED: logging.WARNING,
    EventType.SHARD_ID_MISMATCH: logging.CRITICAL,
}


class LoggerAdapter:
    """
    Adapter that wraps StructuredLogger to implement ILogger protocol.
    """

    def __init__(self, logger: StructuredLogger):
        """
        Initialize adapter.

        Args:
            logger: StructuredLogger instance to wrap
        """
        self.logger = logger

    def log_message(
        self,
        trace_id: str,
        direction: str,
        message_type: str,
        payload: Dict[str, Any],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.logger.log_message(
            trace_id=trace_id,
            direction=direction,
            message_type=message_type,
            payload=payload,
            metadata=metadata or {},
        )

    def log_event(
        self,
        trace_id: str,
        event_type: str,
        data: Dict[str, Any],
        metrics: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log an event with metrics.

        Args:
            trace_id: Correlation ID
            event_type: Name of an EventType member (e.g. "RESULTS_DELIVERED")
            data: Event data
            metrics: Metrics to track
        """
        try:
            event_enum = EventType[event_type]
        except KeyError:
            # Unknown event names are kept as plain log lines rather than mislabelled
            self.logger.logger.info(f"{event_type} trace_id={trace_id} data={data}")
            return

        level = EVENT_LEVELS.get(event_enum, logging.INFO)
        self.logger.log_event(
            trace_id=trace_id,
            event_type=event_enum,
            payload=data,
            metrics=metrics or {},
            level=level,
        )
