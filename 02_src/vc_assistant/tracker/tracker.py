"""Tracker implementation for recording TraceEvents."""

import uuid
from datetime import datetime, timezone
from typing import Protocol

from ..errors import DataStoreError
from ..logging_config import get_logger
from ..models import TraceEvent

logger = get_logger(__name__)


class ITraceStore(Protocol):
    """Where trace events are persisted."""

    async def save_trace_event(self, event: TraceEvent) -> None:
        ...


class ITracker(Protocol):
    """Records what the router did with each message."""

    async def track(self, event_type: str, actor: str, data: dict) -> None:
        """Create TraceEvent and save it."""
        ...


class Tracker:
    """Creates TraceEvents from direct track() calls."""

    def __init__(self, storage: ITraceStore):
        self._storage = storage

    async def track(self, event_type: str, actor: str, data: dict) -> None:
        """Create TraceEvent and save it.

        A failed write is logged and dropped; the audit trail must not break
        message handling.
        """
        trace_event = TraceEvent(
            id=str(uuid.uuid4()),
            event_type=event_type,
            actor=actor,
            data=data,
            timestamp=datetime.now(timezone.utc),
        )
        try:
            await self._storage.save_trace_event(trace_event)
        except DataStoreError as e:
            logger.error("Failed to save trace event %s: %s", event_type, e)
