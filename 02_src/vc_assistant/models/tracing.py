"""Tracing and observability data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TraceEvent:
    """A single audit event recorded while routing a message."""

    id: str
    event_type: str  # e.g. "message_received", "operation_dispatched"
    actor: str  # component that recorded it
    data: dict
    timestamp: datetime
