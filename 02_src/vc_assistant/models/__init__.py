"""Core data models for VC Assistant."""

from .messages import InboundMessage
from .operations import (
    ClassifierResult,
    OperationKind,
    RoutedOperation,
    UnrecognizedOperation,
)
from .records import (
    PERSON_FIELDS,
    SEARCHABLE_PERSON_FIELDS,
    TASK_FIELDS,
    TASK_FILTER_FIELDS,
    Person,
    Task,
)
from .session import (
    AddingPerson,
    AuthRecord,
    Authenticating,
    ConversationState,
    Idle,
    PendingUpdate,
    Searching,
    StateName,
    UserSession,
    state_from_record,
    state_to_record,
)
from .tracing import TraceEvent

__all__ = [
    # Messages
    "InboundMessage",
    # Operations
    "ClassifierResult",
    "OperationKind",
    "RoutedOperation",
    "UnrecognizedOperation",
    # Records
    "Person",
    "Task",
    "PERSON_FIELDS",
    "SEARCHABLE_PERSON_FIELDS",
    "TASK_FIELDS",
    "TASK_FILTER_FIELDS",
    # Session
    "AddingPerson",
    "AuthRecord",
    "Authenticating",
    "ConversationState",
    "Idle",
    "PendingUpdate",
    "Searching",
    "StateName",
    "UserSession",
    "state_from_record",
    "state_to_record",
    # Tracing
    "TraceEvent",
]
