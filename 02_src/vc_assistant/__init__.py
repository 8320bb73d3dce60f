"""VC Assistant: Telegram conversation router for a people and task directory."""

from .app import Application, IApplication
from .channel import IMessageChannel, TelegramChannel
from .classifier import FunctionRouterClassifier, IClassifier
from .config import Settings
from .conversation import AddPersonWizard, ConversationStateMachine
from .dispatch import DispatchResult, FunctionDispatcher
from .llm import ILLMProvider, LLMProvider
from .models import (
    AddingPerson,
    Authenticating,
    AuthRecord,
    ConversationState,
    Idle,
    InboundMessage,
    OperationKind,
    PendingUpdate,
    Person,
    RoutedOperation,
    Searching,
    Task,
    TraceEvent,
    UnrecognizedOperation,
    UserSession,
)
from .orchestrator import IRouterOrchestrator, RouterOrchestrator
from .storage import IDataStore, ISessionStore, Storage
from .tracker import ITracker, Tracker

__all__ = [
    # Application
    "Application",
    "IApplication",
    "Settings",
    # Models
    "AddingPerson",
    "Authenticating",
    "AuthRecord",
    "ConversationState",
    "Idle",
    "InboundMessage",
    "OperationKind",
    "PendingUpdate",
    "Person",
    "RoutedOperation",
    "Searching",
    "Task",
    "TraceEvent",
    "UnrecognizedOperation",
    "UserSession",
    # Components
    "IDataStore",
    "ISessionStore",
    "Storage",
    "ITracker",
    "Tracker",
    "ILLMProvider",
    "LLMProvider",
    "IClassifier",
    "FunctionRouterClassifier",
    "IMessageChannel",
    "TelegramChannel",
    "DispatchResult",
    "FunctionDispatcher",
    "AddPersonWizard",
    "ConversationStateMachine",
    "IRouterOrchestrator",
    "RouterOrchestrator",
]
