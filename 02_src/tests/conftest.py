"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from vc_assistant.models import AuthRecord, InboundMessage  # noqa: E402

PASSWORD = "121212"


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from vc_assistant.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def tracker(storage):
    """Create Tracker backed by storage."""
    from vc_assistant.tracker import Tracker

    return Tracker(storage)


@pytest.fixture
def mock_llm():
    """Create mock LLM provider."""
    llm = Mock()
    llm.complete = AsyncMock(return_value='[1, ["test"]]')
    return llm


@pytest.fixture
def mock_classifier():
    """Create mock classifier; tests set classify.return_value."""
    classifier = Mock()
    classifier.classify = AsyncMock()
    return classifier


@pytest.fixture
def mock_channel():
    """Create mock message channel."""
    channel = Mock()
    channel.send_message = AsyncMock()
    channel.set_commands = AsyncMock()
    channel.set_webhook = AsyncMock()
    return channel


@pytest.fixture
def dispatcher(storage):
    """Create FunctionDispatcher over storage."""
    from vc_assistant.dispatch import FunctionDispatcher

    return FunctionDispatcher(data_store=storage, fallback_task_owner="bot")


@pytest.fixture
def wizard(storage):
    """Create AddPersonWizard over storage."""
    from vc_assistant.conversation import AddPersonWizard

    return AddPersonWizard(storage)


@pytest.fixture
def state_machine(dispatcher, wizard, mock_classifier, tracker):
    """Create ConversationStateMachine with a mock classifier."""
    from vc_assistant.conversation import ConversationStateMachine

    return ConversationStateMachine(
        dispatcher=dispatcher,
        wizard=wizard,
        classifier=mock_classifier,
        tracker=tracker,
        auth_password=PASSWORD,
    )


@pytest.fixture
def orchestrator(storage, state_machine, mock_channel, tracker):
    """Create RouterOrchestrator wired to in-memory storage."""
    from vc_assistant.orchestrator import RouterOrchestrator

    return RouterOrchestrator(
        session_store=storage,
        state_machine=state_machine,
        channel=mock_channel,
        tracker=tracker,
    )


@pytest.fixture
def make_message():
    """Build an InboundMessage for user1 in chat 100."""

    def _make(text: str, user_id: str = "user1", chat_id: str = "100") -> InboundMessage:
        return InboundMessage(
            user_id=user_id,
            chat_id=chat_id,
            text=text,
            username="alice",
            first_name="Alice",
        )

    return _make


@pytest_asyncio.fixture
async def authenticated_user(storage):
    """Mark user1 as authenticated in storage and return its id."""
    await storage.save_auth("user1", AuthRecord(is_authenticated=True))
    return "user1"
