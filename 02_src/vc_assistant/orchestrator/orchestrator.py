"""Router orchestrator: end-to-end handling of one inbound message."""

from typing import Protocol

from ..channel import IMessageChannel
from ..conversation import ConversationStateMachine
from ..errors import ChannelError
from ..logging_config import get_logger
from ..models import InboundMessage
from ..storage import ISessionStore
from ..tracker import ITracker

logger = get_logger(__name__)


class IRouterOrchestrator(Protocol):
    """Per-message control flow."""

    async def handle_message(self, message: InboundMessage) -> bool:
        """Process one message. Returns False if it failed."""
        ...


class RouterOrchestrator:
    """Loads the session, runs the state machine, persists, replies."""

    def __init__(
        self,
        session_store: ISessionStore,
        state_machine: ConversationStateMachine,
        channel: IMessageChannel,
        tracker: ITracker,
    ):
        self._sessions = session_store
        self._state_machine = state_machine
        self._channel = channel
        self._tracker = tracker

    async def handle_message(self, message: InboundMessage) -> bool:
        """Process one message. Returns False if it failed.

        Any fault is contained to this message: it is logged and reported to
        the caller, never raised.
        """
        try:
            await self._process(message)
            return True
        except Exception as e:
            logger.error(
                "Failed to process message from %s: %s",
                message.user_id,
                e,
                exc_info=True,
            )
            await self._tracker.track(
                "message_failed",
                "orchestrator",
                {"user_id": message.user_id, "error": str(e)},
            )
            return False

    async def _process(self, message: InboundMessage) -> None:
        session = await self._sessions.get_session(message.user_id)
        logger.info(
            "Message received from %s in state %s",
            message.user_id,
            session.state.name.value,
            extra={
                "user_id": message.user_id,
                "chat_id": message.chat_id,
                "state": session.state.name.value,
                "context": {"text": message.text[:100]},
            },
        )
        await self._tracker.track(
            "message_received",
            "orchestrator",
            {
                "user_id": message.user_id,
                "state": session.state.name.value,
                "authenticated": session.is_authenticated,
            },
        )

        turn = await self._state_machine.handle(session, message)

        # Authentication first: the state write below never touches it
        if turn.auth is not None:
            await self._sessions.save_auth(message.user_id, turn.auth)
        await self._sessions.save_state(message.user_id, turn.next_state)

        if turn.register_commands:
            try:
                await self._channel.set_commands()
            except ChannelError as e:
                logger.error("Failed to register bot commands: %s", e)

        for reply in turn.replies:
            try:
                await self._channel.send_message(message.chat_id, reply)
            except ChannelError as e:
                logger.error("Failed to deliver reply to %s: %s", message.chat_id, e)
