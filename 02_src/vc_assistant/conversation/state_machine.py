"""Per-user conversation state machine."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from ..classifier import IClassifier
from ..dispatch import FunctionDispatcher
from ..errors import ClassifierError
from ..logging_config import get_logger
from ..models import (
    AddingPerson,
    Authenticating,
    AuthRecord,
    ConversationState,
    Idle,
    InboundMessage,
    PendingUpdate,
    Searching,
    UnrecognizedOperation,
    UserSession,
)
from ..tracker import ITracker
from .wizard import AddPersonWizard

logger = get_logger(__name__)

AUTH_PROMPT = "🔐 Please authenticate first using /start"

WELCOME_PROMPT = (
    "Welcome to VC Search Engine Bot! 🚀\n\n"
    "🔐 Please enter the password to access the system:"
)

WELCOME_BACK = (
    "Welcome back to VC Search Engine Bot! 🚀\n\n"
    "You are authenticated and ready to use the bot.\n\n"
    "💡 Just type anything to search the database!\n\n"
    "Commands:\n"
    "🔍 /search - Search people in database\n"
    "➕ /add - Add a new person\n"
    "❓ /help - Show this help message"
)

AUTH_SUCCESS = (
    "✅ Authentication successful! Welcome to VC Search Engine!\n\n"
    "💡 <b>You can now just type anything!</b>\n"
    "Examples:\n"
    "• 'search fintech startups'\n"
    "• 'add task call John tomorrow'\n"
    "• 'show all tasks'\n"
    "• 'add Sarah from Google'\n\n"
    "Commands:\n"
    "🔍 /search - Search people\n"
    "➕ /add - Add a new person\n"
    "❓ /help - Show help message"
)

AUTH_FAILED = "❌ Incorrect password. Please try again, or use /cancel to stop."

HELP_TEXT = (
    "VC Search Engine Bot Commands:\n\n"
    "💡 <b>Quick Search:</b> Start a message with {prefix} to search directly!\n"
    "Example: '{prefix}fintech', '{prefix}Sarah', '{prefix}Sequoia'\n\n"
    "📝 <b>Tasks:</b> 'add task call John tomorrow', 'show all tasks', "
    "'update task 5 status done'\n"
    "👥 <b>People:</b> 'add John Doe from TechCorp', 'search ai engineer'\n\n"
    "Commands:\n"
    "🔍 /search - Search for people\n"
    "➕ /add - Add a new person to the database\n"
    "❌ /cancel - Cancel current operation\n\n"
    "Simply type your request in natural language!"
)

SEARCH_PROMPT = "🔍 What would you like to search for? (name, company, hashtag, or specialty)"
CANCELLED = "❌ Operation cancelled. Type /help to see available commands."
UPDATE_CANCELLED = "❌ Update cancelled."
CONFIRM_TOKEN = "1"
ROUTER_UNAVAILABLE = "❌ Language router not configured. Please contact administrator."
ROUTER_FAILED = "❌ Sorry, I couldn't process that request right now. Please try again."


class Command(str, Enum):
    """Slash commands understood by the bot."""

    START = "/start"
    HELP = "/help"
    SEARCH = "/search"
    ADD = "/add"
    CANCEL = "/cancel"


# The only commands recognised while a flow consumes free text
FLOW_COMMANDS = frozenset({Command.START, Command.CANCEL})


def parse_command(text: str) -> Command | None:
    """Return the command in ``text`` ("/start", "/add@my_bot", ...), if any."""
    if not text.startswith("/"):
        return None
    token = text.split(maxsplit=1)[0].split("@", 1)[0].lower()
    try:
        return Command(token)
    except ValueError:
        return None


@dataclass
class Turn:
    """Outcome of handling one message."""

    replies: list[str] = field(default_factory=list)
    next_state: ConversationState = field(default_factory=Idle)
    auth: AuthRecord | None = None  # set only when authentication changed
    register_commands: bool = False


class ConversationStateMachine:
    """Decides what a message means given the sender's session."""

    def __init__(
        self,
        dispatcher: FunctionDispatcher,
        wizard: AddPersonWizard,
        classifier: IClassifier | None,
        tracker: ITracker,
        auth_password: str,
        search_prefix: str = ".",
    ):
        self._dispatcher = dispatcher
        self._wizard = wizard
        self._classifier = classifier
        self._tracker = tracker
        self._auth_password = auth_password
        self._search_prefix = search_prefix

    async def handle(self, session: UserSession, message: InboundMessage) -> Turn:
        """Handle one message; the caller persists the returned turn."""
        state = session.state
        command = parse_command(message.text)
        if (
            command is not None
            and isinstance(state, (Authenticating, AddingPerson))
            and command not in FLOW_COMMANDS
        ):
            command = None

        if command is not None:
            turn = self._handle_command(command, session)
            await self._tracker.track(
                "command_handled",
                "state_machine",
                {
                    "user_id": session.user_id,
                    "command": command.value,
                    "from_state": state.name.value,
                    "to_state": turn.next_state.name.value,
                },
            )
            return turn

        if isinstance(state, Authenticating):
            return self._authenticate(message)

        if not session.is_authenticated:
            return Turn([AUTH_PROMPT], state)

        if isinstance(state, PendingUpdate):
            return await self._confirm_update(state, message.text)

        if isinstance(state, Searching):
            return Turn([await self._dispatcher.search(message.text)], Idle())

        if isinstance(state, AddingPerson):
            next_state, reply = await self._wizard.advance(
                state, message.text, session.user_id
            )
            return Turn([reply], next_state)

        return await self._handle_free_text(session, message.text)

    def _handle_command(self, command: Command, session: UserSession) -> Turn:
        if command is Command.CANCEL:
            return Turn([CANCELLED], Idle())

        if command is Command.START:
            if session.is_authenticated:
                return Turn([WELCOME_BACK], Idle(), register_commands=True)
            return Turn([WELCOME_PROMPT], Authenticating())

        # A pending update lives for exactly one message; a command resolves it too
        pending = isinstance(session.state, PendingUpdate)
        resting_state = Idle() if pending else session.state

        if not session.is_authenticated:
            return Turn([AUTH_PROMPT], resting_state)

        if command is Command.HELP:
            help_text = HELP_TEXT.format(prefix=self._search_prefix)
            replies = [UPDATE_CANCELLED, help_text] if pending else [help_text]
            return Turn(replies, resting_state)

        if command is Command.SEARCH:
            return Turn([SEARCH_PROMPT], Searching())

        state, prompt = self._wizard.start()
        return Turn([prompt], state)

    def _authenticate(self, message: InboundMessage) -> Turn:
        """Check the shared secret. A wrong answer keeps the user here to retry."""
        if self._auth_password and message.text == self._auth_password:
            logger.info("User %s authenticated", message.user_id)
            auth = AuthRecord(
                is_authenticated=True,
                authenticated_at=datetime.now(timezone.utc),
                username=message.username,
                first_name=message.first_name,
            )
            return Turn([AUTH_SUCCESS], Idle(), auth=auth, register_commands=True)

        logger.warning("Failed authentication attempt by user %s", message.user_id)
        return Turn([AUTH_FAILED], Authenticating())

    async def _confirm_update(self, pending: PendingUpdate, text: str) -> Turn:
        if text == CONFIRM_TOKEN:
            return Turn([await self._dispatcher.apply_pending_update(pending)], Idle())
        return Turn([UPDATE_CANCELLED], Idle())

    async def _handle_free_text(self, session: UserSession, text: str) -> Turn:
        if text.startswith(self._search_prefix):
            query = text[len(self._search_prefix):].strip()
            if not query:
                return Turn(
                    [
                        "❓ Please provide a search term after the "
                        f"'{self._search_prefix}' (e.g., '{self._search_prefix}john doe')"
                    ],
                    Idle(),
                )
            return Turn([await self._dispatcher.search(query)], Idle())

        if self._classifier is None:
            return Turn([ROUTER_UNAVAILABLE], Idle())

        try:
            operation = await self._classifier.classify(text)
        except ClassifierError:
            return Turn([ROUTER_FAILED], Idle())

        if isinstance(operation, UnrecognizedOperation):
            await self._tracker.track(
                "classification_fallback",
                "state_machine",
                {"user_id": session.user_id, "reason": operation.reason},
            )
        else:
            await self._tracker.track(
                "operation_dispatched",
                "state_machine",
                {"user_id": session.user_id, "operation": operation.kind.name.lower()},
            )

        result = await self._dispatcher.dispatch(operation, session.user_id, text)
        return Turn(result.replies, result.next_state or Idle())
