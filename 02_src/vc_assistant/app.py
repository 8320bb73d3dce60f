"""Application bootstrap and lifecycle management."""

from typing import Protocol

from .channel import IMessageChannel, TelegramChannel
from .classifier import FunctionRouterClassifier, IClassifier
from .config import Settings
from .conversation import AddPersonWizard, ConversationStateMachine
from .dispatch import FunctionDispatcher
from .llm import ILLMProvider, LLMProvider
from .logging_config import get_logger
from .orchestrator import RouterOrchestrator
from .storage import Storage
from .tracker import Tracker

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...


class Application:
    """Main application bootstrap.

    ``llm_provider`` and ``channel`` may be injected (tests, alternative
    transports); otherwise they are built from ``settings``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        llm_provider: ILLMProvider | None = None,
        channel: IMessageChannel | None = None,
    ):
        self.settings = settings or Settings.from_env()
        self._llm_override = llm_provider
        self._channel_override = channel

        # Components (will be initialized in start())
        self._storage: Storage | None = None
        self._tracker: Tracker | None = None
        self._llm: ILLMProvider | None = None
        self._classifier: IClassifier | None = None
        self._channel: IMessageChannel | None = None
        self._dispatcher: FunctionDispatcher | None = None
        self._state_machine: ConversationStateMachine | None = None
        self._orchestrator: RouterOrchestrator | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")
        settings = self.settings

        # 1. Storage (no dependencies)
        self._storage = Storage(settings.db_path)
        await self._storage.init()
        logger.info("Storage initialized")

        # 2. Tracker (depends on Storage)
        self._tracker = Tracker(self._storage)

        # 3. LLM + classifier (optional: free text is unavailable without a key)
        self._llm = self._llm_override
        if self._llm is None and settings.anthropic_api_key:
            self._llm = LLMProvider(
                api_key=settings.anthropic_api_key,
                model=settings.llm_model,
                timeout=settings.llm_timeout,
            )
        if self._llm is not None:
            self._classifier = FunctionRouterClassifier(self._llm)
            logger.info("Classifier initialized")
        else:
            logger.warning("ANTHROPIC_API_KEY not set, free-text routing is disabled")

        # 4. Channel
        if self._channel_override is not None:
            self._channel = self._channel_override
        else:
            telegram = TelegramChannel(
                bot_token=settings.telegram_bot_token,
                webhook_secret=settings.webhook_secret,
                timeout=settings.http_timeout,
            )
            await telegram.start()
            self._channel = telegram
        logger.info("Message channel initialized")

        if not settings.auth_password:
            logger.warning("AUTH_PASSWORD not set, nobody can authenticate")

        # 5. Dispatcher, wizard, state machine (depend on Storage, Classifier, Tracker)
        self._dispatcher = FunctionDispatcher(
            data_store=self._storage,
            fallback_task_owner=settings.fallback_task_owner,
            result_limit=settings.result_limit,
        )
        self._state_machine = ConversationStateMachine(
            dispatcher=self._dispatcher,
            wizard=AddPersonWizard(self._storage),
            classifier=self._classifier,
            tracker=self._tracker,
            auth_password=settings.auth_password,
            search_prefix=settings.search_prefix,
        )

        # 6. Orchestrator (depends on everything above)
        self._orchestrator = RouterOrchestrator(
            session_store=self._storage,
            state_machine=self._state_machine,
            channel=self._channel,
            tracker=self._tracker,
        )
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if isinstance(self._channel, TelegramChannel):
            await self._channel.stop()
        if self._storage:
            await self._storage.close()
            logger.info("Storage closed")

    @property
    def storage(self) -> Storage:
        """Get storage instance."""
        if not self._storage:
            raise RuntimeError("Application not started")
        return self._storage

    @property
    def channel(self) -> IMessageChannel:
        """Get message channel instance."""
        if not self._channel:
            raise RuntimeError("Application not started")
        return self._channel

    @property
    def orchestrator(self) -> RouterOrchestrator:
        """Get router orchestrator instance."""
        if not self._orchestrator:
            raise RuntimeError("Application not started")
        return self._orchestrator
