"""Add-person wizard: one question per message, fixed order."""

from dataclasses import dataclass

from ..dispatch.formatting import format_added_person
from ..errors import DataStoreError
from ..logging_config import get_logger
from ..models import AddingPerson, ConversationState, Idle
from ..storage import IDataStore

logger = get_logger(__name__)

SKIP_TOKEN = "skip"


@dataclass(frozen=True)
class WizardStep:
    key: str  # persisted step name
    field: str  # person column the answer fills
    prompt: str
    skippable: bool = True


ADD_PERSON_STEPS = (
    WizardStep(
        "name",
        "full_name",
        "➕ Let's add a new person! What's their full name?",
        skippable=False,
    ),
    WizardStep("email", "email", "📧 What's their email address? (or type 'skip')"),
    WizardStep("company", "company", "👔 What company do they work for? (or type 'skip')"),
    WizardStep(
        "categories",
        "categories",
        "🏷️ What categories/tags describe them? (comma-separated, or type 'skip')",
    ),
    WizardStep("status", "status", "📊 What's their status? (or type 'skip')"),
    WizardStep(
        "linkedin",
        "linkedin_profile",
        "🔗 What's their LinkedIn profile URL? (or type 'skip')",
    ),
    WizardStep(
        "internal_contact",
        "internal_contact",
        "👥 Who is our internal point of contact? (or type 'skip')",
    ),
    WizardStep("warm_intro", "warm_intro", "🤝 Who can provide a warm intro? (or type 'skip')"),
    WizardStep("more_info", "more_info", "📝 Any additional information? (or type 'skip')"),
)

_STEP_INDEX = {step.key: index for index, step in enumerate(ADD_PERSON_STEPS)}


class AddPersonWizard:
    """Collects a person record over several messages, then inserts it."""

    def __init__(self, data_store: IDataStore):
        self._store = data_store

    def start(self) -> tuple[AddingPerson, str]:
        """Initial wizard state and the first question."""
        first = ADD_PERSON_STEPS[0]
        return AddingPerson(step=first.key), first.prompt

    async def advance(
        self, state: AddingPerson, text: str, user_id: str
    ) -> tuple[ConversationState, str]:
        """Store one answer; ask the next question or insert the record."""
        index = _STEP_INDEX.get(state.step)
        if index is None:
            logger.warning("Unknown wizard step %r for user %s", state.step, user_id)
            return Idle(), "❌ Something went wrong. Please try again with /add"

        step = ADD_PERSON_STEPS[index]
        skipped = step.skippable and text.strip().lower() == SKIP_TOKEN
        record = dict(state.partial_record)
        record[step.field] = None if skipped else text

        if index + 1 < len(ADD_PERSON_STEPS):
            next_step = ADD_PERSON_STEPS[index + 1]
            return AddingPerson(step=next_step.key, partial_record=record), next_step.prompt

        try:
            person = await self._store.insert_person(record, added_by=user_id)
        except DataStoreError as e:
            logger.error("Wizard insert failed for user %s: %s", user_id, e, exc_info=True)
            return Idle(), "❌ Error adding person to database. Please try again with /add"

        logger.info("Person %s added via wizard by %s", person.id, user_id)
        return Idle(), format_added_person(record)
