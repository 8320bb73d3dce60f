"""Conversation session models.

Each conversation state is its own dataclass so that the payload a state
carries is known statically: only ``AddingPerson`` has a wizard step and a
partial record, only ``PendingUpdate`` has a confirmation target.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union


class StateName(str, Enum):
    """Persisted names of conversation states."""

    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    SEARCHING = "searching"
    ADDING_PERSON = "adding_person"
    PENDING_UPDATE = "pending_update"


@dataclass(frozen=True)
class Idle:
    """No flow in progress."""

    name = StateName.IDLE


@dataclass(frozen=True)
class Authenticating:
    """Waiting for the shared password."""

    name = StateName.AUTHENTICATING


@dataclass(frozen=True)
class Searching:
    """Next message is a search query."""

    name = StateName.SEARCHING


@dataclass
class AddingPerson:
    """Add-person wizard in progress."""

    step: str
    partial_record: dict[str, str | None] = field(default_factory=dict)

    name = StateName.ADDING_PERSON


@dataclass
class PendingUpdate:
    """A person update awaiting a one-message confirmation."""

    target_id: int
    proposed_fields: dict[str, Any]

    name = StateName.PENDING_UPDATE


ConversationState = Union[Idle, Authenticating, Searching, AddingPerson, PendingUpdate]


def state_to_record(state: ConversationState) -> tuple[str, dict]:
    """Convert a state into the persisted (current_state, state_data) pair."""
    if isinstance(state, AddingPerson):
        return state.name.value, {
            "step": state.step,
            "data": dict(state.partial_record),
        }
    if isinstance(state, PendingUpdate):
        return state.name.value, {
            "person_id": state.target_id,
            "updates": dict(state.proposed_fields),
        }
    return state.name.value, {}


def state_from_record(name: str | None, data: dict | None) -> ConversationState:
    """Rebuild a state from its persisted form.

    Records that cannot be read back (unknown name, missing payload) decode to
    ``Idle`` so a corrupt row never traps a user in a flow.
    """
    data = data or {}

    if name == StateName.AUTHENTICATING.value:
        return Authenticating()
    if name == StateName.SEARCHING.value:
        return Searching()
    if name == StateName.ADDING_PERSON.value:
        step = data.get("step")
        if not isinstance(step, str):
            return Idle()
        partial = data.get("data")
        return AddingPerson(
            step=step,
            partial_record=dict(partial) if isinstance(partial, dict) else {},
        )
    if name == StateName.PENDING_UPDATE.value:
        target_id = data.get("person_id")
        updates = data.get("updates")
        if target_id is None or not isinstance(updates, dict):
            return Idle()
        try:
            return PendingUpdate(target_id=int(target_id), proposed_fields=dict(updates))
        except (TypeError, ValueError):
            return Idle()
    return Idle()


@dataclass
class AuthRecord:
    """Authentication status and display metadata of a chat user."""

    is_authenticated: bool = False
    authenticated_at: datetime | None = None
    username: str | None = None
    first_name: str | None = None


@dataclass
class UserSession:
    """Everything the router knows about one sender."""

    user_id: str
    state: ConversationState = field(default_factory=Idle)
    auth: AuthRecord = field(default_factory=AuthRecord)

    @property
    def is_authenticated(self) -> bool:
        return self.auth.is_authenticated
