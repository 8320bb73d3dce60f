"""Function dispatcher: runs routed operations against the data store."""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from ..errors import DataStoreError, ValidationError
from ..logging_config import get_logger
from ..models import (
    ClassifierResult,
    ConversationState,
    OperationKind,
    PendingUpdate,
    UnrecognizedOperation,
)
from ..storage import IDataStore
from .formatting import (
    format_search_results,
    format_task_list,
    format_update_preview,
    h,
)
from .normalize import (
    normalize_add_task,
    normalize_list_tasks,
    normalize_people,
    normalize_search,
    normalize_task_id,
    normalize_update_person,
    normalize_update_task,
)

logger = get_logger(__name__)


@dataclass
class DispatchResult:
    """Replies for the user and, when an operation starts a flow, the next state."""

    replies: list[str] = field(default_factory=list)
    next_state: ConversationState | None = None


Handler = Callable[[Any, str | None, str], Awaitable[DispatchResult]]


class FunctionDispatcher:
    """Validates parameters, calls the data store, formats results.

    Nothing raised by a handler escapes ``dispatch``: validation problems
    become the corrective reply and data store failures become the
    operation's failure reply.
    """

    def __init__(
        self,
        data_store: IDataStore,
        fallback_task_owner: str = "bot",
        result_limit: int = 10,
    ):
        self._store = data_store
        self._fallback_task_owner = fallback_task_owner
        self._result_limit = result_limit

        self._handlers: dict[OperationKind, tuple[Handler, str]] = {
            OperationKind.SEARCH: (
                self._search,
                "❌ Error searching database. Please try again.",
            ),
            OperationKind.ADD_TASK: (
                self._add_task,
                "❌ Error adding task. Please try again.",
            ),
            OperationKind.REMOVE_TASK: (
                self._remove_task,
                "❌ Error removing task. Please try again.",
            ),
            OperationKind.ADD_TASK_ALERT: (
                self._add_task_alert,
                "❌ Error adding task alert. Please try again.",
            ),
            OperationKind.LIST_TASKS: (
                self._list_tasks,
                "❌ Error fetching tasks. Please try again.",
            ),
            OperationKind.ADD_PEOPLE: (
                self._add_people,
                "❌ Error adding people. Please try again.",
            ),
            OperationKind.LIST_MEETINGS: (
                self._list_meetings,
                "❌ Error fetching meetings. Please try again.",
            ),
            OperationKind.UPDATE_TASK: (
                self._update_task,
                "❌ Error updating task. Please try again.",
            ),
            OperationKind.UPDATE_PERSON: (
                self._propose_person_update,
                "❌ Error updating person. Please try again.",
            ),
        }

    async def dispatch(
        self,
        operation: ClassifierResult,
        user_id: str | None,
        raw_text: str,
    ) -> DispatchResult:
        """Execute one routed operation on behalf of user_id."""
        if isinstance(operation, UnrecognizedOperation):
            return DispatchResult([await self.search(operation.raw_text)])

        handler, failure_reply = self._handlers[operation.kind]
        logger.info(
            "Dispatching %s",
            operation.kind.name.lower(),
            extra={"context": {"user_id": user_id, "parameters": operation.parameters}},
        )

        try:
            return await handler(operation.parameters, user_id, raw_text)
        except ValidationError as e:
            logger.info("Invalid %s parameters: %s", operation.kind.name.lower(), e)
            return DispatchResult([e.user_message])
        except DataStoreError as e:
            logger.error(
                "%s failed: %s", operation.kind.name.lower(), e, exc_info=True
            )
            return DispatchResult([failure_reply])

    async def search(self, query: str) -> str:
        """Shared people search used by every search entry point."""
        try:
            people = await self._store.search_people(query, limit=self._result_limit)
        except DataStoreError as e:
            logger.error("Search failed: %s", e, exc_info=True)
            return "❌ Error searching database. Please try again."
        return format_search_results(query, people)

    async def apply_pending_update(self, pending: PendingUpdate) -> str:
        """Second phase of update_person: write the confirmed changes."""
        try:
            updated = await self._store.update_person(
                pending.target_id, pending.proposed_fields
            )
        except DataStoreError as e:
            logger.error("Confirmed person update failed: %s", e, exc_info=True)
            return "❌ Error updating person. Please try again."

        if not updated:
            return "❌ That person no longer exists. Nothing was updated."
        logger.info(
            "Person %s updated",
            pending.target_id,
            extra={"context": {"fields": list(pending.proposed_fields)}},
        )
        return "✅ Person updated successfully!"

    async def _search(self, parameters: Any, user_id: str | None, raw_text: str) -> DispatchResult:
        return DispatchResult([await self.search(normalize_search(parameters, raw_text))])

    async def _add_task(self, parameters: Any, user_id: str | None, raw_text: str) -> DispatchResult:
        params = normalize_add_task(parameters)
        task = await self._store.insert_task(
            {
                "text": params.text,
                "assign_to": params.assign_to,
                "due_date": params.due_date,
                "status": params.status,
                "label": params.label,
                "priority": params.priority,
                "created_by": user_id or self._fallback_task_owner,
            }
        )
        return DispatchResult(
            [
                f'✅ Task added: "{h(task.text)}" '
                f"({h(task.priority)} priority, {h(task.status)})"
            ]
        )

    async def _remove_task(self, parameters: Any, user_id: str | None, raw_text: str) -> DispatchResult:
        task_id = normalize_task_id(parameters, "Remove task 5")
        if not await self._store.delete_task(task_id):
            return DispatchResult([f"❌ Task {task_id} not found."])
        return DispatchResult([f"✅ Task {task_id} removed successfully."])

    async def _add_task_alert(self, parameters: Any, user_id: str | None, raw_text: str) -> DispatchResult:
        normalize_task_id(parameters, "Add an alert to task 5")
        return DispatchResult(["🚧 Task alerts feature coming soon!"])

    async def _list_tasks(self, parameters: Any, user_id: str | None, raw_text: str) -> DispatchResult:
        params = normalize_list_tasks(parameters)
        tasks = await self._store.list_tasks(params.filters, limit=self._result_limit)
        return DispatchResult([format_task_list(tasks)])

    async def _add_people(self, parameters: Any, user_id: str | None, raw_text: str) -> DispatchResult:
        candidates = normalize_people(parameters)

        added: list[str] = []
        for record in candidates:
            if not record.get("full_name"):
                continue
            try:
                person = await self._store.insert_person(record, added_by=user_id)
            except DataStoreError as e:
                logger.warning("Skipping %s: %s", record["full_name"], e)
                continue
            added.append(person.full_name)

        if not added:
            return DispatchResult(["❌ Could not add any people. Please check the details."])
        names = ", ".join(h(name) for name in added)
        return DispatchResult([f"✅ Added {len(added)} person(s): {names}"])

    async def _list_meetings(self, parameters: Any, user_id: str | None, raw_text: str) -> DispatchResult:
        return DispatchResult(["🚧 Meetings feature coming soon!"])

    async def _update_task(self, parameters: Any, user_id: str | None, raw_text: str) -> DispatchResult:
        params = normalize_update_task(parameters)
        if not await self._store.update_task(params.task_id, params.field, params.new_value):
            return DispatchResult([f"❌ Task {params.task_id} not found."])
        return DispatchResult(
            [f"✅ Task {params.task_id} updated: {params.field} = {h(params.new_value)}"]
        )

    async def _propose_person_update(self, parameters: Any, user_id: str | None, raw_text: str) -> DispatchResult:
        """First phase of update_person: preview and park the change."""
        params = normalize_update_person(parameters)

        if params.person_id is not None:
            person = await self._store.get_person(params.person_id)
            if person is None:
                return DispatchResult([f"❌ No person found with ID {params.person_id}."])
        else:
            person = None
            if user_id is not None:
                person = await self._store.latest_person(added_by=user_id)
            if person is None:
                person = await self._store.latest_person()
            if person is None:
                return DispatchResult(
                    ["❌ No person found to update. Please specify a person ID."]
                )

        return DispatchResult(
            [format_update_preview(person, params.updates)],
            next_state=PendingUpdate(target_id=person.id, proposed_fields=params.updates),
        )
