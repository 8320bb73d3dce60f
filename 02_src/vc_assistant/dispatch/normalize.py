"""Parameter normalization for routed operations.

The router model is loose about parameter names ("assignTo", "assign_to",
"assignee") and shapes (a bare id instead of ``{"task_id": ...}``). Each
operation has one function here that maps every accepted spelling to the
canonical field names and validates the result, raising ``ValidationError``
with the corrective reply for the user.
"""

import re
from dataclasses import dataclass, field
from typing import Any

from ..errors import ValidationError
from ..models import PERSON_FIELDS, TASK_FIELDS, TASK_FILTER_FIELDS

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")
_SEPARATOR_RE = re.compile(r"[\s\-]+")

TASK_FIELD_ALIASES = {
    "task": "text",
    "task_text": "text",
    "title": "text",
    "description": "text",
    "assignee": "assign_to",
    "assigned_to": "assign_to",
    "owner": "assign_to",
    "due": "due_date",
    "deadline": "due_date",
    "id": "task_id",
}

PERSON_FIELD_ALIASES = {
    "name": "full_name",
    "fullname": "full_name",
    "mail": "email",
    "email_address": "email",
    "organization": "company",
    "tags": "categories",
    "category": "categories",
    "linkedin": "linkedin_profile",
    "linked_in": "linkedin_profile",
    "linkedin_url": "linkedin_profile",
    "linked_in_profile": "linkedin_profile",
    "poc": "internal_contact",
    "poc_in_apex": "internal_contact",
    "point_of_contact": "internal_contact",
    "who_warm_intro": "warm_intro",
    "referral": "warm_intro",
    "introduced_by": "warm_intro",
    "notes": "more_info",
    "additional_info": "more_info",
    "info": "more_info",
}

PERIODS = {
    "daily": "daily",
    "day": "daily",
    "today": "daily",
    "weekly": "weekly",
    "week": "weekly",
    "monthly": "monthly",
    "month": "monthly",
    "all": "all",
}

_FLAG_FIELDS = ("newsletter", "should_meet")
_TRUE_WORDS = {"true", "yes", "y", "1", "on"}


def canonical_key(key: str) -> str:
    """``"Full Name"``, ``"fullName"`` and ``"full-name"`` all become ``"full_name"``."""
    key = _CAMEL_RE.sub(r"_\1", str(key).strip())
    return _SEPARATOR_RE.sub("_", key).lower()


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        value = ", ".join(str(item).strip() for item in value if str(item).strip())
    text = str(value).strip()
    return text or None


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_WORDS
    return bool(value)


def _canonical_mapping(raw: dict, aliases: dict[str, str]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in raw.items():
        name = canonical_key(key)
        name = aliases.get(name, name)
        # First spelling wins when the model sends two aliases of one field
        result.setdefault(name, value)
    return result


def parse_record_id(value: Any) -> int | None:
    """Parse ``5``, ``"5"`` or ``"#5"``; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        candidate = value.strip().lstrip("#")
        if candidate.isdigit():
            return int(candidate)
    return None


def normalize_search(parameters: Any, raw_text: str) -> str:
    """Join the router's search words into one query; default to the raw text."""
    if isinstance(parameters, dict):
        mapped = _canonical_mapping(parameters, {})
        for key in ("words", "terms", "query", "search"):
            if key in mapped:
                return normalize_search(mapped[key], raw_text)
        return raw_text

    if isinstance(parameters, (list, tuple)):
        query = " ".join(str(word).strip() for word in parameters if str(word).strip())
    elif isinstance(parameters, str):
        query = parameters.strip()
    else:
        query = ""

    return query or raw_text


@dataclass
class AddTaskParams:
    text: str
    assign_to: str | None = None
    due_date: str | None = None
    status: str = "pending"
    label: str | None = None
    priority: str = "medium"


def normalize_add_task(parameters: Any) -> AddTaskParams:
    if isinstance(parameters, str):
        mapped: dict[str, Any] = {"text": parameters}
    elif isinstance(parameters, dict):
        mapped = _canonical_mapping(parameters, TASK_FIELD_ALIASES)
    else:
        mapped = {}

    text = _text(mapped.get("text"))
    if not text:
        raise ValidationError("❌ I need task details. Try: 'Add task call John tomorrow'")

    return AddTaskParams(
        text=text,
        assign_to=_text(mapped.get("assign_to")),
        due_date=_text(mapped.get("due_date")),
        status=(_text(mapped.get("status")) or "pending").lower(),
        label=_text(mapped.get("label")),
        priority=(_text(mapped.get("priority")) or "medium").lower(),
    )


def normalize_task_id(parameters: Any, usage: str) -> int:
    """Extract a task id from ``{"task_id": 5}`` or a bare ``5``.

    ``usage`` is the example shown to the user when the id is missing.
    """
    if isinstance(parameters, dict):
        mapped = _canonical_mapping(parameters, TASK_FIELD_ALIASES)
        task_id = parse_record_id(mapped.get("task_id"))
    else:
        task_id = parse_record_id(parameters)

    if task_id is None:
        raise ValidationError(f"❌ I need a task ID. Try: '{usage}'")
    return task_id


@dataclass
class ListTasksParams:
    period: str = "all"
    filters: dict[str, Any] = field(default_factory=dict)


def _task_filter_value(field_name: str, value: Any) -> Any:
    if field_name == "task_id":
        task_id = parse_record_id(value)
        if task_id is None:
            raise ValidationError(f"❌ '{value}' is not a task ID.")
        return task_id
    text = _text(value)
    if text is None:
        raise ValidationError(f"❌ I need a value to filter tasks by {field_name}.")
    return text.lower() if field_name in ("status", "priority") else text


def _task_filter_field(name: Any) -> str:
    field_name = canonical_key(name)
    field_name = TASK_FIELD_ALIASES.get(field_name, field_name)
    if field_name not in TASK_FILTER_FIELDS:
        raise ValidationError(
            f"❌ I can't filter tasks by '{name}'. "
            "Try status, priority, label, assign_to or due_date."
        )
    return field_name


def normalize_list_tasks(parameters: Any) -> ListTasksParams:
    if isinstance(parameters, str):
        return ListTasksParams(period=PERIODS.get(parameters.strip().lower(), "all"))
    if not isinstance(parameters, dict):
        return ListTasksParams()

    mapped = _canonical_mapping(parameters, {})
    period = PERIODS.get(str(mapped.pop("period", "all")).strip().lower(), "all")
    filters: dict[str, Any] = {}

    raw_filter = mapped.pop("filter", None)
    raw_value = mapped.pop("value", None)
    if isinstance(raw_filter, dict):
        for name, value in raw_filter.items():
            field_name = _task_filter_field(name)
            filters[field_name] = _task_filter_value(field_name, value)
    elif raw_filter not in (None, ""):
        field_name = _task_filter_field(raw_filter)
        filters[field_name] = _task_filter_value(field_name, raw_value)

    # {"status": "done"} without the filter/value wrapper
    for name, value in mapped.items():
        field_name = TASK_FIELD_ALIASES.get(name, name)
        if field_name in TASK_FILTER_FIELDS and value not in (None, ""):
            filters.setdefault(field_name, _task_filter_value(field_name, value))

    return ListTasksParams(period=period, filters=filters)


def normalize_person_fields(raw: dict) -> dict[str, Any]:
    """Map a person payload to known columns; unknown keys are dropped."""
    mapped = _canonical_mapping(raw, PERSON_FIELD_ALIASES)
    result: dict[str, Any] = {}
    for name, value in mapped.items():
        if name not in PERSON_FIELDS:
            continue
        result[name] = _flag(value) if name in _FLAG_FIELDS else _text(value)
    return result


def normalize_people(parameters: Any) -> list[dict[str, Any]]:
    """Candidate person records, each mapped to canonical columns.

    Candidates may still lack a full name; the caller decides what to do with
    them.
    """
    if isinstance(parameters, dict):
        mapped = _canonical_mapping(parameters, {})
        nested = mapped.get("people") or mapped.get("people_data") or mapped.get("records")
        parameters = nested if isinstance(nested, list) else [parameters]

    if not isinstance(parameters, list):
        raise ValidationError("❌ I need person details. Try: 'Add John Doe from TechCorp'")

    return [normalize_person_fields(item) for item in parameters if isinstance(item, dict)]


@dataclass
class UpdateTaskParams:
    task_id: int
    field: str
    new_value: str


def normalize_update_task(parameters: Any) -> UpdateTaskParams:
    usage = "❌ I need task ID, field, and new value. Try: 'Set task 5 status to done'"
    if not isinstance(parameters, dict):
        raise ValidationError(usage)

    mapped = _canonical_mapping(parameters, {"id": "task_id", "value": "new_value"})
    task_id = parse_record_id(mapped.get("task_id"))
    raw_field = _text(mapped.get("field"))
    new_value = _text(mapped.get("new_value"))
    if task_id is None or not raw_field or new_value is None:
        raise ValidationError(usage)

    field_name = canonical_key(raw_field)
    field_name = TASK_FIELD_ALIASES.get(field_name, field_name)
    if field_name not in TASK_FIELDS:
        raise ValidationError(
            f"❌ Tasks have no '{raw_field}' field. "
            "Try text, status, priority, label, assign_to or due_date."
        )
    if field_name in ("status", "priority"):
        new_value = new_value.lower()

    return UpdateTaskParams(task_id=task_id, field=field_name, new_value=new_value)


@dataclass
class UpdatePersonParams:
    person_id: int | None
    updates: dict[str, Any]


def normalize_update_person(parameters: Any) -> UpdatePersonParams:
    if not isinstance(parameters, dict):
        raise ValidationError("❌ Tell me what to change. Try: 'her email is dana@acme.io'")

    mapped = _canonical_mapping(parameters, {"id": "person_id"})
    person_id = parse_record_id(mapped.get("person_id"))
    raw_updates = mapped.get("updates")
    if not isinstance(raw_updates, dict):
        # Some answers put the fields next to person_id instead of under "updates"
        raw_updates = {k: v for k, v in mapped.items() if k != "person_id"}

    updates = normalize_person_fields(raw_updates)
    if "full_name" in updates and not updates["full_name"]:
        del updates["full_name"]
    if not updates:
        raise ValidationError("❌ I couldn't tell which details to update. Please try again.")

    return UpdatePersonParams(person_id=person_id, updates=updates)
