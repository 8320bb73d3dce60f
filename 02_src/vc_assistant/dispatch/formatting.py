"""Reply formatting (Telegram HTML parse mode)."""

from html import escape
from typing import Any

from ..models import Person, Task

# (attribute, line template) for optional person fields shown in search hits
_PERSON_HIT_LINES = (
    ("company", "🏢 {}"),
    ("email", "📧 {}"),
    ("categories", "🏷️ {}"),
    ("status", "📊 Status: {}"),
    ("internal_contact", "👥 Internal contact: {}"),
    ("warm_intro", "🤝 Warm intro: {}"),
    ("linkedin_profile", "🔗 LinkedIn: {}"),
)

FIELD_LABELS = {
    "full_name": "Name",
    "email": "Email",
    "company": "Company",
    "categories": "Categories",
    "status": "Status",
    "linkedin_profile": "LinkedIn",
    "internal_contact": "Internal contact",
    "warm_intro": "Warm intro",
    "agenda": "Agenda",
    "meeting_notes": "Meeting notes",
    "more_info": "More info",
    "newsletter": "Newsletter",
    "should_meet": "Should meet",
}


def h(value: Any) -> str:
    """Escape a value for HTML parse mode."""
    return escape(str(value), quote=False)


def _display(value: Any) -> str:
    if value is None or value == "":
        return "—"
    if isinstance(value, bool):
        return "✅" if value else "❌"
    return h(value)


def format_search_results(query: str, people: list[Person]) -> str:
    if not people:
        return f'🔍 No results found for "{h(query)}"'

    lines = [f'🔍 Found {len(people)} result(s) for "<b>{h(query)}</b>":', ""]
    for index, person in enumerate(people, start=1):
        lines.append(f"{index}. <b>{h(person.full_name)}</b>")
        for attribute, template in _PERSON_HIT_LINES:
            value = getattr(person, attribute)
            if value:
                lines.append("   " + template.format(h(value)))
        if person.newsletter:
            lines.append("   📰 Newsletter: ✅")
        if person.should_meet:
            lines.append("   ⭐ Should meet: ✅")
        lines.append("")
    return "\n".join(lines).rstrip()


def format_task_list(tasks: list[Task]) -> str:
    if not tasks:
        return "📝 No tasks found."

    lines = [f"📝 Found {len(tasks)} task(s):", ""]
    for index, task in enumerate(tasks, start=1):
        lines.append(f"{index}. <b>{h(task.text)}</b>")
        lines.append(
            f"   ID: {task.task_id} | Status: {h(task.status)} | Priority: {h(task.priority)}"
        )
        if task.assign_to:
            lines.append(f"   Assigned: {h(task.assign_to)}")
        if task.due_date:
            lines.append(f"   Due: {h(task.due_date)}")
        lines.append("")
    return "\n".join(lines).rstrip()


def format_update_preview(person: Person, updates: dict[str, Any]) -> str:
    """Current record plus proposed changes, ending with the approval prompt."""
    lines = [f"👤 <b>{h(person.full_name)}</b> (ID {person.id})"]
    if person.company:
        lines.append(f"🏢 {h(person.company)}")
    if person.email:
        lines.append(f"📧 {h(person.email)}")

    lines.extend(["", "🔄 Proposed updates:"])
    for name, value in updates.items():
        label = FIELD_LABELS.get(name, name)
        current = getattr(person, name, None)
        lines.append(f"• {label}: {_display(current)} → {_display(value)}")

    lines.extend(["", "Reply: 1 to approve, 0 to cancel"])
    return "\n".join(lines)


def format_added_person(record: dict[str, Any]) -> str:
    """Success reply for the add-person wizard echoing the non-empty fields."""
    lines = [f"✅ Successfully added: <b>{h(record['full_name'])}</b>"]
    for name, value in record.items():
        if name == "full_name" or value in (None, ""):
            continue
        lines.append(f"{FIELD_LABELS.get(name, name)}: {h(value)}")
    return "\n".join(lines)
