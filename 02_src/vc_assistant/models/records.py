"""People and task records held by the data store."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Person:
    """A contact in the people directory."""

    id: int
    full_name: str
    email: str | None = None
    company: str | None = None
    categories: str | None = None
    status: str | None = None
    linkedin_profile: str | None = None
    internal_contact: str | None = None  # our point of contact
    warm_intro: str | None = None  # who can make an introduction
    agenda: str | None = None
    meeting_notes: str | None = None
    more_info: str | None = None
    newsletter: bool = False
    should_meet: bool = False
    added_by: str | None = None
    created_at: datetime | None = None


@dataclass
class Task:
    """A to-do item."""

    task_id: int
    text: str
    assign_to: str | None = None
    due_date: str | None = None  # free text as given by the user ("thursday")
    status: str = "pending"
    label: str | None = None
    priority: str = "medium"
    created_by: str | None = None
    created_at: datetime | None = None


# Columns a caller may write on insert/update.
PERSON_FIELDS = (
    "full_name",
    "email",
    "company",
    "categories",
    "status",
    "linkedin_profile",
    "internal_contact",
    "warm_intro",
    "agenda",
    "meeting_notes",
    "more_info",
    "newsletter",
    "should_meet",
)

# Columns matched by the free-text people search.
SEARCHABLE_PERSON_FIELDS = (
    "full_name",
    "company",
    "categories",
    "email",
    "status",
    "linkedin_profile",
    "internal_contact",
    "warm_intro",
    "agenda",
    "meeting_notes",
    "more_info",
)

TASK_FIELDS = (
    "text",
    "assign_to",
    "due_date",
    "status",
    "label",
    "priority",
)

TASK_FILTER_FIELDS = TASK_FIELDS + ("task_id", "created_by")
