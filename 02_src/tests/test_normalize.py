"""Tests for operation parameter normalization."""

import pytest

from vc_assistant.dispatch.normalize import (
    canonical_key,
    normalize_add_task,
    normalize_list_tasks,
    normalize_people,
    normalize_search,
    normalize_task_id,
    normalize_update_person,
    normalize_update_task,
    parse_record_id,
)
from vc_assistant.errors import ValidationError


class TestKeysAndIds:
    """Tests for key canonicalization and id parsing."""

    @pytest.mark.parametrize("key", ["full_name", "fullName", "Full Name", "full-name"])
    def test_canonical_key(self, key):
        """Test spellings of one field collapse to snake_case."""
        assert canonical_key(key) == "full_name"

    def test_parse_record_id(self):
        """Test ids as int, digit string and #-prefixed string."""
        assert parse_record_id(5) == 5
        assert parse_record_id("5") == 5
        assert parse_record_id("#12") == 12
        assert parse_record_id("five") is None
        assert parse_record_id(True) is None
        assert parse_record_id(None) is None


class TestNormalizeSearch:
    """Tests for search parameters."""

    def test_word_list_is_joined(self):
        """Test the router's word list becomes one query."""
        assert normalize_search(["ai", "engineer"], "search ai engineer") == "ai engineer"

    def test_dict_with_words(self):
        """Test a wrapped word list is accepted."""
        assert normalize_search({"words": ["Sequoia"]}, "x") == "Sequoia"

    def test_empty_falls_back_to_raw_text(self):
        """Test missing parameters search the original message."""
        assert normalize_search(None, "fintech founders") == "fintech founders"
        assert normalize_search([], "fintech founders") == "fintech founders"


class TestNormalizeAddTask:
    """Tests for add_task parameters."""

    def test_aliases_and_defaults(self):
        """Test camelCase aliases map and defaults fill in."""
        params = normalize_add_task({"task": "Call John", "assignTo": "Dana", "deadline": "friday"})
        assert params.text == "Call John"
        assert params.assign_to == "Dana"
        assert params.due_date == "friday"
        assert params.status == "pending"
        assert params.priority == "medium"

    def test_priority_is_lowercased(self):
        """Test priority casing is normalized."""
        assert normalize_add_task({"text": "x", "priority": "HIGH"}).priority == "high"

    def test_missing_text_is_rejected(self):
        """Test a task without text gets the corrective reply."""
        with pytest.raises(ValidationError) as exc:
            normalize_add_task({"priority": "high"})
        assert "task details" in exc.value.user_message


class TestNormalizeTaskId:
    """Tests for task id extraction."""

    def test_dict_and_bare_id(self):
        """Test both {"task_id": 5} and a bare 5."""
        assert normalize_task_id({"taskId": "5"}, "Remove task 5") == 5
        assert normalize_task_id(7, "Remove task 5") == 7

    def test_missing_id_mentions_usage(self):
        """Test the usage example is shown when the id is missing."""
        with pytest.raises(ValidationError, match="Remove task 5"):
            normalize_task_id({}, "Remove task 5")


class TestNormalizeListTasks:
    """Tests for list_tasks parameters."""

    def test_defaults(self):
        """Test no parameters means every task."""
        params = normalize_list_tasks(None)
        assert params.period == "all"
        assert params.filters == {}

    def test_filter_and_value(self):
        """Test the filter/value pair form."""
        params = normalize_list_tasks({"period": "week", "filter": "Status", "value": "Done"})
        assert params.period == "weekly"
        assert params.filters == {"status": "done"}

    def test_top_level_filters(self):
        """Test bare field filters without the wrapper."""
        params = normalize_list_tasks({"assignee": "Dana"})
        assert params.filters == {"assign_to": "Dana"}

    def test_unknown_filter_is_rejected(self):
        """Test filtering by an unknown field is refused."""
        with pytest.raises(ValidationError):
            normalize_list_tasks({"filter": "salary", "value": "high"})


class TestNormalizePeople:
    """Tests for add_people parameters."""

    def test_list_of_people_with_aliases(self):
        """Test person aliases map onto columns."""
        people = normalize_people(
            [{"name": "Sarah", "organization": "Google", "LinkedIn": "in/sarah", "newsletter": "yes"}]
        )
        assert people == [
            {
                "full_name": "Sarah",
                "company": "Google",
                "linkedin_profile": "in/sarah",
                "newsletter": True,
            }
        ]

    def test_single_person_dict(self):
        """Test one person object is treated as a batch of one."""
        assert normalize_people({"full_name": "Sarah"}) == [{"full_name": "Sarah"}]

    def test_unknown_keys_dropped(self):
        """Test keys with no column are ignored."""
        assert normalize_people([{"full_name": "Sarah", "shoe_size": 42}]) == [
            {"full_name": "Sarah"}
        ]

    def test_non_list_is_rejected(self):
        """Test a bare string is not a person batch."""
        with pytest.raises(ValidationError):
            normalize_people("Sarah from Google")


class TestNormalizeUpdateTask:
    """Tests for update_task parameters."""

    def test_valid_update(self):
        """Test a complete update with a field alias."""
        params = normalize_update_task({"task_id": "5", "field": "assignee", "new_value": "Dana"})
        assert params.task_id == 5
        assert params.field == "assign_to"
        assert params.new_value == "Dana"

    def test_status_value_is_lowercased(self):
        """Test status values are normalized."""
        params = normalize_update_task({"task_id": 5, "field": "status", "value": "DONE"})
        assert params.new_value == "done"

    def test_missing_parts_rejected(self):
        """Test id, field and value are all required."""
        with pytest.raises(ValidationError):
            normalize_update_task({"task_id": 5, "field": "status"})

    def test_unknown_field_rejected(self):
        """Test updating a column tasks don't have."""
        with pytest.raises(ValidationError, match="no 'owner_email' field"):
            normalize_update_task({"task_id": 5, "field": "owner_email", "new_value": "x"})


class TestNormalizeUpdatePerson:
    """Tests for update_person parameters."""

    def test_with_person_id_and_updates(self):
        """Test the canonical shape."""
        params = normalize_update_person({"person_id": "#3", "updates": {"Email": "d@acme.io"}})
        assert params.person_id == 3
        assert params.updates == {"email": "d@acme.io"}

    def test_flat_fields_without_id(self):
        """Test fields next to person_id and a missing id."""
        params = normalize_update_person({"company": "Acme", "status": "portfolio"})
        assert params.person_id is None
        assert params.updates == {"company": "Acme", "status": "portfolio"}

    def test_no_recognizable_updates_rejected(self):
        """Test nothing to change is a validation error."""
        with pytest.raises(ValidationError):
            normalize_update_person({"person_id": 3, "updates": {"mood": "happy"}})
