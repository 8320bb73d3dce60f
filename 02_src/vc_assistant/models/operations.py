"""Classifier output models."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Union


class OperationKind(IntEnum):
    """The nine operations the function router can select.

    Values are the numbers the router model answers with.
    """

    SEARCH = 1
    ADD_TASK = 2
    REMOVE_TASK = 3
    ADD_TASK_ALERT = 4
    LIST_TASKS = 5
    ADD_PEOPLE = 6
    LIST_MEETINGS = 7
    UPDATE_TASK = 8
    UPDATE_PERSON = 9


@dataclass
class RoutedOperation:
    """A recognised operation with its raw (not yet normalized) parameters."""

    kind: OperationKind
    parameters: Any = None


@dataclass
class UnrecognizedOperation:
    """Router output that could not be decoded; handled as a search."""

    raw_text: str
    reason: str


ClassifierResult = Union[RoutedOperation, UnrecognizedOperation]
