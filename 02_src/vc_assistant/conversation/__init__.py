"""Conversation module."""

from .state_machine import Command, ConversationStateMachine, Turn, parse_command
from .wizard import ADD_PERSON_STEPS, AddPersonWizard

__all__ = [
    "ADD_PERSON_STEPS",
    "AddPersonWizard",
    "Command",
    "ConversationStateMachine",
    "Turn",
    "parse_command",
]
