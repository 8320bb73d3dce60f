"""Inbound message envelope."""

from dataclasses import dataclass


@dataclass
class InboundMessage:
    """One chat message addressed to the bot."""

    user_id: str
    chat_id: str
    text: str  # already trimmed
    username: str | None = None
    first_name: str | None = None
