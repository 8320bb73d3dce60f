"""Message channel module."""

from .telegram import BOT_COMMANDS, IMessageChannel, TelegramChannel

__all__ = ["BOT_COMMANDS", "IMessageChannel", "TelegramChannel"]
