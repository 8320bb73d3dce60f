"""Logging for the assistant: one JSON object per line, bot token scrubbed.

Bot API URLs embed the token (``/bot<id>:<secret>/sendMessage``), and httpx
puts the URL into its exception messages, so every record passes through
:class:`BotTokenFilter` before it is written anywhere.
"""

import json
import logging
import logging.config
import os
import re
from datetime import datetime, timezone
from pathlib import Path

from .config import DEFAULT_LOG_PATH

BOT_TOKEN_RE = re.compile(r"bot\d+:[A-Za-z0-9_-]+")
REDACTED = "bot<redacted>"

# Attributes passed through ``extra=`` that get their own JSON key
ROUTING_FIELDS = ("user_id", "chat_id", "state")


def redact(text: str) -> str:
    return BOT_TOKEN_RE.sub(REDACTED, text)


class BotTokenFilter(logging.Filter):
    """Strip Telegram bot tokens from the message and any attached traceback."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if BOT_TOKEN_RE.search(message):
            record.msg = redact(message)
            record.args = None
        if record.exc_info:
            # Render once here so the formatter sees the cleaned text
            record.exc_text = redact(logging.Formatter().formatException(record.exc_info))
            record.exc_info = None
        elif record.exc_text:
            record.exc_text = redact(record.exc_text)
        return True


class JSONFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        for key in ROUTING_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        elif record.exc_text:
            log_data["exception"] = record.exc_text

        if hasattr(record, "context"):
            log_data["context"] = record.context

        return json.dumps(log_data, default=str, ensure_ascii=False)


def build_logging_config(log_level: str, log_file: str | None) -> dict:
    """dictConfig for console output, plus a rotating file when ``log_file`` is set."""
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "filters": ["bot_token"],
            "stream": "ext://sys.stdout",
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "formatter": "json",
            "filters": ["bot_token"],
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "bot_token": {"()": "vc_assistant.logging_config.BotTokenFilter"},
        },
        "formatters": {
            "json": {"()": "vc_assistant.logging_config.JSONFormatter"},
        },
        "handlers": handlers,
        "loggers": {
            # One line per Bot API / Anthropic request is noise at INFO
            "httpx": {"level": "WARNING"},
            "anthropic": {"level": "WARNING"},
        },
        "root": {
            "level": log_level.upper(),
            "handlers": list(handlers),
        },
    }


def setup_logging(log_level: str | None = None, log_file: str | None = None) -> None:
    """Configure logging from arguments, then LOG_LEVEL / LOG_FILE.

    ``LOG_FILE=-`` disables the file handler (containers that collect stdout).
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO")
    if log_file is None:
        log_file = os.getenv("LOG_FILE") or str(DEFAULT_LOG_PATH)
    if log_file == "-":
        log_file = None

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(log_level, log_file))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
