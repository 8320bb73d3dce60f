"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_DB_PATH = DATA_DIR / "vc_assistant.db"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DATA_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)


PathLike = Union[str, Path]

DEFAULT_LLM_MODEL = "claude-3-5-sonnet-20241022"


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path."""
    if not env_value:
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


@dataclass(frozen=True)
class Settings:
    """Runtime settings injected into the Application at startup."""

    auth_password: str = ""
    telegram_bot_token: str = ""
    webhook_secret: str = ""
    anthropic_api_key: str = ""
    llm_model: str = DEFAULT_LLM_MODEL
    llm_timeout: float = 20.0
    http_timeout: float = 10.0
    db_path: PathLike = DEFAULT_DB_PATH
    fallback_task_owner: str = "bot"
    search_prefix: str = "."
    result_limit: int = 10

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (call load_dotenv first)."""
        return cls(
            auth_password=os.getenv("AUTH_PASSWORD", ""),
            telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN", ""),
            webhook_secret=os.getenv("WEBHOOK_SECRET", ""),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
            llm_model=os.getenv("LLM_MODEL", DEFAULT_LLM_MODEL),
            llm_timeout=float(os.getenv("LLM_TIMEOUT", "20")),
            http_timeout=float(os.getenv("HTTP_TIMEOUT", "10")),
            db_path=resolve_db_path(os.getenv("DATABASE_URL")),
            fallback_task_owner=os.getenv("FALLBACK_TASK_OWNER", "bot"),
            search_prefix=os.getenv("SEARCH_PREFIX", ".")[:1] or ".",
        )
