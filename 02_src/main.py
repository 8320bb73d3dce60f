"""Main entry point for VC Assistant."""

import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from vc_assistant.api import create_fastapi_app
from vc_assistant.app import Application
from vc_assistant.config import Settings
from vc_assistant.logging_config import setup_logging


def main():
    """Run the application."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    setup_logging()

    api_host = os.getenv("API_HOST", "localhost")
    api_port = int(os.getenv("API_PORT", "8000"))

    app = create_fastapi_app(Application(Settings.from_env()))

    uvicorn.run(
        app,
        host=api_host,
        port=api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
