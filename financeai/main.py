"""Main application entry point.

Serves the FinanceAI API on port 8000 with the NiceGUI chat page mounted on
the same server. Environment variables are loaded from .env file.
"""

import logging
import os
import subprocess
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def log_startup_config() -> None:
    """Log the model settings and warn early about a missing API key."""
    from financeai.agent.config import get_agent_config

    config = get_agent_config()
    logger.info(f"Model: {config.model_name} at {config.base_url}")
    logger.info(
        f"Rate-limit retries: {config.max_retries} (base delay {config.base_delay}s)"
    )
    if not config.has_api_key:
        logger.warning(
            "No LLM API key configured; chat replies will report a credential error. "
            "Set LLM_API_KEY or GEMINI_API_KEY in .env"
        )


def run_integrated() -> None:
    """Run FastAPI with NiceGUI mounted on the same server."""
    import uvicorn
    from nicegui import ui

    from financeai.api.app import create_app
    from financeai.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    app = create_app()
    ui.run_with(
        app,
        title="FinanceAI",
        favicon="💰",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "financeai-chat-secret"),
    )

    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Chat UI and API on http://localhost:{port} (docs at /docs)")

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_separate() -> None:
    """Run the API (port 8000) and the NiceGUI page (port 8080) as two processes."""
    api_proc = subprocess.Popen(
        [
            sys.executable,
            "-m",
            "uvicorn",
            "financeai.api.app:app",
            "--host",
            os.getenv("HOST", "0.0.0.0"),
            "--port",
            "8000",
        ]
    )
    ui_proc = subprocess.Popen(
        [sys.executable, "-c", "from financeai.ui.chat_page import main; main()"]
    )

    try:
        api_proc.wait()
    except KeyboardInterrupt:
        logger.info("Shutting down servers...")
    finally:
        for proc in (api_proc, ui_proc):
            proc.terminate()
            proc.wait()


def main() -> None:
    """Application entry point.

    Set RUN_MODE=separate to run the API and the UI on different ports.
    """
    mode = os.getenv("RUN_MODE", "integrated").lower()
    logger.info(f"Starting FinanceAI Chat in {mode} mode")
    log_startup_config()

    if mode == "separate":
        run_separate()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
