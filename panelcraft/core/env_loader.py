"""
Environment loading and API key lookup.

The project-root .env is loaded once, before settings are read. Values in
.env replace empty variables inherited from the shell.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PATH = Path(__file__).resolve().parents[2] / ".env"

_env_loaded = False


def ensure_env_loaded() -> bool:
    """Load .env on first call. Returns True only when a file was loaded."""
    global _env_loaded

    if _env_loaded or not ENV_PATH.exists():
        return False

    load_dotenv(ENV_PATH, override=True)
    _env_loaded = True
    return True


def _first_set(*names: str) -> Optional[str]:
    ensure_env_loaded()
    return next((os.environ[name] for name in names if os.getenv(name)), None)


def get_together_api_key() -> Optional[str]:
    """Server-side Together AI key."""
    return _first_set("TOGETHER_API_KEY", "TOGETHER_API_KEY_DEFAULT")


def get_supabase_service_key() -> Optional[str]:
    return _first_set("SUPABASE_SERVICE_KEY", "SUPABASE_SERVICE_ROLE_KEY")


def get_google_vision_api_key() -> Optional[str]:
    return _first_set("GOOGLE_VISION_API_KEY", "GOOGLE_API_KEY")
