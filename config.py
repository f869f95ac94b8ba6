# config.py
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root
env_path = Path(__file__).resolve().parent / ".env"
load_dotenv(dotenv_path=env_path)


def get_str(key: str, default: str = "") -> str:
    return os.getenv(key, default)


def get_bool(key: str, default: str = "false") -> bool:
    return os.getenv(key, default).lower() in ("true", "1", "yes")


def get_int(key: str, default: int = 0) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def get_float(key: str, default: float = 0.0) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def get_int_list(key: str) -> list:
    raw = os.getenv(key, "")
    return [int(part) for part in raw.split(",") if part.strip().isdigit()]


# Credentials
DISCORD_TOKEN = get_str("DISCORD_TOKEN")
TMDB_API_KEY = get_str("TMDB_API_KEY")

# Guild IDs for fast command sync while testing (comma-separated)
GUILD_IDS_TEST = get_int_list("GUILD_IDS_TEST")

BOT_VERSION = get_str("BOT_VERSION", "1.0.0")
DEBUG = get_bool("DEBUG")

# Logging
LOG_LEVEL = getattr(logging, get_str("LOG_LEVEL", "INFO").upper(), logging.INFO)
LOGS_DIR = get_str("LOGS_DIR", "logs")
LOG_FILE = get_str("LOG_FILE", "cinemate.log")
ENABLE_FILE_LOGGING = get_bool("ENABLE_FILE_LOGGING", "true")
ENABLE_CONSOLE_LOGGING = get_bool("ENABLE_CONSOLE_LOGGING", "true")

# Search
AUTOCOMPLETE_DEBOUNCE_SECONDS = get_float("AUTOCOMPLETE_DEBOUNCE_SECONDS", 0.3)

# Startup
MAX_STARTUP_RETRIES = get_int("MAX_STARTUP_RETRIES", 3)
STARTUP_RETRY_DELAY = get_int("STARTUP_RETRY_DELAY", 5)
