"""Workshop configuration loaded from environment variables and .env."""
import os
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Optional

# Event branding
ID_PREFIX = "BINDS"
WORKSHOP_NAME = "BINDS – Chapter 2"
EVENT_TITLE = "Bridging Nature with Data Science – Chapter 2"
EVENT_DATES = "29-31 January 2026"
EVENT_VENUE = "Azim Premji University, Bhopal"
FILE_PREFIX = "BINDS"

DEFAULT_DATA_FILE = "data/workshop.json"
DEFAULT_LOGO_URL = "https://raw.githubusercontent.com/narendra-goswami/BINDS/main/binds-logo.png"

CONFIG_KEYS = {
    "WORKSHOP_DATA_FILE",
    "WEBHOOK_URL",
    "WEBHOOK_ENABLED",
    "WEBHOOK_TIMEOUT",
    "SYNC_DELAY_SECONDS",
    "CARD_LOGO_URL",
    "LOG_LEVEL",
}

_ENV_LOADED = False
_ENV_LOCK = Lock()


@dataclass
class WorkshopConfig:
    """Runtime settings for the registry."""

    data_file: str = DEFAULT_DATA_FILE
    webhook_url: str = ""
    webhook_enabled: bool = False
    webhook_timeout: float = 30.0
    sync_delay: float = 0.1
    logo_url: Optional[str] = DEFAULT_LOGO_URL
    log_level: str = "INFO"


def _load_env_file(env_path: Path = Path(".env")) -> None:
    """Load workshop settings from .env file if present."""
    global _ENV_LOADED

    if _ENV_LOADED:
        return

    with _ENV_LOCK:
        if _ENV_LOADED:
            return

        if env_path.exists():
            for raw_line in env_path.read_text(encoding="utf-8").splitlines():
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue

                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"\'')

                if key in CONFIG_KEYS and key not in os.environ:
                    os.environ[key] = value

        _ENV_LOADED = True


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_float(value: Optional[str], default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


def load_config() -> WorkshopConfig:
    """
    Build configuration from the environment.

    Returns:
        WorkshopConfig populated from environment variables

    Behavior:
        - Reads .env once; values already in the environment win
        - WEBHOOK_ENABLED defaults to true when WEBHOOK_URL is set
        - An empty CARD_LOGO_URL disables the card logo
    """
    _load_env_file()

    webhook_url = os.getenv("WEBHOOK_URL", "").strip()
    enabled_raw = os.getenv("WEBHOOK_ENABLED")
    webhook_enabled = bool(webhook_url) if enabled_raw is None else _parse_bool(enabled_raw)

    logo_url = os.getenv("CARD_LOGO_URL", DEFAULT_LOGO_URL).strip() or None

    return WorkshopConfig(
        data_file=os.getenv("WORKSHOP_DATA_FILE", DEFAULT_DATA_FILE),
        webhook_url=webhook_url,
        webhook_enabled=webhook_enabled,
        webhook_timeout=_parse_float(os.getenv("WEBHOOK_TIMEOUT"), 30.0),
        sync_delay=_parse_float(os.getenv("SYNC_DELAY_SECONDS"), 0.1),
        logo_url=logo_url,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
