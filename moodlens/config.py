"""
Runtime settings loaded from the environment (and a local .env file).

Engine thresholds are not settings: they live on the *Config classes
next to the code that uses them.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

DEFAULT_DATABASE = "moodlens"
DEFAULT_SUMMARY_TIMEOUT = 5.0
DEFAULT_INSIGHT_LIMIT = 5
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_DIR = "logs"


@dataclass
class Settings:
    """Process-wide settings. Secrets are optional until a client needs them."""

    gemini_api_key: Optional[str] = None
    mongodb_uri: Optional[str] = None
    database: str = DEFAULT_DATABASE
    summary_timeout: float = DEFAULT_SUMMARY_TIMEOUT
    insight_limit: int = DEFAULT_INSIGHT_LIMIT
    log_level: str = DEFAULT_LOG_LEVEL
    log_dir: str = DEFAULT_LOG_DIR


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}, using default {default}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}, using default {default}")
        return default


def load_settings(dotenv: bool = True) -> Settings:
    """
    Reads settings from environment variables.

    Args:
        dotenv: Also load a .env file from the working directory first.
    """
    if dotenv:
        load_dotenv()

    return Settings(
        gemini_api_key=os.environ.get("GEMINI_API_KEY") or None,
        mongodb_uri=os.environ.get("MONGODB_URI") or None,
        database=os.environ.get("MOODLENS_DATABASE") or DEFAULT_DATABASE,
        summary_timeout=_env_float("MOODLENS_SUMMARY_TIMEOUT", DEFAULT_SUMMARY_TIMEOUT),
        insight_limit=_env_int("MOODLENS_INSIGHT_LIMIT", DEFAULT_INSIGHT_LIMIT),
        log_level=(os.environ.get("MOODLENS_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        log_dir=os.environ.get("MOODLENS_LOG_DIR") or DEFAULT_LOG_DIR,
    )
