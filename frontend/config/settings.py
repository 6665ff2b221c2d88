"""
Samithi portal frontend configuration.

Frozen dataclass for immutable configuration with environment overrides.
Organisation details, season dates and UI limits are defined here.

Environment variables can override defaults (read at module import time):
- API_BASE_URL: Backend API URL
- API_TIMEOUT_SECONDS: Override API timeout
- CHAT_TIMEOUT_SECONDS: Read timeout for the streamed chat
- APP_VERSION: Override version string
- SITE_URL: Public site used in pass links
"""

import os
from dataclasses import dataclass, field
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()


def _get_int_env(name: str, default: int) -> int:
    """Get integer environment variable or return default."""
    val = os.getenv(name)
    if val is not None:
        try:
            return int(val)
        except ValueError:
            pass
    return default


def _get_str_env(name: str, default: str) -> str:
    """Get string environment variable or return default."""
    return os.getenv(name, default)


def _get_bool_env(name: str, default: bool) -> bool:
    """Get boolean environment variable or return default."""
    val = os.getenv(name)
    if val is not None:
        return val.lower() in ('true', '1', 'yes')
    return default


@dataclass(frozen=True)
class SamithiConfig:
    """Immutable portal configuration.

    frozen=True ensures config values cannot be accidentally modified.
    Environment variables are read at module import time.
    """

    # Application
    APP_NAME: str = "Sabari Sastha Seva Samithi"
    APP_ICON: str = "🙏"
    APP_VERSION: str = field(
        default_factory=lambda: _get_str_env('APP_VERSION', "1.4.0")
    )
    SITE_URL: str = field(
        default_factory=lambda: _get_str_env('SITE_URL', "https://sabarisastha.org")
    )

    # Backend API
    API_BASE_URL: str = field(
        default_factory=lambda: _get_str_env('API_BASE_URL', 'http://localhost:8000')
    )
    API_TIMEOUT_SECONDS: int = field(
        default_factory=lambda: _get_int_env('API_TIMEOUT_SECONDS', 30)
    )
    CHAT_TIMEOUT_SECONDS: int = field(
        default_factory=lambda: _get_int_env('CHAT_TIMEOUT_SECONDS', 90)
    )
    MAX_RETRY_ATTEMPTS: int = 3

    # Organisation contact
    CONTACT_EMAIL: str = "sasthasevasamithi@gmail.com"
    CONTACT_PHONE: str = "+91-9866007840"
    CONTACT_ADDRESS: Tuple[str, ...] = (
        "Sree Sabari Sastha Seva Samithi",
        "Miyapur, Hyderabad",
        "Telangana, India",
    )

    # Annadanam season (month, day)
    SEASON_START: Tuple[int, int] = (11, 5)
    SEASON_END: Tuple[int, int] = (1, 7)

    # Blocking policy (enforced by the remote backend, shown in the admin panel)
    BLOCK_CONSECUTIVE_MISSES: int = 2
    BLOCK_DAYS: int = 7
    BLOCK_ENFORCED_FROM: str = "November 15, 2025"

    # Chat
    CHAT_HISTORY_TURNS: int = 10
    CHAT_MAX_MESSAGE_LENGTH: int = 2000

    # Voice
    VOICE_ENABLED: bool = field(
        default_factory=lambda: _get_bool_env('VOICE_ENABLED', True)
    )
    TTS_LANGUAGE: str = "en"
    TTS_TLD: str = "co.in"
    VOICE_TICK_SECONDS: float = 0.5

    # UI settings
    DEFAULT_CHART_HEIGHT: int = 360
    TABLE_HEIGHT: int = 480


# Global immutable config instance
config = SamithiConfig()

# Apology shown in place of an assistant reply when the chat fails
CHAT_APOLOGY = "Sorry, I'm having trouble connecting right now. Please try again."

# Quick questions offered under the chat box
SUGGESTED_QUESTIONS = [
    "How do I book Annadanam?",
    "What are the Annadanam timings?",
    "What should I carry for Sabarimala Yatra?",
    "What happens if I miss my booking?",
]
