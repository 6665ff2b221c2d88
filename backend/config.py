"""
Backend configuration with environment variable support.
Simplified for single-container deployment (local, HF Spaces, Streamlit Cloud, etc.)
"""
import os
from pathlib import Path
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Sabari Sastha Seva Samithi Portal"
    APP_VERSION: str = "1.4.0"
    DEBUG: bool = False

    # Server
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    FRONTEND_PORT: int = 8501

    # Remote backend (Supabase)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_KEY: str = ""  # Service role, never sent to the browser
    SUPABASE_ANON_KEY: str = ""  # Used for end-user sign-in
    PROFILE_TABLE: str = "Profile-Table"

    # RPC paging
    RPC_PAGE_LIMIT: int = 500  # Rows per admin list page
    RPC_EXPORT_LIMIT: int = 5000  # Rows per section in the bulk export
    EXPORT_WORKERS: int = 5  # Parallel RPCs for the bulk export

    # Admin access (comma/space/semicolon separated, read per request)
    ADMIN_EMAILS: str = ""

    # Generative AI
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"
    CHAT_HISTORY_LIMIT: int = 10  # Rolling history sent upstream
    CHAT_TIMEOUT: int = 60  # Seconds

    # Rate limiting (chat only)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW: int = 60  # Window in seconds
    RATE_LIMIT_MAX_CHATS: int = 20  # Max chat requests per window
    RATE_LIMIT_MAX_TRANSCRIPTIONS: int = 10  # Max voice transcriptions per window
    MAX_CONCURRENT_SESSIONS: int = 10000

    # Local time for slot completion
    TIMEZONE: str = "Asia/Kolkata"

    # Storage (logs only)
    DATA_DIR: Path = Path("./data")

    # CORS (comma-separated string in .env, parsed to list)
    CORS_ORIGINS: str = "http://localhost:8501,http://localhost:7860"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return not self.DEBUG

    @property
    def supabase_configured(self) -> bool:
        """Check if the remote backend credentials are present."""
        return bool(self.SUPABASE_URL and self.SUPABASE_SERVICE_KEY)

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS string into list."""
        if not self.CORS_ORIGINS:
            return []
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_gemini_api_key() -> str:
    """Read the Gemini key at request time.

    The environment wins over the cached settings so a rotated key is
    picked up without a restart.
    """
    return os.getenv("GEMINI_API_KEY") or get_settings().GEMINI_API_KEY


def get_admin_emails_raw() -> str:
    """Read the admin allowlist at request time."""
    return (
        os.getenv("ADMIN_EMAILS")
        or os.getenv("ADMIN_EMAIL")
        or get_settings().ADMIN_EMAILS
    )


# Convenience exports
settings = get_settings()
