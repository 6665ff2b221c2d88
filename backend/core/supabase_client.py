"""Supabase client factory.

The service-role client is shared by every request; it only ever runs
remote procedures and reads, never signs a user in (signing in replaces
the client's auth header). End-user sign-in goes through a short-lived
anon-key client instead.
"""
import logging
import threading
from typing import Optional

from supabase import Client, create_client

from backend.config import settings
from backend.core.errors import BackendNotConfiguredError

logger = logging.getLogger(__name__)

_service_client: Optional[Client] = None
_service_client_lock = threading.Lock()


def get_service_client() -> Client:
    """Get the shared service-role client (thread-safe lazy init)."""
    global _service_client
    if _service_client is None:
        with _service_client_lock:
            if _service_client is None:
                if not settings.supabase_configured:
                    raise BackendNotConfiguredError(
                        "SUPABASE_URL and SUPABASE_SERVICE_KEY must be set"
                    )
                _service_client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
                logger.info(f"Supabase service client created for {settings.SUPABASE_URL}")
    return _service_client


def create_anon_client() -> Client:
    """Create a throwaway anon-key client for password sign-in."""
    key = settings.SUPABASE_ANON_KEY or settings.SUPABASE_SERVICE_KEY
    if not settings.SUPABASE_URL or not key:
        raise BackendNotConfiguredError("SUPABASE_URL and SUPABASE_ANON_KEY must be set")
    return create_client(settings.SUPABASE_URL, key)


def reset_service_client() -> None:
    """Drop the cached client (useful for testing)."""
    global _service_client
    with _service_client_lock:
        _service_client = None
