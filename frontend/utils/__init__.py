"""Utilities for the portal frontend."""
from frontend.utils.session_state import (
    SessionState,
    VIEW_HOME,
    VIEW_ANNADANAM,
    VIEW_PASS,
    VIEW_CONTACT,
    VIEW_CHAT,
    VIEW_VOICE,
    VIEW_ADMIN_LOGIN,
    VIEW_ADMIN_ANNADANAM,
    VIEW_ADMIN_BOOKINGS,
    VIEW_ADMIN_DONATIONS,
    VIEW_ADMIN_CONTACTS,
    VIEW_ADMIN_BLOCKED,
    VIEW_ADMIN_EXPORT,
    ADMIN_VIEWS,
)
from frontend.utils.exceptions import (
    PortalError,
    APIError,
    RateLimitError,
    BackendUnavailableError,
)

__all__ = [
    # Session state
    "SessionState",
    "VIEW_HOME",
    "VIEW_ANNADANAM",
    "VIEW_PASS",
    "VIEW_CONTACT",
    "VIEW_CHAT",
    "VIEW_VOICE",
    "VIEW_ADMIN_LOGIN",
    "VIEW_ADMIN_ANNADANAM",
    "VIEW_ADMIN_BOOKINGS",
    "VIEW_ADMIN_DONATIONS",
    "VIEW_ADMIN_CONTACTS",
    "VIEW_ADMIN_BLOCKED",
    "VIEW_ADMIN_EXPORT",
    "ADMIN_VIEWS",
    # Exceptions
    "PortalError",
    "APIError",
    "RateLimitError",
    "BackendUnavailableError",
]
