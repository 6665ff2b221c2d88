"""Session state management for the portal frontend.

This module provides centralized session state management for Streamlit,
with features like:
- Default value initialization
- View management
- Signed-in admin (bearer token) tracking
- Per-page list state that is reset to None on failure
- Chat history
"""

import copy
import logging
import uuid
from typing import Any, Optional, Dict, List, Callable

import streamlit as st

logger = logging.getLogger(__name__)


def _default_factory(value: Any) -> Callable[[], Any]:
    """Create a factory function that returns a deep copy of the value.

    This prevents mutable default values from being shared across sessions.
    """
    if isinstance(value, (list, dict, set)):
        return lambda: copy.deepcopy(value)
    return lambda: value


# View constants
VIEW_HOME = "home"
VIEW_ANNADANAM = "annadanam"
VIEW_PASS = "pass"
VIEW_CONTACT = "contact"
VIEW_CHAT = "chat"
VIEW_VOICE = "voice"
VIEW_ADMIN_LOGIN = "admin_login"
VIEW_ADMIN_ANNADANAM = "admin_annadanam"
VIEW_ADMIN_BOOKINGS = "admin_bookings"
VIEW_ADMIN_DONATIONS = "admin_donations"
VIEW_ADMIN_CONTACTS = "admin_contacts"
VIEW_ADMIN_BLOCKED = "admin_blocked"
VIEW_ADMIN_EXPORT = "admin_export"

ADMIN_VIEWS = (
    VIEW_ADMIN_ANNADANAM,
    VIEW_ADMIN_BOOKINGS,
    VIEW_ADMIN_DONATIONS,
    VIEW_ADMIN_CONTACTS,
    VIEW_ADMIN_BLOCKED,
    VIEW_ADMIN_EXPORT,
)


class SessionState:
    """Centralized session state management for the portal.

    Example:
        >>> from frontend.utils import SessionState
        >>> SessionState.init_defaults()
        >>> SessionState.set_rows('donations', [])
        >>> SessionState.get_rows('donations')
        []
    """

    # Default value factories for session state keys
    _DEFAULT_FACTORIES: Dict[str, Callable[[], Any]] = {
        # Per browser session, sent as X-Session-ID for chat rate limiting
        'session_id': lambda: str(uuid.uuid4()),

        # Navigation state
        'current_view': lambda: VIEW_HOME,

        # Signed-in user
        'auth_token': lambda: None,
        'auth_email': lambda: None,
        'auth_user_id': lambda: None,
        'is_admin': lambda: False,

        # Admin list rows by page key (None = not loaded or failed)
        'rows': _default_factory({}),
        # Filters each page's rows were loaded with; downloads reuse them
        'row_filters': _default_factory({}),

        # Pass page
        'pass_booking': lambda: None,
        'pass_token': lambda: None,

        # Chat
        'chat_messages': _default_factory([]),

        # Blocked users page
        'pending_unblock': lambda: None,
        'blocked_overview': lambda: None,

        # Prepared download files by page key, plus the bulk export
        'downloads': _default_factory({}),
        'bulk_export': lambda: None,

        # Error state
        'last_error': lambda: None,
    }

    # Keys associated with each mode/view
    MODE_KEYS: Dict[str, List[str]] = {
        'auth': ['auth_token', 'auth_email', 'auth_user_id', 'is_admin'],
        'chat': ['chat_messages'],
        'pass': ['pass_booking'],
        'admin': ['rows', 'row_filters', 'pending_unblock', 'blocked_overview', 'downloads', 'bulk_export'],
    }

    @classmethod
    def _get_session_state(cls):
        """Get Streamlit session state (patched in tests)."""
        return st.session_state

    @classmethod
    def init_defaults(cls) -> None:
        """Initialize default session state values.

        Call this at the start of your Streamlit app to ensure
        all expected keys exist with sensible defaults.
        """
        session_state = cls._get_session_state()

        for key, factory in cls._DEFAULT_FACTORIES.items():
            if key not in session_state:
                session_state[key] = factory()
                logger.debug(f"Initialized session state key: {key}")

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """Get a value from session state."""
        session_state = cls._get_session_state()
        return session_state.get(key, default)

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        """Set a value in session state."""
        session_state = cls._get_session_state()
        session_state[key] = value
        logger.debug(f"Set session state: {key} = {type(value).__name__}")

    @classmethod
    def clear(cls, key: str) -> None:
        """Clear a session state key."""
        session_state = cls._get_session_state()
        if key in session_state:
            del session_state[key]
            logger.debug(f"Cleared session state key: {key}")

    @classmethod
    def clear_mode(cls, mode: str) -> None:
        """Clear all state associated with a specific mode."""
        keys = cls.MODE_KEYS.get(mode, [])
        for key in keys:
            cls.clear(key)
        cls.init_defaults()
        logger.debug(f"Cleared session state for mode: {mode}")

    @classmethod
    def has(cls, key: str) -> bool:
        """Check if a key exists in session state."""
        session_state = cls._get_session_state()
        return key in session_state

    # View management helpers
    @classmethod
    def get_current_view(cls) -> str:
        """Get the current view."""
        return cls.get('current_view', VIEW_HOME)

    @classmethod
    def set_view(cls, view: str) -> None:
        """Set the current view.

        Admin views fall back to the sign-in page for non-admins.
        """
        if view in ADMIN_VIEWS and not cls.is_admin():
            view = VIEW_ADMIN_LOGIN
        cls.set('current_view', view)

    @classmethod
    def navigate_to_home(cls) -> None:
        cls.set_view(VIEW_HOME)

    # Auth helpers
    @classmethod
    def sign_in(cls, token: str, email: str, user_id: str, is_admin: bool) -> None:
        """Remember the signed-in user for this browser session."""
        cls.set('auth_token', token)
        cls.set('auth_email', email)
        cls.set('auth_user_id', user_id)
        cls.set('is_admin', bool(is_admin))
        logger.info(f"Signed in {email} (admin={is_admin})")

    @classmethod
    def sign_out(cls) -> None:
        """Forget the user and every admin list loaded with their token."""
        cls.clear_mode('auth')
        cls.clear_mode('admin')
        cls.set_view(VIEW_HOME)

    @classmethod
    def get_auth_token(cls) -> Optional[str]:
        return cls.get('auth_token')

    @classmethod
    def is_admin(cls) -> bool:
        return bool(cls.get('auth_token')) and bool(cls.get('is_admin'))

    # List state helpers
    @classmethod
    def get_rows(cls, page: str) -> Optional[List[dict]]:
        """Rows loaded for a page, or None if not loaded (or the load failed)."""
        return cls.get('rows', {}).get(page)

    @classmethod
    def set_rows(cls, page: str, rows: Optional[List[dict]], filters: Optional[Dict[str, Any]] = None) -> None:
        """Store a page's rows together with the filters that produced them."""
        all_rows = cls.get('rows', {})
        all_rows[page] = rows
        cls.set('rows', all_rows)

        all_filters = cls.get('row_filters', {})
        if rows is None:
            all_filters.pop(page, None)
        else:
            all_filters[page] = dict(filters or {})
        cls.set('row_filters', all_filters)

    @classmethod
    def get_row_filters(cls, page: str) -> Dict[str, Any]:
        return dict(cls.get('row_filters', {}).get(page) or {})

    @classmethod
    def reset_rows(cls, page: str) -> None:
        """Drop a page's rows after a failed load."""
        cls.set_rows(page, None)

    @classmethod
    def get_download(cls, page: str) -> Any:
        return cls.get('downloads', {}).get(page)

    @classmethod
    def set_download(cls, page: str, prepared: Any) -> None:
        downloads = cls.get('downloads', {})
        if prepared is None:
            downloads.pop(page, None)
        else:
            downloads[page] = prepared
        cls.set('downloads', downloads)

    # Chat helpers
    @classmethod
    def get_chat_messages(cls) -> List[Dict[str, str]]:
        return cls.get('chat_messages', [])

    @classmethod
    def append_chat_message(cls, role: str, content: str) -> None:
        messages = cls.get_chat_messages()
        messages.append({"role": role, "content": content})
        cls.set('chat_messages', messages)

    @classmethod
    def replace_last_chat_message(cls, content: str) -> None:
        """Overwrite the in-progress assistant message."""
        messages = cls.get_chat_messages()
        if messages:
            messages[-1]["content"] = content
            cls.set('chat_messages', messages)

    # Session ID helpers
    @classmethod
    def get_session_id(cls) -> str:
        """Get the unique session ID for this browser session.

        Used only for per-session chat rate limiting on the API.

        Returns:
            Unique session ID string (UUID format)
        """
        session_id = cls.get('session_id')
        if not session_id:
            session_id = str(uuid.uuid4())
            cls.set('session_id', session_id)
            logger.info(f"Generated new session ID: {session_id[:8]}...")
        return session_id
