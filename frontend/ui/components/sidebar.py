"""Sidebar component for the portal.

Navigation for devotee pages and, once an admin has signed in, the
admin panel. The backend status line is checked on every rerun.
"""

import logging

import streamlit as st

from frontend.config.settings import config
from frontend.services import get_api_client
from frontend.utils import (
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
)

logger = logging.getLogger(__name__)

PUBLIC_NAV = [
    (VIEW_HOME, "Home"),
    (VIEW_ANNADANAM, "Annadanam"),
    (VIEW_PASS, "My Pass"),
    (VIEW_CONTACT, "Contact Us"),
    (VIEW_CHAT, "Ask the Assistant"),
]

ADMIN_NAV = [
    (VIEW_ADMIN_ANNADANAM, "Annadanam Bookings"),
    (VIEW_ADMIN_BOOKINGS, "Pooja & Volunteers"),
    (VIEW_ADMIN_DONATIONS, "Donations"),
    (VIEW_ADMIN_CONTACTS, "Contact Messages"),
    (VIEW_ADMIN_BLOCKED, "Blocked Users"),
    (VIEW_ADMIN_EXPORT, "Export Data"),
]


def _nav_button(view: str, label: str) -> None:
    current = SessionState.get_current_view()
    if st.button(
        label,
        key=f"nav_{view}",
        use_container_width=True,
        type="primary" if current == view else "secondary",
    ):
        SessionState.set_view(view)
        st.rerun()


def render_sidebar() -> None:
    """Render the sidebar with navigation and backend status."""
    with st.sidebar:
        st.markdown(f"## {config.APP_ICON} {config.APP_NAME}")
        st.caption("Swamiye Saranam Ayyappa")

        st.divider()

        nav = list(PUBLIC_NAV)
        if config.VOICE_ENABLED:
            nav.append((VIEW_VOICE, "Voice Assistant"))
        for view, label in nav:
            _nav_button(view, label)

        st.divider()

        render_admin_section()

        st.divider()

        render_backend_status()


def render_admin_section() -> None:
    """Admin navigation, or the sign-in link."""
    if SessionState.is_admin():
        st.markdown("### Admin")
        st.caption(SessionState.get('auth_email'))
        for view, label in ADMIN_NAV:
            _nav_button(view, label)
        if st.button("Sign out", key="nav_sign_out", use_container_width=True):
            SessionState.sign_out()
            st.rerun()
    else:
        _nav_button(VIEW_ADMIN_LOGIN, "Admin sign in")


def render_backend_status() -> None:
    """Render backend health status."""
    if get_api_client().health_check():
        st.caption("🟢 Backend connected")
    else:
        st.caption("🔴 Backend unavailable")
