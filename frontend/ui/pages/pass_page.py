"""Annadanam pass page.

Opened from the pass link (``?t=<token>`` or ``?token=<token>``). Admins
at the counter can confirm attendance from the same page.
"""

import logging
from typing import Optional

import streamlit as st

from frontend.services import get_api_client
from frontend.utils import SessionState

logger = logging.getLogger(__name__)


def _token_from_query() -> Optional[str]:
    params = st.query_params
    token = params.get("t") or params.get("token")
    return token.strip() if token else None


def render_pass_page() -> None:
    """Render the pass lookup and, for admins, the attendance button."""
    st.title("Annadanam Pass")

    token = st.text_input(
        "Pass token",
        value=_token_from_query() or "",
        placeholder="Paste the token from your pass link",
    )

    # Links open straight onto the pass; look each new token up once
    if st.button("Show pass", type="primary") or (token and token != SessionState.get('pass_token')):
        SessionState.set('pass_token', token)
        _lookup(token)

    booking = SessionState.get('pass_booking')
    if booking:
        _render_booking(booking, token)


def _lookup(token: str) -> None:
    if not token or not token.strip():
        st.error("Missing QR token")
        SessionState.clear_mode('pass')
        return

    result = get_api_client().lookup_pass(token.strip())
    if result.success:
        SessionState.set('pass_booking', result.data)
    else:
        st.error(result.error or "Invalid or expired pass")
        SessionState.clear_mode('pass')


def _render_booking(data: dict, token: str) -> None:
    booking = data.get("booking", {})
    attended = data.get("attended", False)

    with st.container(border=True):
        st.markdown(f"### {booking.get('name') or 'Devotee'}")
        col1, col2, col3 = st.columns(3)
        col1.metric("Date", booking.get("date") or "-")
        col2.metric("Session", booking.get("session") or "-")
        col3.metric("Devotees", booking.get("qty") or 1)

        if attended:
            st.success("Attendance confirmed")
        else:
            st.info("Show this pass at the Annadanam counter")

    if SessionState.is_admin() and not attended:
        if st.button("Confirm attendance", type="primary"):
            result = get_api_client().mark_attended(SessionState.get_auth_token(), token.strip())
            if result.success:
                SessionState.set('pass_booking', result.data)
                st.toast("Attendance confirmed")
                st.rerun()
            else:
                st.error(result.error or "Could not confirm")
