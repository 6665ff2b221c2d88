"""Admin: Pooja and volunteer bookings over a date range."""

import logging
from datetime import date, timedelta

import streamlit as st

from frontend.services import get_api_client
from frontend.utils import SessionState
from frontend.ui.components.tables import load_rows, render_download_controls, render_rows_table

logger = logging.getLogger(__name__)

COLUMNS = [
    ("date", "Date"),
    ("session", "Session"),
    ("name", "Name"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("status", "Status"),
    ("created_at", "Created"),
]

# (page key, API kind, tab title, client method name)
SECTIONS = [
    ("pooja", "pooja", "Pooja", "list_pooja"),
    ("volunteers", "volunteers", "Volunteers", "list_volunteers"),
]


def render_admin_bookings_page() -> None:
    """Render a tab per booking type sharing one date range."""
    st.title("Pooja & Volunteer Bookings")

    col1, col2 = st.columns(2)
    with col1:
        start = st.date_input("From", value=date.today() - timedelta(days=7), key="bookings_start")
    with col2:
        end = st.date_input("To", value=date.today() + timedelta(days=30), key="bookings_end")

    if start > end:
        st.error("From date must be on or before To date")
        return

    tabs = st.tabs([title for _, _, title, _ in SECTIONS])
    for tab, (page, kind, title, method) in zip(tabs, SECTIONS):
        with tab:
            _render_section(page, kind, title, method, start, end)


def _render_section(page: str, kind: str, title: str, method: str, start: date, end: date) -> None:
    if st.button(f"Load {title.lower()} bookings", key=f"{page}_load", type="primary"):
        client = get_api_client()
        load_rows(
            page,
            lambda: getattr(client, method)(SessionState.get_auth_token(), start=start, end=end),
            start=start,
            end=end,
        )

    rows = SessionState.get_rows(page)
    if rows is None:
        return
    if not rows:
        st.caption("No bookings in this range")
        return

    st.caption(f"{len(rows)} booking(s)")
    render_rows_table(rows, COLUMNS)
    render_download_controls(page, kind)
