"""Admin: contact form messages over a date range."""

import logging
from datetime import date, timedelta

import streamlit as st

from frontend.services import get_api_client
from frontend.utils import SessionState
from frontend.ui.components.tables import load_rows, render_download_controls, render_rows_table

logger = logging.getLogger(__name__)

PAGE = "contacts"

COLUMNS = [
    ("created_at", "Created"),
    ("first_name", "First Name"),
    ("last_name", "Last Name"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("subject", "Subject"),
    ("status", "Status"),
]


def render_admin_contacts_page() -> None:
    """Render the message list; each message body opens in an expander."""
    st.title("Contact Messages")

    col1, col2, col3 = st.columns([1, 1, 1])
    with col1:
        start = st.date_input("From", value=date.today() - timedelta(days=30), key="contacts_start")
    with col2:
        end = st.date_input("To", value=date.today(), key="contacts_end")
    with col3:
        st.write("")
        if st.button("Load", type="primary", use_container_width=True):
            if start > end:
                st.error("From date must be on or before To date")
            else:
                load_rows(
                    PAGE,
                    lambda: get_api_client().list_contacts(SessionState.get_auth_token(), start=start, end=end),
                    start=start,
                    end=end,
                )

    rows = SessionState.get_rows(PAGE)
    if rows is None:
        return
    if not rows:
        st.caption("No messages in this range")
        return

    render_rows_table(rows, COLUMNS)

    for row in rows[:50]:
        sender = " ".join(filter(None, [row.get("first_name"), row.get("last_name")])) or row.get("email")
        with st.expander(f"{row.get('subject') or '(no subject)'} · {sender}"):
            st.write(row.get("message") or "")

    render_download_controls(PAGE, "contacts")
