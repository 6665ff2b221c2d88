"""Admin: Annadanam bookings for one day, filtered by session band or label.

Completed sessions (end time already passed) are struck through.
"""

import logging
from datetime import date

import streamlit as st

from frontend.services import get_api_client
from frontend.utils import SessionState
from frontend.ui.components.charts import create_session_bar_chart
from frontend.ui.components.tables import (
    load_rows,
    render_download_controls,
    render_rows_table,
    summary_metrics,
)

logger = logging.getLogger(__name__)

PAGE = "annadanam"

COLUMNS = [
    ("session", "Session"),
    ("name", "Name"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("qty", "Qty"),
    ("status", "Status"),
    ("attended_at", "Attended"),
]


def render_admin_annadanam_page() -> None:
    """Render the day picker, session filter, table, chart and downloads."""
    st.title("Annadanam Bookings")

    catalog = get_api_client().session_catalog()
    if catalog is None:
        st.error("Cannot load the session list from the server")
        return
    filter_labels = dict(catalog.filter_options)

    col1, col2, col3 = st.columns([1, 2, 1])
    with col1:
        booking_date = st.date_input("Date", value=date.today(), key="annadanam_date")
    with col2:
        session = st.selectbox(
            "Session",
            [value for value, _ in catalog.filter_options],
            format_func=lambda value: filter_labels.get(value, value),
            key="annadanam_session",
        )
    with col3:
        st.write("")
        if st.button("Load", type="primary", use_container_width=True):
            load_rows(
                PAGE,
                lambda: get_api_client().list_annadanam(
                    SessionState.get_auth_token(), booking_date=booking_date, session=session,
                ),
                booking_date=booking_date,
                session=session,
            )

    rows = SessionState.get_rows(PAGE)
    if rows is None:
        st.info("Pick a date and session, then Load")
        return
    if not rows:
        st.caption("No bookings for this selection")
        return

    summary_metrics({
        "Bookings": len(rows),
        "Devotees": sum(_qty(row) for row in rows),
        "Completed": sum(1 for row in rows if row.get("completed")),
        "Attended": sum(1 for row in rows if row.get("attended_at")),
    })

    render_rows_table(rows, COLUMNS, strike_completed=True)

    loaded_date = SessionState.get_row_filters(PAGE).get("booking_date")
    title = f"Devotees per session on {loaded_date.isoformat()}" if loaded_date else "Devotees per session"
    fig = create_session_bar_chart(rows, title=title, session_order=catalog.all_sessions)
    if fig is not None:
        st.plotly_chart(fig, use_container_width=True)

    st.markdown("#### Download")
    render_download_controls(PAGE, "annadanam")


def _qty(row: dict) -> int:
    try:
        return int(row.get("qty") or 1)
    except (TypeError, ValueError):
        return 1
