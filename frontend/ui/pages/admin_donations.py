"""Admin: donations over a date range."""

import logging
from datetime import date, timedelta

import pandas as pd
import streamlit as st

from frontend.services import get_api_client
from frontend.utils import SessionState
from frontend.ui.components.charts import create_daily_amount_chart
from frontend.ui.components.tables import (
    load_rows,
    render_download_controls,
    render_rows_table,
    summary_metrics,
)

logger = logging.getLogger(__name__)

PAGE = "donations"

COLUMNS = [
    ("created_at", "Created"),
    ("name", "Name"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("amount", "Amount"),
    ("address", "Address"),
    ("status", "Status"),
]


def render_admin_donations_page() -> None:
    """Render the donation list with totals and a per-day chart."""
    st.title("Donations")

    col1, col2, col3 = st.columns([1, 1, 1])
    with col1:
        start = st.date_input("From", value=date.today() - timedelta(days=30), key="donations_start")
    with col2:
        end = st.date_input("To", value=date.today(), key="donations_end")
    with col3:
        st.write("")
        if st.button("Load", type="primary", use_container_width=True):
            if start > end:
                st.error("From date must be on or before To date")
            else:
                load_rows(
                    PAGE,
                    lambda: get_api_client().list_donations(SessionState.get_auth_token(), start=start, end=end),
                    start=start,
                    end=end,
                )

    rows = SessionState.get_rows(PAGE)
    if rows is None:
        return
    if not rows:
        st.caption("No donations in this range")
        return

    amounts = pd.to_numeric(pd.Series([row.get("amount") for row in rows]), errors="coerce").fillna(0)
    summary_metrics({
        "Donations": len(rows),
        "Total (₹)": f"{amounts.sum():,.0f}",
    })

    render_rows_table(rows, COLUMNS)

    fig = create_daily_amount_chart(rows)
    if fig is not None:
        st.plotly_chart(fig, use_container_width=True)

    render_download_controls(PAGE, "donations")
