"""Admin: every section in one JSON or CSV file."""

import logging
from datetime import date, timedelta

import streamlit as st

from frontend.services import get_api_client
from frontend.utils import SessionState

logger = logging.getLogger(__name__)

FORMATS = {"json": "JSON", "csv": "CSV"}


def render_admin_export_page() -> None:
    """Render the range picker and the bulk export download."""
    st.title("Export Data")
    st.caption("Annadanam, Pooja, volunteer bookings, donations, contact messages and profiles")

    col1, col2, col3 = st.columns(3)
    with col1:
        start = st.date_input("From", value=date.today() - timedelta(days=30), key="export_start")
    with col2:
        end = st.date_input("To", value=date.today(), key="export_end")
    with col3:
        fmt = st.selectbox("Format", list(FORMATS), format_func=FORMATS.get, key="export_fmt")

    if st.button("Prepare export", type="primary"):
        if start > end:
            st.error("From date must be on or before To date")
            SessionState.clear('bulk_export')
        else:
            with st.spinner("Collecting every section..."):
                result = get_api_client().bulk_export(SessionState.get_auth_token(), fmt, start=start, end=end)
            if result.success:
                SessionState.set('bulk_export', result)
            else:
                st.error(result.error or "Export failed")
                SessionState.clear('bulk_export')

    prepared = SessionState.get('bulk_export')
    if prepared is not None:
        st.download_button(
            f"Download {prepared.filename}",
            data=prepared.content,
            file_name=prepared.filename,
            mime=prepared.mime_type,
            use_container_width=True,
        )
