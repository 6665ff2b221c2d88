"""Annadanam information page: sessions and the no-show policy."""

import streamlit as st

from frontend.config.settings import config
from frontend.services import get_api_client


def render_annadanam_page() -> None:
    """Render the session timings and booking rules."""
    st.title("Annadanam")
    st.caption("Free meals for Ayyappa devotees during the season")

    catalog = get_api_client().session_catalog()
    if catalog is None:
        st.warning("Session timings are unavailable right now. Please try again shortly.")
    else:
        col1, col2 = st.columns(2)
        with col1:
            st.markdown("#### Afternoon (1:00 PM to 3:00 PM)")
            for label in catalog.afternoon:
                st.markdown(f"- {label}")
        with col2:
            st.markdown("#### Evening (8:00 PM to 10:00 PM)")
            for label in catalog.evening:
                st.markdown(f"- {label}")

    st.divider()

    st.markdown("#### Booking rules")
    st.markdown(
        f"""
- Each booking is for one session on one day; show your pass at the counter.
- Cancel in advance if you cannot come so the slot goes to another devotee.
- Missing {config.BLOCK_CONSECUTIVE_MISSES} consecutive bookings without attending blocks
  new bookings for {config.BLOCK_DAYS} days (from {config.BLOCK_ENFORCED_FROM}).
"""
    )
    st.info(f"For help with a booking write to {config.CONTACT_EMAIL} or call {config.CONTACT_PHONE}.")
