"""Home page for the portal.

Season dates, what the Samithi offers and shortcuts to the other pages.
"""

import logging
from datetime import date
from typing import Optional, Tuple

import streamlit as st

from frontend.config.settings import config
from frontend.utils import SessionState, VIEW_ANNADANAM, VIEW_PASS, VIEW_CHAT, VIEW_CONTACT

logger = logging.getLogger(__name__)


def season_window(today: Optional[date] = None) -> Tuple[date, date]:
    """Season that contains ``today``, or the next one to start.

    The season runs across the new year, so early January belongs to the
    season that started the previous November.
    """
    today = today or date.today()
    start_month, start_day = config.SEASON_START
    end_month, end_day = config.SEASON_END

    end_this_year = date(today.year, end_month, end_day)
    if today <= end_this_year:
        return date(today.year - 1, start_month, start_day), end_this_year
    return date(today.year, start_month, start_day), date(today.year + 1, end_month, end_day)


def render_home_page() -> None:
    """Render the landing page."""
    st.title(f"{config.APP_ICON} {config.APP_NAME}")
    st.caption("Serving Ayyappa devotees through Annadanam, Pooja and Seva")

    start, end = season_window()
    today = date.today()
    if start <= today <= end:
        st.success(
            f"Annadanam season is on: {start.strftime('%B %d, %Y')} to {end.strftime('%B %d, %Y')}"
        )
    else:
        st.info(f"The next Annadanam season starts on {start.strftime('%B %d, %Y')}")

    col1, col2 = st.columns(2)
    with col1:
        with st.container(border=True):
            st.markdown("#### Annadanam")
            st.write("Free meals for devotees in the afternoon and evening sessions.")
            if st.button("Session timings", key="home_annadanam", use_container_width=True):
                SessionState.set_view(VIEW_ANNADANAM)
                st.rerun()
        with st.container(border=True):
            st.markdown("#### Your pass")
            st.write("Open the pass from your booking link to show it at the counter.")
            if st.button("Open my pass", key="home_pass", use_container_width=True):
                SessionState.set_view(VIEW_PASS)
                st.rerun()

    with col2:
        with st.container(border=True):
            st.markdown("#### Ask the assistant")
            st.write("Questions about bookings, timings, Pooja or the Yatra.")
            if st.button("Start a chat", key="home_chat", use_container_width=True):
                SessionState.set_view(VIEW_CHAT)
                st.rerun()
        with st.container(border=True):
            st.markdown("#### Contact us")
            st.write(f"{config.CONTACT_EMAIL} · {config.CONTACT_PHONE}")
            if st.button("Contact details", key="home_contact", use_container_width=True):
                SessionState.set_view(VIEW_CONTACT)
                st.rerun()

    st.divider()
    st.caption(f"Version {config.APP_VERSION}")
