"""Sabari Sastha Seva Samithi portal frontend.

Streamlit app that routes between the devotee pages and the admin panel.
All data comes from the backend API.
"""

import logging
import sys
from pathlib import Path

# Load environment variables from .env file BEFORE any other imports
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent.parent / ".env")

import streamlit as st

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from frontend.config.settings import config
from frontend.utils import (
    SessionState,
    ADMIN_VIEWS,
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
from frontend.ui.components import render_sidebar
from frontend.ui.pages import (
    render_home_page,
    render_annadanam_page,
    render_pass_page,
    render_contact_page,
    render_chat_page,
    render_voice_page,
    render_admin_login_page,
    render_admin_annadanam_page,
    render_admin_bookings_page,
    render_admin_donations_page,
    render_admin_contacts_page,
    render_admin_blocked_page,
    render_admin_export_page,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

PAGES = {
    VIEW_HOME: render_home_page,
    VIEW_ANNADANAM: render_annadanam_page,
    VIEW_PASS: render_pass_page,
    VIEW_CONTACT: render_contact_page,
    VIEW_CHAT: render_chat_page,
    VIEW_VOICE: render_voice_page,
    VIEW_ADMIN_LOGIN: render_admin_login_page,
    VIEW_ADMIN_ANNADANAM: render_admin_annadanam_page,
    VIEW_ADMIN_BOOKINGS: render_admin_bookings_page,
    VIEW_ADMIN_DONATIONS: render_admin_donations_page,
    VIEW_ADMIN_CONTACTS: render_admin_contacts_page,
    VIEW_ADMIN_BLOCKED: render_admin_blocked_page,
    VIEW_ADMIN_EXPORT: render_admin_export_page,
}


def main():
    """Main application entry point."""
    # Page configuration - must be first Streamlit command
    st.set_page_config(
        page_title=config.APP_NAME,
        page_icon=config.APP_ICON,
        layout="wide",
        initial_sidebar_state="expanded",
    )

    _apply_custom_css()

    SessionState.init_defaults()

    # Pass links (?t=...) open straight onto the pass page
    if st.query_params.get("t") or st.query_params.get("token"):
        if SessionState.get('pass_link_opened') is None:
            SessionState.set('pass_link_opened', True)
            SessionState.set_view(VIEW_PASS)

    render_sidebar()

    current_view = SessionState.get_current_view()

    # Admin pages need a signed-in admin; the session may have been signed out
    if current_view in ADMIN_VIEWS and not SessionState.is_admin():
        SessionState.set_view(VIEW_ADMIN_LOGIN)
        current_view = VIEW_ADMIN_LOGIN

    render_page = PAGES.get(current_view)
    if render_page is None:
        SessionState.navigate_to_home()
        render_page = render_home_page

    render_page()


def _apply_custom_css():
    """Apply custom CSS styling."""
    st.markdown("""
        <style>
        /* Better sidebar styling */
        section[data-testid="stSidebar"] > div {
            padding-top: 1rem;
        }

        /* Improve button consistency */
        .stButton > button {
            font-size: 0.875rem;
        }

        /* Metric styling */
        div[data-testid="stMetricValue"] {
            font-size: 1.5rem;
        }

        /* Hide Streamlit footer only (keep menu for theme settings) */
        footer {visibility: hidden;}
        </style>
    """, unsafe_allow_html=True)


if __name__ == "__main__":
    main()
