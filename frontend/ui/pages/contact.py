"""Contact page."""

import streamlit as st

from frontend.config.settings import config


def render_contact_page() -> None:
    """Render the organisation's contact details."""
    st.title("Contact Us")

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("#### Address")
        st.markdown("  \n".join(config.CONTACT_ADDRESS))
    with col2:
        st.markdown("#### Reach us")
        st.markdown(f"Email: [{config.CONTACT_EMAIL}](mailto:{config.CONTACT_EMAIL})")
        st.markdown(f"Phone: {config.CONTACT_PHONE}")

    st.caption(f"Visit {config.SITE_URL} for Pooja and volunteer bookings.")
