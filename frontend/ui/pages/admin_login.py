"""Admin sign-in page."""

import logging

import streamlit as st

from frontend.services import get_api_client
from frontend.utils import SessionState, VIEW_ADMIN_ANNADANAM

logger = logging.getLogger(__name__)


def render_admin_login_page() -> None:
    """Render the sign-in form; admins land on the Annadanam list."""
    st.title("Admin Sign In")

    if SessionState.is_admin():
        st.success(f"Signed in as {SessionState.get('auth_email')}")
        return

    with st.form("admin_login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary", use_container_width=True)

    if not submitted:
        return

    if not email.strip() or not password:
        st.error("Email and password are required")
        return

    with st.spinner("Signing in..."):
        result = get_api_client().login(email.strip(), password)

    if not result.success:
        st.error(result.error or "Sign in failed")
        return

    data = result.data
    if not data.get("is_admin"):
        st.error("This account does not have admin access")
        return

    SessionState.sign_in(data["access_token"], data["email"], data["id"], True)
    SessionState.set_view(VIEW_ADMIN_ANNADANAM)
    st.rerun()
