"""Admin: users blocked for consecutive no-shows.

Active blocks can be lifted after a confirmation step; the automatic
check asks the backend to block anyone who now meets the policy.
"""

import logging
from typing import Any, Dict, List

import streamlit as st

from frontend.config.settings import config
from frontend.services import get_api_client
from frontend.utils import SessionState
from frontend.ui.components.tables import render_rows_table, summary_metrics

logger = logging.getLogger(__name__)

ACTIVE_COLUMNS = [
    ("email", "Email"),
    ("blocked_at", "Blocked"),
    ("blocked_until", "Until"),
    ("days_remaining", "Days left"),
    ("consecutive_misses", "Misses"),
    ("reason", "Reason"),
]

UNBLOCKED_COLUMNS = [
    ("email", "Email"),
    ("blocked_at", "Blocked"),
    ("unblocked_at", "Unblocked"),
    ("unblocked_by", "By"),
    ("notes", "Notes"),
]


def render_admin_blocked_page() -> None:
    """Render the policy, the actions and both block lists."""
    st.title("Blocked Users")
    _render_policy()

    token = SessionState.get_auth_token()
    client = get_api_client()

    col1, col2 = st.columns(2)
    with col1:
        refresh = st.button("Refresh", use_container_width=True)
    with col2:
        if st.button("Run no-show check", type="primary", use_container_width=True):
            with st.spinner("Checking bookings..."):
                result = client.run_auto_block_check(token)
            if result.success:
                st.toast(result.data.get("message", "Check complete"))
                refresh = True
            else:
                st.error(result.error or "No-show check failed")

    overview = SessionState.get('blocked_overview')
    if refresh or overview is None:
        result = client.blocked_users(token)
        if not result.success:
            st.error(result.error or "Failed to load blocked users")
            SessionState.clear('blocked_overview')
            return
        overview = result.data
        SessionState.set('blocked_overview', overview)

    summary_metrics({
        "Currently blocked": overview.get("active_count", 0),
        "Unblocked": overview.get("unblocked_count", 0),
    })

    st.markdown("#### Currently blocked")
    active = overview.get("active", [])
    if active:
        render_rows_table(active, ACTIVE_COLUMNS)
        _render_unblock(active)
    else:
        st.caption("No users are blocked")

    unblocked = overview.get("unblocked", [])
    if unblocked:
        with st.expander(f"Previously unblocked ({len(unblocked)})"):
            render_rows_table(unblocked, UNBLOCKED_COLUMNS)


def _render_policy() -> None:
    with st.expander("Blocking policy"):
        st.markdown(
            f"""
- A devotee who misses **{config.BLOCK_CONSECUTIVE_MISSES} consecutive** Annadanam bookings
  without attending is blocked from booking for **{config.BLOCK_DAYS} days**.
- Enforced from {config.BLOCK_ENFORCED_FROM}.
- Blocks expire on their own; unblocking here lifts one early and records your email.
"""
        )


def _render_unblock(active: List[Dict[str, Any]]) -> None:
    labels = {user["user_id"]: user.get("email") or user["user_id"] for user in active}

    col1, col2 = st.columns([3, 1])
    with col1:
        user_id = st.selectbox(
            "User to unblock",
            list(labels),
            format_func=lambda uid: labels[uid],
            label_visibility="collapsed",
        )
    with col2:
        if st.button("Unblock", use_container_width=True):
            SessionState.set('pending_unblock', user_id)

    pending = SessionState.get('pending_unblock')
    if pending is None or pending not in labels:
        return

    st.warning(f"Unblock {labels[pending]}? They will be able to book again immediately.")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("Yes, unblock", type="primary", use_container_width=True):
            email = labels[pending] if labels[pending] != pending else None
            result = get_api_client().unblock_user(SessionState.get_auth_token(), pending, email=email)
            SessionState.clear('pending_unblock')
            if result.success:
                st.toast(result.data.get("message", "User unblocked"))
                SessionState.clear('blocked_overview')
                st.rerun()
            else:
                st.error(result.error or "Unblock failed")
    with col2:
        if st.button("Cancel", use_container_width=True):
            SessionState.clear('pending_unblock')
            st.rerun()
