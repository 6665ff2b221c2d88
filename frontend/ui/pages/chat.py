"""Chat assistant page.

The reply streams into the last assistant bubble as it arrives; a failed
turn leaves the apology in that bubble instead.
"""

import logging
from typing import Optional

import streamlit as st

from frontend.config.settings import SUGGESTED_QUESTIONS, config
from frontend.services import get_chat_client
from frontend.utils import SessionState

logger = logging.getLogger(__name__)

GREETING = (
    "Swamiye Saranam Ayyappa! I can help with Annadanam bookings, timings, "
    "Pooja, volunteering and the Sabarimala Yatra."
)


def render_chat_page() -> None:
    """Render the chat history, the suggestions and the input box."""
    st.title("Ask the Assistant")

    col1, col2 = st.columns([4, 1])
    with col2:
        if st.button("Clear chat", use_container_width=True):
            SessionState.clear_mode('chat')
            st.rerun()

    with st.chat_message("assistant"):
        st.write(GREETING)

    for message in SessionState.get_chat_messages():
        with st.chat_message(message["role"]):
            st.write(message["content"])

    prompt = _render_suggestions() or st.chat_input(
        "Type your question...", max_chars=config.CHAT_MAX_MESSAGE_LENGTH
    )
    if prompt and prompt.strip():
        send_message(prompt.strip())
        st.rerun()


def _render_suggestions() -> Optional[str]:
    if SessionState.get_chat_messages():
        return None
    cols = st.columns(len(SUGGESTED_QUESTIONS))
    for i, (col, question) in enumerate(zip(cols, SUGGESTED_QUESTIONS)):
        if col.button(question, key=f"suggest_{i}", use_container_width=True):
            return question
    return None


def send_message(text: str) -> str:
    """Run one turn and return the assistant's final text.

    History is taken before the new message is appended, so the API
    receives prior turns only.
    """
    history = list(SessionState.get_chat_messages())

    SessionState.append_chat_message("user", text)
    with st.chat_message("user"):
        st.write(text)

    SessionState.append_chat_message("assistant", "")
    with st.chat_message("assistant"):
        placeholder = st.empty()

        def _update(partial: str) -> None:
            SessionState.replace_last_chat_message(partial)
            placeholder.markdown(partial)

        result = get_chat_client().reply(
            text,
            history,
            session_id=SessionState.get_session_id(),
            on_text=_update,
        )

    SessionState.replace_last_chat_message(result.text)
    if not result.success:
        logger.info(f"Chat turn failed: {result.error}")
    return result.text
