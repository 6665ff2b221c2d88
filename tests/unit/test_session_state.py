"""
Tests for the frontend session state helpers.

Streamlit's session state is replaced by a plain dict.
"""
import pytest
from unittest.mock import patch


@pytest.fixture
def state():
    from frontend.utils.session_state import SessionState

    store = {}
    with patch.object(SessionState, '_get_session_state', return_value=store):
        SessionState.init_defaults()
        yield store


class TestDefaults:
    def test_defaults_are_initialized(self, state):
        from frontend.utils.session_state import VIEW_HOME

        assert state['current_view'] == VIEW_HOME
        assert state['rows'] == {}
        assert state['chat_messages'] == []
        assert state['is_admin'] is False
        assert len(state['session_id']) == 36

    def test_existing_values_are_kept(self, state):
        from frontend.utils.session_state import SessionState

        state['current_view'] = 'chat'
        SessionState.init_defaults()
        assert state['current_view'] == 'chat'


class TestViews:
    def test_admin_view_requires_admin(self, state):
        from frontend.utils.session_state import SessionState, VIEW_ADMIN_DONATIONS, VIEW_ADMIN_LOGIN

        SessionState.set_view(VIEW_ADMIN_DONATIONS)
        assert SessionState.get_current_view() == VIEW_ADMIN_LOGIN

        SessionState.sign_in("tok", "admin@example.org", "admin-uid-1", True)
        SessionState.set_view(VIEW_ADMIN_DONATIONS)
        assert SessionState.get_current_view() == VIEW_ADMIN_DONATIONS

    def test_signed_in_non_admin(self, state):
        from frontend.utils.session_state import SessionState

        SessionState.sign_in("tok", "devotee@example.org", "u1", False)
        assert SessionState.is_admin() is False


class TestSignOut:
    def test_sign_out_forgets_admin_state(self, state):
        from frontend.utils.session_state import SessionState, VIEW_HOME

        SessionState.sign_in("tok", "admin@example.org", "admin-uid-1", True)
        SessionState.set_rows('donations', [{"amount": 101}])
        SessionState.set_download('donations', {"filename": "donations.csv"})
        SessionState.set('pending_unblock', {"user_id": "u1"})

        SessionState.sign_out()

        assert SessionState.get_auth_token() is None
        assert SessionState.is_admin() is False
        assert SessionState.get_rows('donations') is None
        assert SessionState.get_download('donations') is None
        assert SessionState.get('pending_unblock') is None
        assert SessionState.get_current_view() == VIEW_HOME

    def test_chat_survives_sign_out(self, state):
        from frontend.utils.session_state import SessionState

        SessionState.append_chat_message("user", "Hi")
        SessionState.sign_out()
        assert SessionState.get_chat_messages() == [{"role": "user", "content": "Hi"}]


class TestRowsAndDownloads:
    def test_reset_rows(self, state):
        from frontend.utils.session_state import SessionState

        SessionState.set_rows('pooja', [{"name": "Ravi"}])
        assert SessionState.get_rows('pooja') == [{"name": "Ravi"}]

        SessionState.reset_rows('pooja')
        assert SessionState.get_rows('pooja') is None

    def test_rows_remember_their_filters(self, state):
        from datetime import date
        from frontend.utils.session_state import SessionState

        SessionState.set_rows('annadanam', [{"name": "Ravi"}],
                              {"booking_date": date(2025, 12, 1), "session": "1pm-3pm"})

        filters = SessionState.get_row_filters('annadanam')
        assert filters == {"booking_date": date(2025, 12, 1), "session": "1pm-3pm"}
        filters["session"] = "all"
        assert SessionState.get_row_filters('annadanam')["session"] == "1pm-3pm"

    def test_failed_load_forgets_filters(self, state):
        from frontend.utils.session_state import SessionState

        SessionState.set_rows('donations', [], {"start": "2025-11-01"})
        SessionState.reset_rows('donations')

        assert SessionState.get_row_filters('donations') == {}

    def test_sign_out_forgets_filters(self, state):
        from frontend.utils.session_state import SessionState

        SessionState.sign_in("tok", "admin@example.org", "admin-uid-1", True)
        SessionState.set_rows('contacts', [{"subject": "Hi"}], {"start": "2025-11-01"})
        SessionState.sign_out()

        assert SessionState.get_row_filters('contacts') == {}

    def test_clearing_a_download(self, state):
        from frontend.utils.session_state import SessionState

        SessionState.set_download('contacts', b"data")
        SessionState.set_download('contacts', None)
        assert 'contacts' not in state['downloads']


class TestChat:
    def test_replace_last_message(self, state):
        from frontend.utils.session_state import SessionState

        SessionState.append_chat_message("user", "Hi")
        SessionState.append_chat_message("assistant", "")
        SessionState.replace_last_chat_message("Swamiye Saranam")

        assert SessionState.get_chat_messages()[-1] == {"role": "assistant", "content": "Swamiye Saranam"}

    def test_replace_with_no_messages(self, state):
        from frontend.utils.session_state import SessionState

        SessionState.replace_last_chat_message("ignored")
        assert SessionState.get_chat_messages() == []


class TestSessionId:
    def test_session_id_is_stable(self, state):
        from frontend.utils.session_state import SessionState

        assert SessionState.get_session_id() == SessionState.get_session_id()

    def test_regenerated_when_missing(self, state):
        from frontend.utils.session_state import SessionState

        state['session_id'] = None
        assert len(SessionState.get_session_id()) == 36
