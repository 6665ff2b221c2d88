"""
Unit tests for admin list, blocking and export operations.
"""
from datetime import date, datetime, timezone

import pytest

from backend.core.errors import NotFoundError, RPCError


@pytest.fixture
def service(fake_gateway):
    from backend.services.admin_service import AdminService
    return AdminService(fake_gateway)


class TestAnnadanamList:
    """Tests for the day/session filtered Annadanam list."""

    NOW = datetime(2025, 11, 20, 15, 0)

    def test_band_filters_locally(self, service, fake_gateway, sample_annadanam_rows):
        fake_gateway.list_annadanam_bookings.return_value = sample_annadanam_rows

        rows = service.list_annadanam(date(2025, 11, 20), "8pm-10pm", now=self.NOW)

        fake_gateway.list_annadanam_bookings.assert_called_once_with(
            start_date="2025-11-20", end_date="2025-11-20", sess=None,
            limit_rows=500, offset_rows=0,
        )
        assert [r["name"] for r in rows] == ["Suresh"]
        assert rows[0]["band"] == "Evening"
        assert rows[0]["completed"] is False

    def test_single_session_is_sent_upstream(self, service, fake_gateway):
        fake_gateway.list_annadanam_bookings.return_value = []

        service.list_annadanam(date(2025, 11, 20), "1:00 PM - 1:30 PM", now=self.NOW)

        assert fake_gateway.list_annadanam_bookings.call_args.kwargs["sess"] == "1:00 PM - 1:30 PM"

    def test_all_timings_marks_completed(self, service, fake_gateway, sample_annadanam_rows):
        fake_gateway.list_annadanam_bookings.return_value = sample_annadanam_rows

        rows = service.list_annadanam(date(2025, 11, 20), "all", now=self.NOW)

        assert [r["completed"] for r in rows] == [True, True, False]

    def test_rpc_failure_propagates(self, service, fake_gateway):
        fake_gateway.list_annadanam_bookings.side_effect = RPCError("admin_list_annadanam_bookings", "boom")

        with pytest.raises(RPCError):
            service.list_annadanam(date(2025, 11, 20), None)


class TestRangeLists:
    def test_booking_lists_send_dates(self, service, fake_gateway):
        fake_gateway.list_pooja_bookings.return_value = [{"name": "Ravi"}]

        rows = service.list_pooja(date(2025, 11, 1), date(2025, 11, 30))

        assert rows == [{"name": "Ravi"}]
        fake_gateway.list_pooja_bookings.assert_called_once_with(
            start_date="2025-11-01", end_date="2025-11-30", sess=None,
            limit_rows=500, offset_rows=0,
        )

    def test_volunteer_list_without_range(self, service, fake_gateway):
        fake_gateway.list_volunteer_bookings.return_value = []

        service.list_volunteers()

        kwargs = fake_gateway.list_volunteer_bookings.call_args.kwargs
        assert kwargs["start_date"] is None and kwargs["end_date"] is None

    def test_timestamp_lists_cover_whole_days(self, service, fake_gateway):
        fake_gateway.list_donations.return_value = []

        service.list_donations(date(2025, 11, 1), date(2025, 11, 30))

        fake_gateway.list_donations.assert_called_once_with(
            start_ts="2025-11-01T00:00:00+00:00",
            end_ts="2025-11-30T23:59:59.999999+00:00",
            limit_rows=500, offset_rows=0,
        )

    def test_contacts(self, service, fake_gateway):
        fake_gateway.list_contact_messages.return_value = [{"subject": "Pooja"}]
        assert service.list_contacts(start=date(2025, 11, 1)) == [{"subject": "Pooja"}]
        assert fake_gateway.list_contact_messages.call_args.kwargs["end_ts"] is None


class TestBlocking:
    """Tests for the no-show blocking operations."""

    def test_overview_splits_by_status(self, service, fake_gateway, sample_blocked_rows):
        fake_gateway.list_blocked_users.return_value = sample_blocked_rows

        overview = service.blocked_users_overview()

        assert overview["active_count"] == 1
        assert overview["unblocked_count"] == 1
        assert overview["active"][0]["user_id"] == "u1"
        assert overview["unblocked"][0]["user_id"] == "u2"
        assert len(overview["users"]) == 2

    def test_auto_block_message_with_blocks(self, service, fake_gateway):
        fake_gateway.check_and_block_no_show_users.return_value = [{"user_id": "u1"}, {"user_id": "u2"}]

        result = service.run_auto_block_check()

        assert result["blocked_count"] == 2
        assert result["message"] == "2 user(s) have been blocked for consecutive no-shows."

    def test_auto_block_message_without_blocks(self, service, fake_gateway):
        fake_gateway.check_and_block_no_show_users.return_value = []

        result = service.run_auto_block_check()

        assert result["blocked_count"] == 0
        assert result["message"] == "No users met the criteria for blocking."

    def test_unblock_records_note(self, service, fake_gateway):
        fake_gateway.unblock_user.return_value = True
        now = datetime(2025, 11, 20, 10, 0, tzinfo=timezone.utc)

        notes = service.unblock("u1", "admin-uid-1", now=now)

        assert notes == "Manually unblocked by admin on 2025-11-20T10:00:00+00:00"
        fake_gateway.unblock_user.assert_called_once_with("u1", "admin-uid-1", notes)

    def test_unblock_unknown_user(self, service, fake_gateway):
        fake_gateway.unblock_user.return_value = False

        with pytest.raises(NotFoundError) as exc_info:
            service.unblock("u9", "admin-uid-1")
        assert exc_info.value.message == "User not found or already unblocked"


class TestBulkExport:
    """Tests for the all-sections export."""

    def test_failed_section_is_empty(self, service, fake_gateway):
        fake_gateway.list_pooja_bookings.return_value = [{"name": "Pooja"}]
        fake_gateway.list_annadanam_bookings.return_value = [{"name": "Anna"}]
        fake_gateway.list_donations.side_effect = RPCError("admin_list_donations", "timeout")
        fake_gateway.list_contact_messages.return_value = [{"subject": "Hi"}]
        fake_gateway.list_volunteer_bookings.return_value = []
        fake_gateway.list_profiles.side_effect = RPCError("Profile-Table", "permission denied")

        payload = service.collect_bulk_export(date(2025, 11, 1), date(2025, 11, 30))

        assert payload["donations"] == []
        assert payload["profiles"] == []
        assert payload["users"] == []
        assert payload["pooja_bookings"] == [{"name": "Pooja"}]
        assert payload["annadanam_bookings"] == [{"name": "Anna"}]
        assert payload["contact_messages"] == [{"subject": "Hi"}]
        assert list(payload) == [
            "users", "profiles", "pooja_bookings", "annadanam_bookings",
            "donations", "contact_messages", "volunteer_bookings",
        ]

    def test_uses_export_limit(self, service, fake_gateway):
        for name in ("list_pooja_bookings", "list_annadanam_bookings", "list_donations",
                     "list_contact_messages", "list_volunteer_bookings", "list_profiles"):
            getattr(fake_gateway, name).return_value = []

        service.collect_bulk_export()

        fake_gateway.list_pooja_bookings.assert_called_once_with(None, None, None, 5000, 0)
        fake_gateway.list_donations.assert_called_once_with(None, None, 5000, 0)
        fake_gateway.list_profiles.assert_called_once_with(5000)
