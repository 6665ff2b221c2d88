"""
Unit tests for pass lookup and attendance confirmation.
"""
import pytest

from backend.core.errors import NotFoundError, RPCError, ValidationError


@pytest.fixture
def service(fake_gateway):
    from backend.services.pass_service import PassService
    return PassService(fake_gateway)


class TestLookup:
    def test_returns_booking(self, service, fake_gateway):
        fake_gateway.lookup_annadanam_pass.return_value = {"name": "Ravi", "session": "1:00 PM - 1:30 PM"}

        booking = service.lookup("  tok-123  ")

        assert booking["name"] == "Ravi"
        fake_gateway.lookup_annadanam_pass.assert_called_once_with("tok-123")

    @pytest.mark.parametrize("token", ["", "   ", None])
    def test_missing_token(self, service, fake_gateway, token):
        with pytest.raises(ValidationError) as exc_info:
            service.lookup(token)

        assert exc_info.value.message == "Missing QR token"
        fake_gateway.lookup_annadanam_pass.assert_not_called()

    def test_unknown_pass(self, service, fake_gateway):
        fake_gateway.lookup_annadanam_pass.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            service.lookup("tok")
        assert exc_info.value.message == "Invalid or expired pass"

    def test_backend_message_is_kept(self, service, fake_gateway):
        fake_gateway.lookup_annadanam_pass.side_effect = RPCError("lookup_annadanam_pass", "Pass has expired")

        with pytest.raises(NotFoundError) as exc_info:
            service.lookup("tok")
        assert exc_info.value.message == "Pass has expired"


class TestConfirmAttendance:
    def test_returns_updated_booking(self, service, fake_gateway):
        fake_gateway.mark_annadanam_attended.return_value = {"name": "Ravi", "attended_at": "2025-11-20T13:05:00"}

        booking = service.confirm_attendance("tok")

        assert booking["attended_at"] == "2025-11-20T13:05:00"

    def test_not_confirmed(self, service, fake_gateway):
        fake_gateway.mark_annadanam_attended.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            service.confirm_attendance("tok")
        assert exc_info.value.message == "Could not confirm"

    def test_rpc_failure_propagates(self, service, fake_gateway):
        fake_gateway.mark_annadanam_attended.side_effect = RPCError("mark_annadanam_attended", "already attended")

        with pytest.raises(RPCError):
            service.confirm_attendance("tok")
