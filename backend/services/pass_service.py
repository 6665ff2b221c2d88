"""
Annadanam QR pass lookup and attendance confirmation.

The token in a pass URL is opaque; the backend decides whether it is
valid and marks attendance.
"""
import logging
from typing import Any, Dict

from backend.core.errors import NotFoundError, RPCError, ValidationError
from backend.core.rpc import RPCGateway

logger = logging.getLogger(__name__)

INVALID_PASS = "Invalid or expired pass"


class PassService:
    """Pass lookups for devotees and attendance marking for admins."""

    def __init__(self, gateway: RPCGateway):
        self.gateway = gateway

    @staticmethod
    def _clean(token: str) -> str:
        token = (token or "").strip()
        if not token:
            raise ValidationError("Missing QR token", field="token")
        return token

    def lookup(self, token: str) -> Dict[str, Any]:
        """Fetch the booking behind a pass token.

        Raises:
            ValidationError: blank token
            NotFoundError: unknown, expired or unreadable pass
        """
        token = self._clean(token)
        try:
            row = self.gateway.lookup_annadanam_pass(token)
        except RPCError as e:
            raise NotFoundError(e.message or INVALID_PASS) from e
        if row is None:
            raise NotFoundError(INVALID_PASS)
        return row

    def confirm_attendance(self, token: str) -> Dict[str, Any]:
        """Mark the pass holder as attended; returns the updated booking."""
        token = self._clean(token)
        row = self.gateway.mark_annadanam_attended(token)
        if row is None:
            raise NotFoundError("Could not confirm")
        logger.info(f"Attendance confirmed for pass {token[:6]}...")
        return row
