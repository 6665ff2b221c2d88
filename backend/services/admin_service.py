"""
Admin panel operations.

Each method backs one admin page: call the remote procedure(s), shape
the rows, and raise on failure so the page can show the message and
clear its list. The bulk export is the exception: every section is
fetched independently and a failing procedure contributes an empty list.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, time, timezone
from typing import Any, Callable, Dict, List, Optional

from backend.config import settings
from backend.core.errors import NotFoundError, RPCError
from backend.core.rpc import RPCGateway
from backend.modules.slots import annotate_bookings, filter_rows_by_band, resolve_session_filter

logger = logging.getLogger(__name__)

UNBLOCK_NOTE_TEMPLATE = "Manually unblocked by admin on {timestamp}"


def _date_param(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _start_ts(value: Optional[date]) -> Optional[str]:
    """Start of day (UTC) as an ISO timestamp."""
    if value is None:
        return None
    return datetime.combine(value, time.min, tzinfo=timezone.utc).isoformat()


def _end_ts(value: Optional[date]) -> Optional[str]:
    """End of day (UTC) as an ISO timestamp so the end date is inclusive."""
    if value is None:
        return None
    return datetime.combine(value, time.max, tzinfo=timezone.utc).isoformat()


def blocked_message(count: int) -> str:
    if count > 0:
        return f"{count} user(s) have been blocked for consecutive no-shows."
    return "No users met the criteria for blocking."


class AdminService:
    """Admin list, blocking and export operations."""

    def __init__(self, gateway: RPCGateway):
        self.gateway = gateway

    # Bookings
    def list_annadanam(self, booking_date: Optional[date] = None, session_option: Optional[str] = None,
                       now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Annadanam bookings for a day, filtered by session or band."""
        sess, band = resolve_session_filter(session_option)
        day = _date_param(booking_date)
        rows = self.gateway.list_annadanam_bookings(
            start_date=day,
            end_date=day,
            sess=sess,
            limit_rows=settings.RPC_PAGE_LIMIT,
            offset_rows=0,
        )
        rows = filter_rows_by_band(rows, band)
        logger.info(f"Annadanam list: date={day or 'all'} session={session_option or 'all'} rows={len(rows)}")
        return annotate_bookings(rows, now=now)

    def list_pooja(self, start: Optional[date] = None, end: Optional[date] = None) -> List[Dict[str, Any]]:
        return self.gateway.list_pooja_bookings(
            start_date=_date_param(start), end_date=_date_param(end), sess=None,
            limit_rows=settings.RPC_PAGE_LIMIT, offset_rows=0,
        )

    def list_volunteers(self, start: Optional[date] = None, end: Optional[date] = None) -> List[Dict[str, Any]]:
        return self.gateway.list_volunteer_bookings(
            start_date=_date_param(start), end_date=_date_param(end), sess=None,
            limit_rows=settings.RPC_PAGE_LIMIT, offset_rows=0,
        )

    def list_donations(self, start: Optional[date] = None, end: Optional[date] = None) -> List[Dict[str, Any]]:
        return self.gateway.list_donations(
            start_ts=_start_ts(start), end_ts=_end_ts(end),
            limit_rows=settings.RPC_PAGE_LIMIT, offset_rows=0,
        )

    def list_contacts(self, start: Optional[date] = None, end: Optional[date] = None) -> List[Dict[str, Any]]:
        return self.gateway.list_contact_messages(
            start_ts=_start_ts(start), end_ts=_end_ts(end),
            limit_rows=settings.RPC_PAGE_LIMIT, offset_rows=0,
        )

    # Blocking policy
    def blocked_users_overview(self) -> Dict[str, Any]:
        """All block records split into active and lifted blocks."""
        users = self.gateway.list_blocked_users()
        active = [u for u in users if u.get("status") == "active"]
        unblocked = [u for u in users if u.get("status") == "unblocked"]
        return {
            "users": users,
            "active": active,
            "unblocked": unblocked,
            "active_count": len(active),
            "unblocked_count": len(unblocked),
        }

    def run_auto_block_check(self) -> Dict[str, Any]:
        """Trigger the backend's no-show check."""
        blocked = self.gateway.check_and_block_no_show_users()
        logger.info(f"Auto-block check blocked {len(blocked)} user(s)")
        return {
            "blocked": blocked,
            "blocked_count": len(blocked),
            "message": blocked_message(len(blocked)),
        }

    def unblock(self, user_id: str, admin_user_id: str, now: Optional[datetime] = None) -> str:
        """Lift a block; returns the note stored with it.

        Raises:
            NotFoundError: the backend reported nothing to unblock
        """
        now = now or datetime.now(timezone.utc)
        notes = UNBLOCK_NOTE_TEMPLATE.format(timestamp=now.isoformat())
        if not self.gateway.unblock_user(user_id, admin_user_id, notes):
            raise NotFoundError("User not found or already unblocked")
        logger.info(f"User {user_id} unblocked by {admin_user_id}")
        return notes

    # Bulk export
    def collect_bulk_export(self, start: Optional[date] = None, end: Optional[date] = None) -> Dict[str, List[Dict[str, Any]]]:
        """Fetch every section for the admin export.

        Sections are fetched in parallel; each failure is logged and
        yields an empty section instead of aborting the export.
        """
        limit = settings.RPC_EXPORT_LIMIT
        start_date, end_date = _date_param(start), _date_param(end)
        start_ts, end_ts = _start_ts(start), _end_ts(end)

        fetchers: Dict[str, Callable[[], List[Dict[str, Any]]]] = {
            "pooja_bookings": lambda: self.gateway.list_pooja_bookings(
                start_date, end_date, None, limit, 0),
            "annadanam_bookings": lambda: self.gateway.list_annadanam_bookings(
                start_date, end_date, None, limit, 0),
            "donations": lambda: self.gateway.list_donations(start_ts, end_ts, limit, 0),
            "contact_messages": lambda: self.gateway.list_contact_messages(start_ts, end_ts, limit, 0),
            "volunteer_bookings": lambda: self.gateway.list_volunteer_bookings(
                start_date, end_date, None, limit, 0),
        }

        with ThreadPoolExecutor(max_workers=settings.EXPORT_WORKERS) as pool:
            futures = {name: pool.submit(fn) for name, fn in fetchers.items()}
            sections = {name: self._section_result(name, future) for name, future in futures.items()}

        try:
            profiles = self.gateway.list_profiles(limit)
        except RPCError as e:
            logger.info(f"Profiles not readable for export: {e.message}")
            profiles = []

        return {
            "users": [],  # auth users are not readable through the API
            "profiles": profiles,
            "pooja_bookings": sections["pooja_bookings"],
            "annadanam_bookings": sections["annadanam_bookings"],
            "donations": sections["donations"],
            "contact_messages": sections["contact_messages"],
            "volunteer_bookings": sections["volunteer_bookings"],
        }

    @staticmethod
    def _section_result(name: str, future) -> List[Dict[str, Any]]:
        try:
            return future.result()
        except RPCError as e:
            logger.warning(f"Export section '{name}' failed, exporting it empty: {e.message}")
            return []
