"""
Gateway to the remote procedures of the booking backend.

Every slot, booking, blocking and pass rule lives in stored procedures on
the remote backend. This module only names them, passes the parameters
they expect and normalises what comes back:

- list procedures always yield a list (non-list payloads become [])
- single-row procedures yield a dict or None
- any failure raises RPCError; there is no retry or backoff
"""
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError as PostgrestAPIError
from supabase import Client

from backend.config import settings
from backend.core.errors import RPCError
from backend.core.metrics import metrics
from backend.core.supabase_client import get_service_client

logger = logging.getLogger(__name__)

# Procedure names as deployed on the backend
LIST_BLOCKED_USERS = "list_blocked_users"
CHECK_AND_BLOCK_NO_SHOW_USERS = "check_and_block_no_show_users"
UNBLOCK_USER = "unblock_user"
ADMIN_LIST_ANNADANAM_BOOKINGS = "admin_list_annadanam_bookings"
ADMIN_LIST_POOJA_BOOKINGS = "admin_list_pooja_bookings"
ADMIN_LIST_VOLUNTEER_BOOKINGS = "admin_list_volunteer_bookings"
ADMIN_LIST_DONATIONS = "admin_list_donations"
ADMIN_LIST_CONTACT_US = "admin_list_contact_us"
LOOKUP_ANNADANAM_PASS = "lookup_annadanam_pass"
MARK_ANNADANAM_ATTENDED = "mark_annadanam_attended"


def as_rows(data: Any) -> List[Dict[str, Any]]:
    """Normalise a list payload."""
    return data if isinstance(data, list) else []


def as_single_row(data: Any) -> Optional[Dict[str, Any]]:
    """Normalise a single-row payload (list, object or null)."""
    if isinstance(data, list):
        return data[0] if data else None
    if isinstance(data, dict):
        return data or None
    return None


class RPCGateway:
    """Named remote procedure calls against the Supabase backend."""

    def __init__(self, client_factory: Callable[[], Client] = get_service_client):
        self._client_factory = client_factory

    def call(self, procedure: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Invoke a procedure and return its raw payload.

        Raises:
            RPCError: transport failure or error reported by the procedure
        """
        client = self._client_factory()
        metrics.increment('rpc_calls_total')
        start = time.time()
        try:
            response = client.rpc(procedure, params or {}).execute()
        except PostgrestAPIError as e:
            metrics.increment('rpc_calls_failed')
            logger.error(f"RPC {procedure} failed: {e.message}")
            raise RPCError(procedure, e.message) from e
        except httpx.HTTPError as e:
            metrics.increment('rpc_calls_failed')
            logger.error(f"RPC {procedure} transport error: {e}")
            raise RPCError(procedure, f"Could not reach backend: {e}") from e
        finally:
            metrics.record_latency(procedure, (time.time() - start) * 1000)

        logger.debug(f"RPC {procedure} ok")
        return response.data

    # Blocking policy
    def list_blocked_users(self) -> List[Dict[str, Any]]:
        return as_rows(self.call(LIST_BLOCKED_USERS))

    def check_and_block_no_show_users(self) -> List[Dict[str, Any]]:
        """Run the no-show check; returns the users blocked by this run."""
        return as_rows(self.call(CHECK_AND_BLOCK_NO_SHOW_USERS))

    def unblock_user(self, user_id: str, admin_user_id: str, notes: str) -> bool:
        """Lift a block. False means the user was not found or not blocked."""
        data = self.call(UNBLOCK_USER, {
            "p_user_id": user_id,
            "p_admin_user_id": admin_user_id,
            "p_notes": notes,
        })
        return bool(data)

    # Booking lists
    def _list_by_date(
        self,
        procedure: str,
        start_date: Optional[str],
        end_date: Optional[str],
        sess: Optional[str],
        limit_rows: int,
        offset_rows: int,
    ) -> List[Dict[str, Any]]:
        return as_rows(self.call(procedure, {
            "start_date": start_date,
            "end_date": end_date,
            "sess": sess,
            "limit_rows": limit_rows,
            "offset_rows": offset_rows,
        }))

    def list_annadanam_bookings(self, start_date=None, end_date=None, sess=None,
                                limit_rows=settings.RPC_PAGE_LIMIT, offset_rows=0):
        return self._list_by_date(ADMIN_LIST_ANNADANAM_BOOKINGS, start_date, end_date,
                                  sess, limit_rows, offset_rows)

    def list_pooja_bookings(self, start_date=None, end_date=None, sess=None,
                            limit_rows=settings.RPC_PAGE_LIMIT, offset_rows=0):
        return self._list_by_date(ADMIN_LIST_POOJA_BOOKINGS, start_date, end_date,
                                  sess, limit_rows, offset_rows)

    def list_volunteer_bookings(self, start_date=None, end_date=None, sess=None,
                                limit_rows=settings.RPC_PAGE_LIMIT, offset_rows=0):
        return self._list_by_date(ADMIN_LIST_VOLUNTEER_BOOKINGS, start_date, end_date,
                                  sess, limit_rows, offset_rows)

    # Timestamp-ranged lists
    def _list_by_timestamp(
        self,
        procedure: str,
        start_ts: Optional[str],
        end_ts: Optional[str],
        limit_rows: int,
        offset_rows: int,
    ) -> List[Dict[str, Any]]:
        return as_rows(self.call(procedure, {
            "start_ts": start_ts,
            "end_ts": end_ts,
            "limit_rows": limit_rows,
            "offset_rows": offset_rows,
        }))

    def list_donations(self, start_ts=None, end_ts=None,
                       limit_rows=settings.RPC_PAGE_LIMIT, offset_rows=0):
        return self._list_by_timestamp(ADMIN_LIST_DONATIONS, start_ts, end_ts,
                                       limit_rows, offset_rows)

    def list_contact_messages(self, start_ts=None, end_ts=None,
                              limit_rows=settings.RPC_PAGE_LIMIT, offset_rows=0):
        return self._list_by_timestamp(ADMIN_LIST_CONTACT_US, start_ts, end_ts,
                                       limit_rows, offset_rows)

    # Passes
    def lookup_annadanam_pass(self, token: str) -> Optional[Dict[str, Any]]:
        return as_single_row(self.call(LOOKUP_ANNADANAM_PASS, {"token": token}))

    def mark_annadanam_attended(self, token: str) -> Optional[Dict[str, Any]]:
        return as_single_row(self.call(MARK_ANNADANAM_ATTENDED, {"token": token}))

    # Plain table read
    def list_profiles(self, limit: int = settings.RPC_EXPORT_LIMIT) -> List[Dict[str, Any]]:
        """Read profiles for the bulk export.

        Row-level security may deny this; callers treat RPCError as "no rows".
        """
        client = self._client_factory()
        try:
            response = client.table(settings.PROFILE_TABLE).select("*").limit(limit).execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            raise RPCError(settings.PROFILE_TABLE, str(e)) from e
        return as_rows(response.data)


# Singleton pattern with thread-safe initialization
_gateway: Optional[RPCGateway] = None
_gateway_lock = threading.Lock()


def get_rpc_gateway() -> RPCGateway:
    """Get singleton gateway instance (FastAPI dependency)."""
    global _gateway
    if _gateway is None:
        with _gateway_lock:
            if _gateway is None:
                _gateway = RPCGateway()
    return _gateway
