"""
Shared test fixtures for the portal tests.
"""
import os
import tempfile

import pytest
from unittest.mock import MagicMock

# Test environment must be in place before any backend import
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="samithi-tests-")
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_SERVICE_KEY"] = ""
os.environ["RATE_LIMIT_MAX_CHATS"] = "20"
os.environ["RATE_LIMIT_MAX_TRANSCRIPTIONS"] = "10"

from backend.config import get_settings
get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_shared_state():
    """Fresh metrics and rate limiter for every test."""
    from backend.core.metrics import metrics
    from backend.core.rate_limit import chat_rate_limiter

    metrics.reset()
    chat_rate_limiter.reset()
    yield
    metrics.reset()
    chat_rate_limiter.reset()


@pytest.fixture
def fake_gateway():
    """RPC gateway double; configure return values per test."""
    from backend.core.rpc import RPCGateway
    return MagicMock(spec=RPCGateway)


@pytest.fixture
def admin_user():
    from backend.core.auth import AuthenticatedUser
    return AuthenticatedUser(id="admin-uid-1", email="admin@example.org", is_admin=True)


@pytest.fixture
def sample_annadanam_rows():
    """Bookings on one day across both bands."""
    return [
        {"date": "2025-11-20", "session": "1:00 PM - 1:30 PM", "name": "Ravi", "email": "ravi@example.org",
         "phone": "9000000001", "qty": 2, "status": "confirmed", "user_id": "u1",
         "created_at": "2025-11-18T09:00:00+00:00"},
        {"date": "2025-11-20", "session": "2:30 PM - 3:00 PM", "name": "Lakshmi", "email": "lakshmi@example.org",
         "phone": "9000000002", "qty": 1, "status": "confirmed", "user_id": "u2",
         "created_at": "2025-11-18T10:00:00+00:00"},
        {"date": "2025-11-20", "session": "8:30 PM - 9:00 PM", "name": "Suresh", "email": "suresh@example.org",
         "phone": "9000000003", "qty": 3, "status": "confirmed", "user_id": "u3",
         "created_at": "2025-11-19T11:30:00+00:00"},
    ]


@pytest.fixture
def sample_blocked_rows():
    return [
        {"user_id": "u1", "email": "ravi@example.org", "status": "active",
         "blocked_at": "2025-11-16T00:00:00+00:00", "blocked_until": "2025-11-23T00:00:00+00:00",
         "consecutive_misses": 2, "days_remaining": 3},
        {"user_id": "u2", "email": "lakshmi@example.org", "status": "unblocked",
         "blocked_at": "2025-11-10T00:00:00+00:00", "unblocked_by": "admin-uid-1",
         "unblocked_at": "2025-11-12T08:00:00+00:00",
         "notes": "Manually unblocked by admin on 2025-11-12T08:00:00+00:00"},
    ]
