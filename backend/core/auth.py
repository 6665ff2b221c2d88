"""Session and admin validation for API endpoints.

- Session IDs (X-Session-ID) are validated as UUIDs and only used for
  per-session rate limiting of the chat proxy.
- Admin routes require a Supabase access token (Authorization: Bearer)
  whose email is on the admin allowlist. The allowlist is read from the
  environment on every request.
"""
import re
import uuid
import logging
from dataclasses import dataclass
from typing import List, Optional

from fastapi import Depends, Header, HTTPException, Request
from supabase import AuthError

from backend.config import get_admin_emails_raw
from backend.core.audit import log_authorization_failed
from backend.core.metrics import metrics
from backend.core.supabase_client import get_service_client

logger = logging.getLogger(__name__)

# Valid session ID format: UUID v4
SESSION_ID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$',
    re.IGNORECASE
)

ALLOWLIST_SEPARATORS = re.compile(r'[\s,;]+')


@dataclass
class AuthenticatedUser:
    """A signed-in portal user."""
    id: str
    email: str
    is_admin: bool = False


def validate_session_id(x_session_id: Optional[str] = Header(None, alias="X-Session-ID")) -> str:
    """Validate and return session ID.

    If no session ID is provided, generates an anonymous session.

    Raises:
        HTTPException: If session ID format is invalid
    """
    if not x_session_id:
        return f"anon-{uuid.uuid4()}"

    x_session_id = x_session_id.strip()

    if not SESSION_ID_PATTERN.match(x_session_id):
        logger.warning(f"Invalid session ID format: {x_session_id[:8]}...")
        raise HTTPException(
            status_code=400,
            detail="Invalid session ID format. Must be a valid UUID."
        )

    return x_session_id


def truncate_session_id(session_id: Optional[str]) -> str:
    """Truncate session ID for safe logging."""
    if not session_id:
        return "unknown"
    return f"{session_id[:8]}..."


def parse_admin_emails(raw: Optional[str]) -> List[str]:
    """Split an allowlist on commas, semicolons and whitespace.

    Example:
        >>> parse_admin_emails("a@x.org, B@x.org;c@x.org")
        ['a@x.org', 'b@x.org', 'c@x.org']
    """
    if not raw:
        return []
    return [part for part in ALLOWLIST_SEPARATORS.split(raw.lower()) if part]


def is_admin_email(email: Optional[str], allowlist: List[str]) -> bool:
    """Check an email against the allowlist.

    An empty allowlist admits every signed-in user.
    """
    if not email:
        return False
    return not allowlist or email.lower() in allowlist


def current_admin_emails() -> List[str]:
    """Allowlist as configured right now."""
    return parse_admin_emails(get_admin_emails_raw())


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def resolve_user(token: str) -> Optional[AuthenticatedUser]:
    """Resolve an access token to a user through the remote backend."""
    try:
        response = get_service_client().auth.get_user(token)
    except AuthError as e:
        logger.info(f"Token rejected by backend: {e}")
        return None

    user = getattr(response, "user", None)
    if user is None or not user.email:
        return None

    email = user.email.lower()
    return AuthenticatedUser(
        id=str(user.id),
        email=email,
        is_admin=is_admin_email(email, current_admin_emails()),
    )


def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> AuthenticatedUser:
    """Require a signed-in user."""
    token = _bearer_token(authorization)
    if not token:
        log_authorization_failed(None, request.url.path, "missing token")
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = resolve_user(token)
    if user is None:
        log_authorization_failed(None, request.url.path, "invalid token")
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    return user


def require_admin(
    request: Request,
    user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """Require a signed-in user on the admin allowlist."""
    if not user.is_admin:
        metrics.increment('admin_denied')
        log_authorization_failed(user.email, request.url.path, "not on admin allowlist")
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
