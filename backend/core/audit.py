"""
Audit logging for admin and security-relevant events.

Provides a dedicated audit log that may need to be reviewed separately
from application logs. Events are logged as JSON lines.

Events Logged:
- Admin sign-in and authorization failures
- Manual unblocks and auto-block checks
- Attendance confirmations
- Data exports
- Rate limit exceeded
"""
import json
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from backend.config import settings


class AuditEvent(str, Enum):
    """Types of audited events."""
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    AUTHENTICATION_FAILED = "authentication_failed"
    AUTHORIZATION_FAILED = "authorization_failed"
    ADMIN_SIGNED_IN = "admin_signed_in"
    USER_UNBLOCKED = "user_unblocked"
    AUTO_BLOCK_CHECK = "auto_block_check"
    ATTENDANCE_MARKED = "attendance_marked"
    DATA_EXPORTED = "data_exported"


# Configure audit logger
AUDIT_LOG_DIR = Path(settings.DATA_DIR) / "logs"
AUDIT_LOG_DIR.mkdir(parents=True, exist_ok=True)

# Separate audit logger with its own file
audit_logger = logging.getLogger("audit")
audit_logger.setLevel(logging.INFO)
audit_logger.propagate = False  # Don't propagate to root logger

if not audit_logger.handlers:
    audit_handler = logging.FileHandler(
        AUDIT_LOG_DIR / "audit.log",
        encoding="utf-8"
    )
    audit_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(message)s"
    ))
    audit_logger.addHandler(audit_handler)


def log_security_event(
    event: AuditEvent,
    actor: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    severity: str = "warning"
) -> None:
    """
    Log an event to the audit log.

    Args:
        event: Type of event
        actor: Admin email, session ID or other identity (if available)
        details: Additional details about the event
        severity: Log level (info, warning, error, critical)
    """
    log_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event": event.value,
        "actor": actor or "anonymous",
        "details": details or {},
    }

    message = json.dumps(log_entry, default=str)

    if severity == "critical":
        audit_logger.critical(message)
    elif severity == "error":
        audit_logger.error(message)
    elif severity == "warning":
        audit_logger.warning(message)
    else:
        audit_logger.info(message)


def log_rate_limit_exceeded(
    session_id: str,
    limit_type: str,
    limit_value: int
) -> None:
    """Log when a rate limit is exceeded."""
    log_security_event(
        AuditEvent.RATE_LIMIT_EXCEEDED,
        actor=session_id,
        details={
            "limit_type": limit_type,
            "limit_value": limit_value,
        },
        severity="warning"
    )


def log_authorization_failed(email: Optional[str], path: str, reason: str) -> None:
    """Log a rejected admin request."""
    log_security_event(
        AuditEvent.AUTHORIZATION_FAILED if email else AuditEvent.AUTHENTICATION_FAILED,
        actor=email,
        details={"path": path, "reason": reason},
        severity="warning"
    )


def log_admin_signed_in(email: str) -> None:
    """Log an allowlisted admin sign-in."""
    log_security_event(AuditEvent.ADMIN_SIGNED_IN, actor=email, severity="info")


def log_user_unblocked(admin_email: str, user_id: str, email: Optional[str] = None) -> None:
    """Log a manual unblock."""
    log_security_event(
        AuditEvent.USER_UNBLOCKED,
        actor=admin_email,
        details={"user_id": user_id, "email": email},
        severity="info"
    )


def log_auto_block_check(admin_email: str, blocked_count: int) -> None:
    """Log a manually triggered no-show check."""
    log_security_event(
        AuditEvent.AUTO_BLOCK_CHECK,
        actor=admin_email,
        details={"blocked_count": blocked_count},
        severity="info"
    )


def log_attendance_marked(admin_email: str, token: str) -> None:
    """Log an attendance confirmation. Only a token prefix is recorded."""
    log_security_event(
        AuditEvent.ATTENDANCE_MARKED,
        actor=admin_email,
        details={"token": f"{token[:6]}..."},
        severity="info"
    )


def log_data_exported(admin_email: str, kind: str, fmt: str, row_count: int) -> None:
    """Log a data export."""
    log_security_event(
        AuditEvent.DATA_EXPORTED,
        actor=admin_email,
        details={"kind": kind, "format": fmt, "rows": row_count},
        severity="info"
    )
