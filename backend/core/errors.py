"""Custom exceptions for the portal API service.

Exception Hierarchy:
    PortalError (base)
    ├── RPCError
    ├── BackendNotConfiguredError
    ├── NotFoundError
    └── ValidationError

Each exception carries the HTTP status the API maps it to, so route
handlers can raise them directly and let the exception handlers in
``backend.main`` build the response.
"""
from typing import Optional


class PortalError(Exception):
    """Base exception for the portal.

    All application-specific errors inherit from this class.
    """

    status_code = 500

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class RPCError(PortalError):
    """Raised when a remote procedure call fails.

    Attributes:
        procedure: Name of the remote procedure
        message: Error reported by the remote backend

    Example:
        >>> raise RPCError("list_blocked_users", "permission denied")
    """

    status_code = 502

    def __init__(self, procedure: str, message: Optional[str] = None):
        self.procedure = procedure
        super().__init__(message or f"Remote procedure '{procedure}' failed")

    def __repr__(self) -> str:
        return f"RPCError(procedure={self.procedure!r}, message={self.message!r})"


class BackendNotConfiguredError(PortalError):
    """Raised when the remote backend credentials are missing."""

    status_code = 503

    def __init__(self, message: str = "Remote backend is not configured"):
        super().__init__(message)


class NotFoundError(PortalError):
    """Raised when a pass, user or row does not exist."""

    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class ValidationError(PortalError):
    """Raised when request input is missing or malformed."""

    status_code = 400

    def __init__(self, message: str = "Invalid input", field: Optional[str] = None):
        self.field = field
        super().__init__(message)
