"""Custom exceptions for the portal frontend.

Exception Hierarchy:
    PortalError (base)
    ├── APIError
    │   └── RateLimitError
    └── BackendUnavailableError
"""


class PortalError(Exception):
    """Base exception for the portal frontend.

    All custom exceptions in this application should inherit from this class.
    This allows catching all application-specific errors with a single except clause.

    Example:
        >>> try:
        ...     risky_operation()
        ... except PortalError as e:
        ...     st.error(e.message)
    """

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class APIError(PortalError):
    """Raised when a call to the portal API fails.

    Attributes:
        status_code: HTTP status code (if applicable)

    Example:
        >>> raise APIError("Upstream error", status_code=502)
    """

    def __init__(self, message: str = "API call failed", status_code: int = None):
        self.status_code = status_code
        super().__init__(message)


class RateLimitError(APIError):
    """Raised when the chat rate limit is exceeded.

    Attributes:
        retry_after: Seconds to wait before retrying (if known)

    Example:
        >>> raise RateLimitError("Too many messages", retry_after=60)
    """

    def __init__(self, message: str = "Rate limit exceeded", retry_after: int = None):
        self.retry_after = retry_after
        super().__init__(message, status_code=429)


class BackendUnavailableError(PortalError):
    """Raised when the portal API cannot be reached.

    Example:
        >>> raise BackendUnavailableError("Cannot connect to backend API")
    """

    def __init__(self, message: str = "Backend API is unavailable"):
        super().__init__(message)
