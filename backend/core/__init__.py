"""
Core backend modules.
- supabase_client: shared service-role client for the remote backend
- rpc: named remote procedure calls
- auth: bearer-token users and the admin allowlist
- rate_limit: per-session limits for the chat proxy
"""
from backend.core.errors import (
    PortalError,
    RPCError,
    BackendNotConfiguredError,
    NotFoundError,
    ValidationError,
)
from backend.core.rpc import RPCGateway, get_rpc_gateway

__all__ = [
    # Errors
    "PortalError",
    "RPCError",
    "BackendNotConfiguredError",
    "NotFoundError",
    "ValidationError",
    # Remote procedures
    "RPCGateway",
    "get_rpc_gateway",
]
