"""Services for the portal frontend."""
from frontend.services.backend_client import (
    SamithiAPIClient,
    get_api_client,
    APIResponse,
    RowsResponse,
    FileResponse,
    SessionCatalog,
)
from frontend.services.chat_client import (
    ChatClient,
    ChatResult,
    get_chat_client,
)

__all__ = [
    # Backend client
    "SamithiAPIClient",
    "get_api_client",
    "APIResponse",
    "RowsResponse",
    "FileResponse",
    "SessionCatalog",
    # Streamed chat
    "ChatClient",
    "ChatResult",
    "get_chat_client",
]
