# Services package
from backend.services.admin_service import AdminService
from backend.services.chat_service import ChatService, get_chat_service
from backend.services.pass_service import PassService

__all__ = [
    "AdminService",
    "ChatService",
    "get_chat_service",
    "PassService",
]
