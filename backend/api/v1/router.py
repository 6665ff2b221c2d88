"""
API v1 router aggregator.
"""
from fastapi import APIRouter

from backend.api.v1 import admin, auth, chat, health, passes, sessions

# Create main API router
api_router = APIRouter(prefix="/api/v1")

# Include sub-routers
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(admin.router)
api_router.include_router(passes.router)
api_router.include_router(sessions.router)
api_router.include_router(chat.router)
