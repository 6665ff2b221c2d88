"""
Pydantic schemas for API request/response validation.

Row shapes are owned by the remote backend, so row models only name
the fields the portal reads and allow any others through.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Enums
class BlockStatus(str, Enum):
    ACTIVE = "active"
    UNBLOCKED = "unblocked"


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    PDF = "pdf"


class ListKind(str, Enum):
    """Admin lists that can be downloaded as a file."""
    ANNADANAM = "annadanam"
    POOJA = "pooja"
    VOLUNTEERS = "volunteers"
    DONATIONS = "donations"
    CONTACTS = "contacts"


# Row Schemas
class _Row(BaseModel):
    model_config = ConfigDict(extra="allow")


class BlockedUser(_Row):
    """A no-show block record."""

    user_id: str
    email: Optional[str] = None
    blocked_at: Optional[str] = None
    blocked_until: Optional[str] = None
    reason: Optional[str] = None
    consecutive_misses: Optional[int] = None
    status: BlockStatus = BlockStatus.ACTIVE
    days_remaining: Optional[float] = None
    unblocked_by: Optional[str] = None
    unblocked_at: Optional[str] = None
    notes: Optional[str] = None


class AnnadanamBooking(_Row):
    """Annadanam booking, annotated for the admin list."""

    date: Optional[str] = None
    session: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    qty: Optional[Any] = None
    status: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[str] = None
    attended_at: Optional[str] = None
    token: Optional[str] = None
    # Added by the API
    completed: bool = False
    band: Optional[str] = None


# List Responses
class RowListResponse(BaseModel):
    """Rows from one admin list."""

    items: List[Dict[str, Any]]
    total: int


class AnnadanamListResponse(BaseModel):
    """Annadanam rows for one day and session filter."""

    items: List[AnnadanamBooking]
    total: int
    date: Optional[str] = None
    session: Optional[str] = None


class BlockedUsersResponse(BaseModel):
    """Blocked users split by status."""

    users: List[BlockedUser]
    active: List[BlockedUser]
    unblocked: List[BlockedUser]
    active_count: int
    unblocked_count: int


class AutoBlockResponse(BaseModel):
    """Result of the no-show check."""

    blocked: List[Dict[str, Any]]
    blocked_count: int
    message: str


class UnblockResponse(BaseModel):
    """Manual unblock result."""

    user_id: str
    unblocked: bool = True
    notes: str
    message: str = "User unblocked"


# Pass Schemas
class PassResponse(BaseModel):
    """Booking behind a QR pass."""

    booking: Dict[str, Any]
    attended: bool = False


# Session Schemas
class FilterOption(BaseModel):
    value: str
    label: str


class SessionCatalogResponse(BaseModel):
    """Annadanam session labels in slot order, and the admin filter options."""

    afternoon: List[str]
    evening: List[str]
    filter_options: List[FilterOption]


# Auth Schemas
class LoginRequest(BaseModel):
    """Email/password sign-in."""

    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=256)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"email": "admin@example.org", "password": "********"}
        }
    )


class UserResponse(BaseModel):
    """Signed-in user."""

    id: str
    email: str
    is_admin: bool


class LoginResponse(UserResponse):
    """Sign-in result including the bearer token."""

    access_token: str
    token_type: str = "bearer"
    expires_at: Optional[int] = None


# Chat Schemas
class ChatMessage(BaseModel):
    """One previous conversation turn."""

    role: str = "user"
    content: Optional[str] = ""


class ChatRequest(BaseModel):
    """Chat proxy request.

    ``message`` is validated in the route so a missing message gets the
    same error body as a blank one.
    """

    message: Optional[str] = None
    history: List[ChatMessage] = Field(default_factory=list)

    @field_validator('history', mode='before')
    @classmethod
    def drop_null_history(cls, v):
        return v or []

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "When does the Annadanam season start?",
                "history": [{"role": "user", "content": "Swamiye Saranam"}],
            }
        }
    )


class TranscriptionResponse(BaseModel):
    """Text recognised from a recorded utterance."""

    text: str


# Health Schemas
class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str
    backend_configured: bool
    chat_configured: bool
    active_chat_streams: int
    timestamp: datetime


# Error Schemas
class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    error_code: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "detail": "User not found or already unblocked",
                "error_code": "NOT_FOUND",
            }
        }
    )
