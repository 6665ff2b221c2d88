"""
Annadanam session catalogue.

The labels live in backend.modules.slots; the frontend reads them from
here instead of keeping its own copy.
"""
from fastapi import APIRouter

from backend.models.schemas import FilterOption, SessionCatalogResponse
from backend.modules.slots import AFTERNOON_SESSIONS, EVENING_SESSIONS, SESSION_FILTER_OPTIONS

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get("", response_model=SessionCatalogResponse)
def session_catalog() -> SessionCatalogResponse:
    """Session labels by band, and the options offered by the admin filter."""
    return SessionCatalogResponse(
        afternoon=list(AFTERNOON_SESSIONS),
        evening=list(EVENING_SESSIONS),
        filter_options=[FilterOption(value=value, label=label) for value, label in SESSION_FILTER_OPTIONS],
    )
