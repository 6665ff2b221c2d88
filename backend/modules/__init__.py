"""
Domain helpers for the portal.
Decoupled from FastAPI and Streamlit.
"""

# Annadanam sessions
from backend.modules.slots import (
    ALL_SESSIONS,
    SESSION_FILTER_OPTIONS,
    annotate_bookings,
    band_for_session,
    has_completed,
    resolve_session_filter,
)

# Export formats
from backend.modules.exporters import (
    bulk_export_csv,
    escape_csv_field,
    rows_to_csv,
    rows_to_json,
    rows_to_pdf,
)

__all__ = [
    # Annadanam sessions
    "ALL_SESSIONS",
    "SESSION_FILTER_OPTIONS",
    "annotate_bookings",
    "band_for_session",
    "has_completed",
    "resolve_session_filter",
    # Export formats
    "bulk_export_csv",
    "escape_csv_field",
    "rows_to_csv",
    "rows_to_json",
    "rows_to_pdf",
]
