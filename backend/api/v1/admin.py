"""
Admin API endpoints.

Every route requires a signed-in user on the admin allowlist. Lists are
read through named remote procedures; a failing procedure surfaces as
HTTP 502 with the backend's message so the UI can show it and clear
its list.

Downloads:
- /admin/{kind}/download renders one list as CSV, JSON or PDF
- /admin/export bundles every section as JSON or multi-section CSV
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from backend.core.audit import log_auto_block_check, log_data_exported, log_user_unblocked
from backend.core.auth import AuthenticatedUser, require_admin
from backend.core.metrics import metrics
from backend.core.rpc import RPCGateway, get_rpc_gateway
from backend.models.schemas import (
    AnnadanamListResponse,
    AutoBlockResponse,
    BlockedUsersResponse,
    ErrorResponse,
    ExportFormat,
    ListKind,
    RowListResponse,
    UnblockResponse,
)
from backend.modules.exporters import (
    ANNADANAM_CSV_HEADERS,
    ANNADANAM_PDF_COLUMNS,
    BOOKING_CSV_HEADERS,
    BOOKING_PDF_COLUMNS,
    CONTACT_CSV_HEADERS,
    CONTACT_PDF_COLUMNS,
    DONATION_CSV_HEADERS,
    DONATION_PDF_COLUMNS,
    PdfColumn,
    bulk_export_csv,
    export_filename,
    format_timestamp,
    rows_to_csv,
    rows_to_json,
    rows_to_pdf,
)
from backend.services.admin_service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)

MEDIA_TYPES = {
    ExportFormat.JSON: "application/json",
    ExportFormat.CSV: "text/csv; charset=utf-8",
    ExportFormat.PDF: "application/pdf",
}

# kind -> (file stem, PDF title, CSV headers, PDF columns)
LIST_EXPORTS: Dict[ListKind, Tuple[str, str, List[str], List[PdfColumn]]] = {
    ListKind.ANNADANAM: ("annadanam-bookings", "Annadanam Bookings", ANNADANAM_CSV_HEADERS, ANNADANAM_PDF_COLUMNS),
    ListKind.POOJA: ("pooja-bookings", "Pooja Bookings", BOOKING_CSV_HEADERS, BOOKING_PDF_COLUMNS),
    ListKind.VOLUNTEERS: ("volunteer-bookings", "Volunteer Bookings", BOOKING_CSV_HEADERS, BOOKING_PDF_COLUMNS),
    ListKind.DONATIONS: ("donations", "Donations", DONATION_CSV_HEADERS, DONATION_PDF_COLUMNS),
    ListKind.CONTACTS: ("contact-messages", "Contact Messages", CONTACT_CSV_HEADERS, CONTACT_PDF_COLUMNS),
}


def get_admin_service(gateway: RPCGateway = Depends(get_rpc_gateway)) -> AdminService:
    return AdminService(gateway)


def _attachment(content: Any, fmt: ExportFormat, filename: str) -> Response:
    return Response(
        content=content,
        media_type=MEDIA_TYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# Lists
@router.get("/annadanam", response_model=AnnadanamListResponse)
def list_annadanam(
    booking_date: Optional[date] = Query(None, alias="date"),
    session: Optional[str] = Query(None, description="'all', a band ('1pm-3pm', '8pm-10pm') or a session label"),
    service: AdminService = Depends(get_admin_service),
    admin: AuthenticatedUser = Depends(require_admin),
) -> AnnadanamListResponse:
    """Annadanam bookings for a day, with completed sessions flagged."""
    rows = service.list_annadanam(booking_date, session)
    return AnnadanamListResponse(
        items=rows,
        total=len(rows),
        date=booking_date.isoformat() if booking_date else None,
        session=session,
    )


@router.get("/pooja", response_model=RowListResponse)
def list_pooja(
    start: Optional[date] = None,
    end: Optional[date] = None,
    service: AdminService = Depends(get_admin_service),
    admin: AuthenticatedUser = Depends(require_admin),
) -> RowListResponse:
    rows = service.list_pooja(start, end)
    return RowListResponse(items=rows, total=len(rows))


@router.get("/volunteers", response_model=RowListResponse)
def list_volunteers(
    start: Optional[date] = None,
    end: Optional[date] = None,
    service: AdminService = Depends(get_admin_service),
    admin: AuthenticatedUser = Depends(require_admin),
) -> RowListResponse:
    rows = service.list_volunteers(start, end)
    return RowListResponse(items=rows, total=len(rows))


@router.get("/donations", response_model=RowListResponse)
def list_donations(
    start: Optional[date] = None,
    end: Optional[date] = None,
    service: AdminService = Depends(get_admin_service),
    admin: AuthenticatedUser = Depends(require_admin),
) -> RowListResponse:
    rows = service.list_donations(start, end)
    return RowListResponse(items=rows, total=len(rows))


@router.get("/contacts", response_model=RowListResponse)
def list_contacts(
    start: Optional[date] = None,
    end: Optional[date] = None,
    service: AdminService = Depends(get_admin_service),
    admin: AuthenticatedUser = Depends(require_admin),
) -> RowListResponse:
    rows = service.list_contacts(start, end)
    return RowListResponse(items=rows, total=len(rows))


# Blocking policy
@router.get("/blocked-users", response_model=BlockedUsersResponse)
def blocked_users(
    service: AdminService = Depends(get_admin_service),
    admin: AuthenticatedUser = Depends(require_admin),
) -> BlockedUsersResponse:
    """All block records, split into active and unblocked."""
    return BlockedUsersResponse(**service.blocked_users_overview())


@router.post("/blocked-users/check", response_model=AutoBlockResponse)
def run_auto_block_check(
    service: AdminService = Depends(get_admin_service),
    admin: AuthenticatedUser = Depends(require_admin),
) -> AutoBlockResponse:
    """Run the backend's consecutive no-show check now."""
    result = service.run_auto_block_check()
    log_auto_block_check(admin.email, result["blocked_count"])
    return AutoBlockResponse(**result)


@router.post("/blocked-users/{user_id}/unblock", response_model=UnblockResponse)
def unblock_user(
    user_id: str,
    email: Optional[str] = Query(None, description="Email of the blocked user, for the audit log"),
    service: AdminService = Depends(get_admin_service),
    admin: AuthenticatedUser = Depends(require_admin),
) -> UnblockResponse:
    """
    Lift a block.

    Raises:
        NotFoundError: 404 when the user is unknown or not blocked
    """
    notes = service.unblock(user_id, admin.id)
    log_user_unblocked(admin.email, user_id, email)
    return UnblockResponse(user_id=user_id, notes=notes)


# Downloads
def _pdf_rows(kind: ListKind, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if kind in (ListKind.DONATIONS, ListKind.CONTACTS):
        return [{**row, "created_at": format_timestamp(row.get("created_at"))} for row in rows]
    return rows


@router.get("/{kind}/download")
def download_list(
    kind: ListKind,
    fmt: ExportFormat = Query(ExportFormat.CSV, alias="format"),
    start: Optional[date] = None,
    end: Optional[date] = None,
    booking_date: Optional[date] = Query(None, alias="date"),
    session: Optional[str] = None,
    service: AdminService = Depends(get_admin_service),
    admin: AuthenticatedUser = Depends(require_admin),
) -> Response:
    """Render one admin list as a file."""
    stem, title, headers, columns = LIST_EXPORTS[kind]

    if kind == ListKind.ANNADANAM:
        rows = service.list_annadanam(booking_date, session)
        start = end = booking_date
    elif kind == ListKind.POOJA:
        rows = service.list_pooja(start, end)
    elif kind == ListKind.VOLUNTEERS:
        rows = service.list_volunteers(start, end)
    elif kind == ListKind.DONATIONS:
        rows = service.list_donations(start, end)
    else:
        rows = service.list_contacts(start, end)

    if fmt == ExportFormat.JSON:
        content: Any = rows_to_json(rows)
    elif fmt == ExportFormat.CSV:
        content = rows_to_csv(rows, headers)
    else:
        subtitle = f"{start or 'all'} to {end or 'all'}"
        if kind == ListKind.ANNADANAM and session:
            subtitle = f"{subtitle} | {session}"
        content = rows_to_pdf(title, columns, _pdf_rows(kind, rows), subtitle=subtitle)

    metrics.increment('exports_generated')
    log_data_exported(admin.email, kind.value, fmt.value, len(rows))
    return _attachment(content, fmt, export_filename(stem, fmt.value, start, end))


@router.get("/export")
def bulk_export(
    start: Optional[date] = None,
    end: Optional[date] = None,
    fmt: ExportFormat = Query(ExportFormat.JSON, alias="format"),
    service: AdminService = Depends(get_admin_service),
    admin: AuthenticatedUser = Depends(require_admin),
) -> Response:
    """
    Export every section in one file.

    A section whose procedure fails is exported empty. PDF is not offered
    for the bulk export.
    """
    if fmt == ExportFormat.PDF:
        raise HTTPException(status_code=400, detail="Bulk export supports json and csv only")

    payload = service.collect_bulk_export(start, end)
    generated_at = datetime.now()
    if fmt == ExportFormat.JSON:
        content = rows_to_json({
            "exported_at": generated_at.isoformat(),
            "date_range": {
                "start": start.isoformat() if start else None,
                "end": end.isoformat() if end else None,
            },
            **payload,
        })
    else:
        content = bulk_export_csv(payload, start, end, generated_at=generated_at)

    total = sum(len(rows) for rows in payload.values())
    metrics.increment('exports_generated')
    log_data_exported(admin.email, "bulk", fmt.value, total)
    return _attachment(content, fmt, export_filename("admin-export", fmt.value, start, end))
