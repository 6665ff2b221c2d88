"""
Annadanam pass endpoints.

Anyone holding a pass link may look it up; only admins (at the counter)
may mark it attended.
"""
import logging

from fastapi import APIRouter, Depends

from backend.core.audit import log_attendance_marked
from backend.core.auth import AuthenticatedUser, require_admin
from backend.core.rpc import RPCGateway, get_rpc_gateway
from backend.models.schemas import ErrorResponse, PassResponse
from backend.services.pass_service import PassService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/passes", tags=["Passes"], responses={404: {"model": ErrorResponse}})


def get_pass_service(gateway: RPCGateway = Depends(get_rpc_gateway)) -> PassService:
    return PassService(gateway)


@router.get("/{token}", response_model=PassResponse)
def lookup_pass(token: str, service: PassService = Depends(get_pass_service)) -> PassResponse:
    """
    Look up the booking behind a pass token.

    Raises:
        NotFoundError: 404 "Invalid or expired pass"
    """
    booking = service.lookup(token)
    return PassResponse(booking=booking, attended=bool(booking.get("attended_at")))


@router.post("/{token}/attend", response_model=PassResponse)
def mark_attended(
    token: str,
    service: PassService = Depends(get_pass_service),
    admin: AuthenticatedUser = Depends(require_admin),
) -> PassResponse:
    """Mark the pass holder as attended."""
    booking = service.confirm_attendance(token)
    log_attendance_marked(admin.email, token)
    return PassResponse(booking=booking, attended=True)
