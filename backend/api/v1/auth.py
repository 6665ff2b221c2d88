"""
Sign-in endpoints.

The UI posts the admin's email and password here; the token returned is
sent back as ``Authorization: Bearer`` on admin routes.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from supabase import AuthError

from backend.core.audit import AuditEvent, log_admin_signed_in, log_security_event
from backend.core.auth import AuthenticatedUser, current_admin_emails, get_current_user, is_admin_email
from backend.core.supabase_client import create_anon_client
from backend.models.schemas import LoginRequest, LoginResponse, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=LoginResponse)
def login(request: LoginRequest) -> LoginResponse:
    """
    Email/password sign-in through the remote backend.

    Raises:
        HTTPException: 401 for rejected credentials
    """
    client = create_anon_client()
    try:
        result = client.auth.sign_in_with_password({
            "email": request.email,
            "password": request.password,
        })
    except AuthError as e:
        log_security_event(
            AuditEvent.AUTHENTICATION_FAILED,
            actor=request.email,
            details={"reason": str(e)},
        )
        raise HTTPException(status_code=401, detail="Invalid email or password")

    user, session = result.user, result.session
    if user is None or session is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    email = (user.email or request.email).lower()
    is_admin = is_admin_email(email, current_admin_emails())
    if is_admin:
        log_admin_signed_in(email)
    logger.info(f"Signed in {email} (admin={is_admin})")

    return LoginResponse(
        id=str(user.id),
        email=email,
        is_admin=is_admin,
        access_token=session.access_token,
        expires_at=session.expires_at,
    )


@router.get("/me", response_model=UserResponse)
def me(user: AuthenticatedUser = Depends(get_current_user)) -> UserResponse:
    """Return the signed-in user and whether they may use the admin panel."""
    return UserResponse(id=user.id, email=user.email, is_admin=user.is_admin)
