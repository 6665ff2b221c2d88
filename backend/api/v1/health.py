"""
Health check endpoints.

Provides multiple levels of health checks:
- /health: Quick overview of system health
- /health/detailed: Configuration and rate limiter state with metrics
- /health/ready: Container readiness check
- /health/live: Container liveness check
- /health/metrics: Application metrics
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter

from backend.config import settings, get_gemini_api_key
from backend.core.auth import current_admin_emails
from backend.core.metrics import metrics
from backend.core.rate_limit import chat_rate_limiter
from backend.models.schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Check whether the remote backend and the chat model are configured.

    Returns:
        HealthResponse, "degraded" when the remote backend is missing
    """
    backend_ok = settings.supabase_configured
    return HealthResponse(
        status="healthy" if backend_ok else "degraded",
        version=settings.APP_VERSION,
        backend_configured=backend_ok,
        chat_configured=bool(get_gemini_api_key()),
        active_chat_streams=metrics.active_chat_streams,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/ready")
async def readiness_check() -> dict:
    """
    Container readiness check.
    Ready once the remote backend credentials are present.
    """
    if settings.supabase_configured:
        return {"status": "ready"}
    return {"status": "not ready", "error": "Remote backend not configured"}


@router.get("/live")
async def liveness_check() -> dict:
    """
    Container liveness check.
    Returns 200 if service is alive.
    """
    return {"status": "alive"}


@router.get("/detailed")
async def detailed_health_check() -> Dict[str, Any]:
    """
    Comprehensive health check for monitoring.

    Returns the status of the remote backend, the chat model, the admin
    allowlist and the chat rate limiter, plus application metrics.
    """
    checks: Dict[str, Any] = {}

    checks["backend"] = {
        "status": "healthy" if settings.supabase_configured else "unhealthy",
        "configured": settings.supabase_configured,
        "rpc_success_rate": metrics.rpc_success_rate,
    }

    checks["chat"] = {
        "status": "healthy" if get_gemini_api_key() else "degraded",
        "model": settings.GEMINI_MODEL,
        "active_streams": metrics.active_chat_streams,
    }

    # An empty allowlist admits every signed-in user
    allowlist = current_admin_emails()
    checks["admin_allowlist"] = {
        "status": "healthy" if allowlist else "degraded",
        "entries": len(allowlist),
    }

    checks["rate_limiter"] = {
        "status": "healthy",
        "enabled": settings.RATE_LIMIT_ENABLED,
        "tracked_keys": chat_rate_limiter.tracked_keys,
        "max_keys": chat_rate_limiter.max_keys,
    }

    checks["metrics"] = metrics.to_dict()

    unhealthy_components = [
        name for name, check in checks.items()
        if isinstance(check, dict) and check.get("status") == "unhealthy"
    ]

    overall_status = "healthy"
    if unhealthy_components:
        overall_status = "unhealthy"
    elif any(
        isinstance(check, dict) and check.get("status") == "degraded"
        for check in checks.values()
    ):
        overall_status = "degraded"

    return {
        "status": overall_status,
        "version": settings.APP_VERSION,
        "environment": "production" if settings.is_production else "development",
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/metrics")
async def get_metrics() -> Dict[str, Any]:
    """
    Get application metrics.

    Returns current values of all tracked metrics including RPC counters,
    chat counters, exports and per-procedure latency statistics.
    """
    return {
        "metrics": metrics.to_dict(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
