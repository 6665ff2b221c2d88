"""
FastAPI application entry point.
Single-container deployment optimized for local, HF Spaces, Streamlit Cloud.
"""
import sys
import logging
import threading
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.config import settings, get_gemini_api_key
from backend.core.errors import PortalError
from backend.api.v1.router import api_router

# Ensure logs directory exists
LOG_DIR = Path(settings.DATA_DIR) / "logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)

# Configure logging with both console and file handlers
log_level = logging.DEBUG if settings.DEBUG else logging.INFO
log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logging.basicConfig(
    level=log_level,
    format=log_format,
    handlers=[
        logging.StreamHandler(sys.stdout),
        RotatingFileHandler(
            LOG_DIR / "backend.log",
            maxBytes=10_000_000,  # 10MB
            backupCount=5,
            encoding="utf-8"
        )
    ]
)
logger = logging.getLogger(__name__)

# Error codes returned alongside PortalError messages
ERROR_CODES = {
    400: "INVALID_INPUT",
    404: "NOT_FOUND",
    502: "RPC_FAILED",
    503: "BACKEND_NOT_CONFIGURED",
}


# Global exception handler for uncaught thread exceptions
def _handle_thread_exception(args):
    """Handle uncaught exceptions in threads - logs to file for debugging."""
    logger.critical(
        f"UNCAUGHT EXCEPTION in thread '{args.thread.name}': {args.exc_type.__name__}: {args.exc_value}",
        exc_info=(args.exc_type, args.exc_value, args.exc_traceback)
    )

# Install the global thread exception handler
threading.excepthook = _handle_thread_exception


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    - Startup: report which collaborators are configured
    - Shutdown: log only; all durable state lives in the remote backend
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)

    if settings.supabase_configured:
        logger.info(f"Remote backend: {settings.SUPABASE_URL}")
    else:
        logger.warning("SUPABASE_URL / SUPABASE_SERVICE_KEY not set; admin and pass routes will return 503")

    if not get_gemini_api_key():
        logger.warning("GEMINI_API_KEY not set; chat routes will return 500")

    yield

    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Sabari Sastha Seva Samithi - bookings, passes, admin and assistant API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Add CORS middleware with explicit allowed methods and headers
# Note: For HF Spaces, we use allow_origin_regex to support *.hf.space pattern
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_origin_regex=r"https://.*\.hf\.space",
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Session-ID", "Accept", "Authorization"],
)


@app.exception_handler(PortalError)
async def portal_exception_handler(request: Request, exc: PortalError):
    """Map application errors to their HTTP status with the original message."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error_code": ERROR_CODES.get(exc.status_code, "ERROR")},
    )


# Global exception handler to prevent internal path exposure
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Handle uncaught exceptions and return sanitized error messages.

    Prevents internal server paths and sensitive information from being
    exposed in API responses. The full error is still logged for debugging.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: "
        f"{type(exc).__name__}: {str(exc)}",
        exc_info=True
    )

    error_message = "An internal error occurred. Please try again later."

    # Provide slightly more detail for common error types
    if isinstance(exc, ValueError):
        error_message = "Invalid input provided."
    elif isinstance(exc, PermissionError):
        error_message = "Access denied."
    elif isinstance(exc, TimeoutError):
        error_message = "The operation timed out. Please try again."

    return JSONResponse(
        status_code=500,
        content={"detail": error_message, "error_code": "INTERNAL_ERROR"}
    )


# Include API router
app.include_router(api_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backend.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )
