"""
FastAPI application for the book cover inventory.

Provides endpoints for:
- Extracting metadata from a book cover photo with AI
- Saving reviewed book records
- Listing the saved inventory
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import get_settings
from .database import init_db
from .exceptions import InputError, StoreError, UpstreamError
from .models import ErrorResponse, HealthResponse
from .routers import books, extract
from .services.ai import get_ai_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info("Starting Book Inventory Service...")
    get_ai_service()
    init_db()
    logger.info("Services initialized successfully")
    yield
    logger.info("Shutting down Book Inventory Service...")


app = FastAPI(
    title="Book Inventory API",
    description="Build a book inventory from cover photos using AI",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Health Endpoints
# =============================================================================


@app.get("/", response_model=HealthResponse)
async def root() -> HealthResponse:
    """Root endpoint - health check."""
    return HealthResponse(
        status="healthy", message="Book Inventory API is running", version=__version__
    )


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", message="Service is healthy", version=__version__)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(extract.router)
app.include_router(books.router)


# =============================================================================
# Exception Handlers
# =============================================================================


def _error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(InputError)
async def input_error_handler(request: Request, exc: InputError):
    """Handle missing or unusable input."""
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
    return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies in the same shape as other input errors."""
    logger.warning("Invalid request to %s: %s", request.url.path, exc.errors())
    return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body")


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    """Handle AI model failures, passing the underlying message along."""
    logger.error("Error in extract API: %s", exc)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", details=str(exc)
    )


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    """Handle database failures without leaking driver details."""
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")
