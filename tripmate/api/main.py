"""
FastAPI application entry point.

This is the main FastAPI application that handles:
- Trips and trip items (including the live item stream)
- Asset uploads and the download proxy
- AI classification endpoints
- Health checks
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tripmate.api.routes import (
    ai_router,
    downloads_router,
    health_router,
    items_router,
    trips_router,
    uploads_router,
)
from tripmate.config import settings
from tripmate.database import init_db
from tripmate.errors import TripMateError
from tripmate.logging_config import bind_request_context, configure_logging, get_logger
from tripmate.storage.item_feed import item_feed

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info(
        "application_starting",
        environment=settings.environment,
        llm_provider=settings.llm_provider,
        bucket=settings.minio_bucket_name,
    )
    if settings.environment == "development":
        init_db()

    yield

    # Shutdown
    item_feed.clear()
    logger.info("application_shutting_down")


# Create FastAPI application
app = FastAPI(
    title="Trip Mate",
    description="Shared trip expense and memory tracker",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "development" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


REQUEST_ID_HEADER = "X-Request-ID"


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Bind request id, method, path and trip id to every log event of the request."""
    request_id = bind_request_context(
        request.method,
        request.url.path,
        request.headers.get(REQUEST_ID_HEADER),
    )
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


# ─────────────────────────────────────────────────────────────────────────────
# Error Handlers
# ─────────────────────────────────────────────────────────────────────────────

@app.exception_handler(TripMateError)
async def trip_mate_error_handler(request: Request, exc: TripMateError) -> JSONResponse:
    """Map domain errors to {"error": message} with the error's status code."""
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            error=exc.message,
            error_type=type(exc).__name__,
            **exc.context,
        )
    else:
        logger.info(
            "request_rejected",
            status_code=exc.status_code,
            error=exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or incomplete request bodies are a 400, not a 422."""
    errors = jsonable_encoder(exc.errors())
    logger.info("request_validation_failed", errors=len(errors))
    return JSONResponse(
        status_code=400,
        content={"error": "Missing required fields", "details": errors},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "request_unhandled_error",
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ─────────────────────────────────────────────────────────────────────────────
# Include Routers
# ─────────────────────────────────────────────────────────────────────────────

app.include_router(health_router)
app.include_router(trips_router)
app.include_router(items_router)
app.include_router(uploads_router)
app.include_router(ai_router)
app.include_router(downloads_router)


# ─────────────────────────────────────────────────────────────────────────────
# Root Endpoint
# ─────────────────────────────────────────────────────────────────────────────

@app.get("/")
async def root():
    """Root endpoint with basic info."""
    return {
        "name": "Trip Mate",
        "version": "0.1.0",
        "status": "running",
        "docs": "/docs" if settings.environment != "production" else None,
        "health": "/health",
    }


# ─────────────────────────────────────────────────────────────────────────────
# Run with Uvicorn (for development)
# ─────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tripmate.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_level="debug" if settings.environment == "development" else "info",
    )
