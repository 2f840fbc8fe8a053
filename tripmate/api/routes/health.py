"""
Health check endpoints for monitoring and deployment.
"""

from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tripmate.api.deps import DbSession
from tripmate.config import settings
from tripmate.database import utcnow
from tripmate.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


class HealthStatus(BaseModel):
    """Health check response model."""
    status: str
    timestamp: datetime
    version: str
    environment: str
    checks: dict[str, bool]


class ReadinessStatus(BaseModel):
    """Readiness check response model."""
    ready: bool
    checks: dict[str, dict]


@router.get("", response_model=HealthStatus)
@router.get("/", response_model=HealthStatus, include_in_schema=False)
async def health_check() -> HealthStatus:
    """
    Basic health check endpoint.

    Returns basic application status without checking dependencies.
    """
    return HealthStatus(
        status="healthy",
        timestamp=utcnow(),
        version="0.1.0",
        environment=settings.environment,
        checks={"app": True},
    )


@router.get("/ready", response_model=ReadinessStatus)
def readiness_check(db: DbSession) -> ReadinessStatus:
    """
    Readiness check with dependency verification.

    Checks database connectivity and whether an LLM key is configured.
    """
    checks = {}
    all_ready = True

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = {"status": "ok"}
    except SQLAlchemyError as e:
        checks["database"] = {"status": "error", "error": str(e)}
        all_ready = False
        logger.error("health_check_db_failed", error=str(e))

    llm_key = {
        "google": settings.google_api_key,
        "openai": settings.openai_api_key,
        "anthropic": settings.anthropic_api_key,
    }.get(settings.llm_provider, "")
    checks["llm"] = {
        "status": "ok" if llm_key else "not_configured",
        "provider": settings.llm_provider,
        "configured": bool(llm_key),
    }

    return ReadinessStatus(ready=all_ready, checks=checks)


@router.get("/live")
async def liveness_check() -> dict:
    """
    Simple liveness probe.

    Returns 200 if the application process is running.
    """
    return {"status": "alive", "timestamp": utcnow().isoformat()}
