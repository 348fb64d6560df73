"""Health and readiness checks."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy import inspect, select, text
from sqlalchemy.exc import SQLAlchemyError

from hr_payroll.api.dependencies import DbSession
from hr_payroll.config import get_settings
from hr_payroll.models import AuditLogEntry, Base

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    engine_version: str
    database: str
    audit_trail: str


class ReadinessResponse(BaseModel):
    status: str
    missing_tables: list[str] = []


def _check(db, statement) -> str:
    try:
        db.execute(statement)
        return "healthy"
    except SQLAlchemyError as e:
        logger.warning("Health check failed: %s", e)
        db.rollback()
        return "unhealthy"


@router.get("/health", response_model=HealthResponse)
def health_check(db: DbSession) -> HealthResponse:
    """Report whether the record store and the audit trail can be read."""
    database = _check(db, text("SELECT 1"))
    audit_trail = _check(db, select(AuditLogEntry.entry_id).limit(1))

    return HealthResponse(
        status="healthy" if database == audit_trail == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        engine_version=get_settings().engine_version,
        database=database,
        audit_trail=audit_trail,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
)
def readiness_check(db: DbSession, response: Response) -> ReadinessResponse:
    """Ready once every mapped table exists."""
    try:
        existing = set(inspect(db.get_bind()).get_table_names())
    except SQLAlchemyError as e:
        logger.warning("Readiness check failed: %s", e)
        existing = set()

    missing = sorted(set(Base.metadata.tables) - existing)
    if missing:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="not_ready", missing_tables=missing)
    return ReadinessResponse(status="ready")


@router.get("/live")
def liveness_check() -> dict[str, str]:
    return {"status": "alive"}
