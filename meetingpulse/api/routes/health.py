# meetingpulse/api/routes/health.py
import logging
from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from meetingpulse.core.config import get_settings
from meetingpulse.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """
    Response schema for the liveness and readiness probes.
    """

    status: str = Field(..., description="ok, or degraded when a dependency is down.", example="ok")
    app_name: str = Field(..., example="MeetingPulse")
    environment: str = Field(..., example="local")
    database: str | None = Field(
        None,
        description="Database reachability; only reported by /health/ready.",
        example="ok",
    )
    timestamp_utc: datetime = Field(..., example="2025-01-01T10:30:00Z")


def _base_payload(status: str, database: str | None = None) -> HealthResponse:
    settings = get_settings()
    return HealthResponse(
        status=status,
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        database=database,
        timestamp_utc=datetime.now(tz=timezone.utc),
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
    description=(
        "Verifies that the MeetingPulse process is up and answering requests. "
        "Does not touch the database, so it stays green while downstream "
        "components are degraded."
    ),
)
async def health_check() -> HealthResponse:
    return _base_payload("ok")


@router.get(
    "/health/ready",
    response_model=HealthResponse,
    summary="Readiness probe",
    description=(
        "Runs a trivial query against the configured database. Returns 503 "
        "with `database = \"unavailable\"` when it cannot be reached."
    ),
    responses={503: {"description": "Database unreachable."}},
)
async def readiness_check(db: AsyncSession = Depends(get_db)):
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Readiness check failed: database unreachable")
        payload = _base_payload("degraded", database="unavailable")
        return JSONResponse(
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            content=payload.model_dump(mode="json"),
        )
    return _base_payload("ok", database="ok")
