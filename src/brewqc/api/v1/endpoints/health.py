"""Liveness, readiness and database status of the quality service."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from brewqc import __version__
from brewqc.db import get_db
from brewqc.schemas.common import HealthCheck

router = APIRouter()


@router.get("", response_model=HealthCheck)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthCheck:
    """
    Report service version and whether the check store is reachable.

    A failing database marks the service as degraded rather than down.
    """
    try:
        await db.execute(text("SELECT 1"))
        database = "healthy"
    except SQLAlchemyError:
        database = "unhealthy"

    return HealthCheck(
        status="healthy" if database == "healthy" else "degraded",
        version=__version__,
        database=database,
    )


@router.get("/ready")
async def readiness_check() -> dict[str, str]:
    """Accept traffic once the app has started."""
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict[str, str]:
    """Process is up."""
    return {"status": "alive"}
