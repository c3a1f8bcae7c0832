"""Readiness probe for the database and the served dataset tables."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from limnohub.config import get_settings
from limnohub.datasets.abiotic_column import ABIOTIC_COLUMN
from limnohub.db.session import get_session_factory

router = APIRouter()
settings = get_settings()

PROBES = {
    "database": "SELECT 1",
    ABIOTIC_COLUMN.entity: "SELECT 1 FROM tbabioticocoluna LIMIT 1",
}


@router.get("/health/ready")
async def readiness_check(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> dict[str, str | dict[str, str]]:
    """Report each probe as ``healthy`` or ``unhealthy: <error type>``."""
    checks: dict[str, str] = {}

    async with session_factory() as session:
        for name, sql in PROBES.items():
            try:
                await session.execute(text(sql))
            except Exception as exc:
                checks[name] = f"unhealthy: {type(exc).__name__}"
                await session.rollback()
            else:
                checks[name] = "healthy"

    ready = all(status == "healthy" for status in checks.values())
    return {
        "status": "ready" if ready else "not_ready",
        "version": settings.app_version,
        "checks": checks,
    }
