"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running and the
database answers. Always 200 — `status` says whether we are degraded.
The probe is unauthenticated, so driver errors go to the log, not the
response body.
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from fitlog import __version__
from fitlog.db.engine import get_db

logger = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check server health and database connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await db.execute(text("SELECT 1"))
        checks["postgres"] = "ok"
    except Exception as e:
        logger.warning("fitlog.health.postgres_unavailable", error=str(e))
        checks["postgres"] = "error"

    status = "healthy" if checks["postgres"] == "ok" else "degraded"
    return {"status": status, **checks}
