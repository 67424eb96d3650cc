import logging
import os
import time

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

APP_VERSION = os.environ.get("APP_VERSION", "dev")


async def check_database(db: AsyncSession) -> dict:
    started = time.monotonic()
    try:
        await db.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Database probe failed")
        return {"status": "down"}
    return {"status": "up", "latency_ms": round((time.monotonic() - started) * 1000)}


async def get_health(db: AsyncSession) -> tuple[dict, int]:
    """Probe the database; the storefront is unusable without it.

    Returns the response body and 200 when the probe succeeds, 503 otherwise.
    """
    database = await check_database(db)
    healthy = database["status"] == "up"
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "version": APP_VERSION,
        "checks": {"database": database},
    }
    return body, 200 if healthy else 503
