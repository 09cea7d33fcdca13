"""
Health Endpoint

Probes the database and the Redis broker. Never requires a token.
"""

import asyncio
import logging
from datetime import datetime

import redis
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.database import get_db
from app.schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


def check_redis(url: str) -> str:
    try:
        r = redis.Redis.from_url(url, socket_timeout=2)
        r.ping()
        r.close()
        return "healthy"
    except Exception as e:
        logger.error(f"Redis health check failed: {e}")
        return "unhealthy"


@router.get("/health", response_model=HealthResponse, summary="System Health Check")
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Report "operational" when every component answers, "degraded" otherwise."""
    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "unhealthy"
        logger.error(f"Database health check failed: {e}")

    settings = get_settings()
    if settings.kitchen_notifications_enabled:
        # redis-py is blocking
        redis_status = await asyncio.to_thread(check_redis, settings.redis_url)
    else:
        redis_status = "disabled"


    overall = "operational" if all(
        s in ("healthy", "disabled") for s in [db_status, redis_status]
    ) else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        redis=redis_status,
        timestamp=datetime.now(),
    )
