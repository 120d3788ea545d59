"""
Health Check Endpoints

- /health/live  - Basic liveness (app is running)
- /health/ready - Readiness check (database reachable, registration role seeded)
"""

from fastapi import APIRouter, HTTPException, status
from datetime import datetime
from typing import Dict, Any
import time

from sqlalchemy import select, text

from portal.core.config import settings
from portal.core.database import get_session_local
from portal.core.logging_config import logger
from portal.models.role import Role


router = APIRouter(prefix="/health", tags=["Health Checks"])


async def check_database() -> Dict[str, Any]:
    """Check database connectivity and that the registration role exists"""
    start = time.time()
    try:
        session_factory = get_session_local()
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
            role_id = await session.scalar(
                select(Role.id).where(Role.type == settings.REGISTRATION_ROLE_TYPE)
            )

            latency = (time.time() - start) * 1000
            return {
                "status": "healthy" if role_id else "degraded",
                "latency_ms": round(latency, 2),
                "registration_role_seeded": role_id is not None,
                "message": (
                    "Database connection successful" if role_id
                    else f"Role '{settings.REGISTRATION_ROLE_TYPE}' missing - registration will fail"
                ),
            }
    except Exception as e:
        latency = (time.time() - start) * 1000
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return {
            "status": "unhealthy",
            "latency_ms": round(latency, 2),
            "error": str(e),
            "message": "Database connection failed",
        }


def check_email_config() -> Dict[str, Any]:
    """Check email service configuration (not actual connectivity)"""
    if settings.USE_SENDGRID and settings.SENDGRID_API_KEY:
        return {"status": "healthy", "provider": "sendgrid", "configured": True}
    if settings.SMTP_USER and settings.SMTP_PASSWORD:
        return {"status": "healthy", "provider": "smtp", "configured": True, "host": settings.SMTP_HOST}
    return {
        "status": "degraded",
        "provider": "none",
        "configured": False,
        "message": "Email not configured - confirmation emails will fail",
    }


@router.get("/live")
async def liveness_check():
    """Liveness check - returns 200 while the process is alive."""
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
        "app": settings.APP_NAME,
    }


@router.get("/ready")
async def readiness_check():
    """
    Readiness check - 200 only when the database is reachable and seeded.
    """
    db_check = await check_database()
    is_ready = db_check.get("status") == "healthy"

    response = {
        "status": "ready" if is_ready else "not_ready",
        "timestamp": datetime.utcnow().isoformat(),
        "checks": {
            "database": db_check,
            "email": check_email_config(),
        },
    }

    if not is_ready:
        logger.warning(f"[HealthCheck] Readiness check failed: {response}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=response
        )

    return response
