"""Health check and monitoring endpoints"""

from fastapi import APIRouter, Request
from app.config import NOTE_STORE_BACKEND
from app.db.session import get_pool_stats

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/pool")
async def get_pool_health():
    """
    Get connection pool health statistics.

    Only meaningful for the postgres note store backend; the Supabase
    backend talks to PostgREST over HTTP and has no local pool.
    """
    stats = get_pool_stats()
    if stats is None:
        return {"status": "not_applicable", "backend": NOTE_STORE_BACKEND}

    in_use = stats["checked_out"]
    total_capacity = stats["size"] + stats["max_overflow"]
    utilization = (in_use / total_capacity * 100) if total_capacity > 0 else 0

    # Determine health status
    if utilization >= 90:
        status = "critical"
    elif utilization >= 80:
        status = "warning"
    else:
        status = "healthy"

    return {
        "status": status,
        "backend": NOTE_STORE_BACKEND,
        "pool_size": stats["size"],
        "max_overflow": stats["max_overflow"],
        "available": stats["checked_in"],
        "in_use": in_use,
        "overflow": stats["overflow"],
        "utilization_percent": round(utilization, 2),
        "total_capacity": total_capacity,
    }


@router.get("/")
async def health_check(request: Request):
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": "kloud-notes-backend",
        "note_store": NOTE_STORE_BACKEND,
        "rate_limiter": type(getattr(request.app.state, "rate_limiter", None)).__name__,
    }
