"""Health & Readiness Checks — liveness plus database and catalog readiness.

Invariants:
    - GET /api/health/ returns 200 whenever the process is up
    - GET /api/health/ready returns 503 unless the database answers AND the catalog
      has been seeded (purchases are impossible against an empty catalog)
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

import merch_store.infrastructure.database as database
from merch_store.core.errors import PersistenceError
from merch_store.infrastructure.sql_store import SqlCatalog

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/health", tags=["health"])

SERVICE_NAME = "merch-store-api"
SERVICE_VERSION = "1.0.0"


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
    }


@router.get("/ready")
async def readiness():
    """Ready once the database answers and the merch catalog is non-empty."""
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        return _not_ready("database_unavailable")
    try:
        items = await SqlCatalog(manager).list_items()
    except PersistenceError:
        return _not_ready("catalog_unreadable")
    if not items:
        return _not_ready("catalog_empty")
    return {
        "status": "ready",
        "checks": {"database": "healthy", "catalog_items": len(items)},
    }


def _not_ready(reason: str) -> JSONResponse:
    logger.warning(f"Readiness check failed: {reason}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "reason": reason},
    )
