from fastapi import APIRouter, Depends

from inventory.api.dependencies import get_provider
from inventory.services.provider import InventoryProvider

router = APIRouter(prefix="/health", tags=["Health"])


@router.get(
    "/",
    summary="Health check",
    description="Basic health check endpoint."
)
def health_check():
    """Simple health check."""
    return {"status": "healthy"}


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check if the database is ready."
)
def readiness_check(provider: InventoryProvider = Depends(get_provider)):
    """
    Readiness check for the database.

    Returns the database status and the content URI the catalog serves.
    """
    checks = {
        "database": False
    }

    try:
        checks["database"] = provider.database.ping()
    except Exception as e:
        checks["database_error"] = str(e)

    return {
        "status": "ready" if checks["database"] else "not_ready",
        "content_uri": provider.content_uri,
        "checks": checks
    }
