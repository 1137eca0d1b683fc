"""
Health check endpoint.

Used by load balancers, monitoring systems, and humans
to verify the application is running and responsive.
"""

from fastapi import APIRouter, Depends

from ledger_core.api.deps import get_store
from ledger_core.store.base import LedgerStore

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(store: LedgerStore = Depends(get_store)):
    """
    Return application health status including storage connectivity.

    For a database-backed store this runs a trivial query, so a
    database outage reports the instance as degraded.
    """
    storage_status = "healthy" if store.check_health() else "unhealthy"

    return {
        "status": "healthy" if storage_status == "healthy" else "degraded",
        "service": "ledger-core",
        "storage": storage_status,
    }
