from fastapi import APIRouter
from datetime import datetime, timezone

from app.blockchain import blockchain_registry
from app.services.sale import sale_service

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "supported_chains": [c.value for c in blockchain_registry.get_supported_chains()],
    }


@router.get("/ready", summary="Readiness check")
async def readiness_check():
    """
    Readiness check - verifies the sale is built and its token ledger is reachable.
    """
    checks = {}

    try:
        ledger = sale_service.crowdsale.token
        checks["sale"] = True
        checks[f"{ledger.chain_type.value}_ledger"] = ledger.is_connected()
    except Exception:
        checks["sale"] = False

    all_healthy = all(checks.values())

    return {
        "status": "ready" if all_healthy else "degraded",
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
