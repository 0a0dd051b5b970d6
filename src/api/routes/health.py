"""
Health Check Routes
Service health monitoring endpoints
"""

from typing import Any

from fastapi import APIRouter

from src.api.config import settings
from src.services.edi import SAMPLE_835, validate
from src.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
    }


@router.get("/health/detailed")
async def detailed_health_check() -> dict[str, Any]:
    """
    Detailed health check.

    Runs the bundled sample remittance through the validator.
    """
    validator_healthy = validate(SAMPLE_835).is_valid
    if not validator_healthy:
        logger.warning("Sample 835 failed validation during health check")

    overall_status = "healthy" if validator_healthy else "unhealthy"

    return {
        "status": overall_status,
        "service": settings.SERVICE_NAME,
        "checks": {
            "edi_validator": "healthy" if validator_healthy else "unhealthy",
        },
    }
