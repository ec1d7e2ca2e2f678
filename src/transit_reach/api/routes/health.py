"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...services.traveltime.traveltime_client import check_health

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/traveltime", status_code=status.HTTP_200_OK)
def health_traveltime() -> dict:
    """Report whether TravelTime credentials are configured."""
    return {"service": "traveltime", "configured": check_health()}
