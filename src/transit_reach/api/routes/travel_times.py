"""Travel time endpoints."""

from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import APIRouter, HTTPException, Request, status

from ...models.domain import BatchProgress
from ...schemas.traveltime import StopRouteRequest, TravelTimeRequest
from ...services.traveltime.errors import (
    CredentialsNotConfiguredError,
    InvalidStopError,
    RateLimitError,
    TravelTimeHTTPError,
)
from ...services.traveltime.matrix import BatchMatrixClient
from ...services.traveltime.routes import RouteClient

router = APIRouter(prefix="/travel-times", tags=["travel-times"])

logger = logging.getLogger(__name__)


def _log_progress(progress: BatchProgress) -> None:
    logger.info(
        f"Travel time batch {progress.batch_index + 1}/{progress.total_batches} {progress.stage} "
        f"({progress.completed_batches} completed)"
    )


def _raise_for_traveltime_error(exc: Exception, action: str) -> NoReturn:
    if isinstance(exc, InvalidStopError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if isinstance(exc, CredentialsNotConfiguredError):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    if isinstance(exc, RateLimitError):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(exc)) from exc
    if isinstance(exc, TravelTimeHTTPError):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    logging.exception(f"Error {action}: {exc}")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed {action}: {str(exc)}",
    ) from exc


@router.post("", status_code=status.HTTP_200_OK)
def compute_travel_times(payload: TravelTimeRequest) -> dict:
    try:
        result = BatchMatrixClient().run(
            payload.features,
            batch_size=payload.batch_size,
            on_progress=_log_progress,
        )
    except Exception as exc:
        _raise_for_traveltime_error(exc, "computing travel times")
    return result.to_dict()


@router.post("/routes", status_code=status.HTTP_200_OK)
def resolve_route(payload: StopRouteRequest, request: Request) -> dict:
    cache = getattr(request.app.state, "route_cache", None)
    try:
        summary = RouteClient(cache=cache).resolve(payload.model_dump())
    except Exception as exc:
        _raise_for_traveltime_error(exc, "resolving route")
    return summary.to_dict()
