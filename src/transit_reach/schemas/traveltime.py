"""Travel time request/response schemas."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class TravelTimeRequest(BaseModel):
    features: List[Any] = Field(
        ...,
        description="GeoJSON point features with [lng, lat] coordinates and an id/stop_id property.",
    )
    batch_size: Optional[int] = Field(default=None, ge=1, description="Stops per matrix request.")


class StopRouteRequest(BaseModel):
    id: str = Field(..., min_length=1)
    name: Optional[str] = None
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class RegionModel(BaseModel):
    id: str
    label: str
    area_name: Optional[str]
    disabled: bool
    color: str


class RegionsResponse(BaseModel):
    regions: List[RegionModel]
    default_color: str
