"""Region option endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...schemas.traveltime import RegionModel, RegionsResponse
from ...services.regions import REGION_OPTIONS, TORONTO_DEFAULT_COLOR, HueAllocator, build_region_color_map

router = APIRouter(prefix="/regions", tags=["regions"])


@router.get("", response_model=RegionsResponse, status_code=status.HTTP_200_OK)
def list_regions() -> RegionsResponse:
    colors = build_region_color_map(REGION_OPTIONS, HueAllocator())
    return RegionsResponse(
        regions=[
            RegionModel(
                id=region.id,
                label=region.label,
                area_name=region.area_name,
                disabled=region.disabled,
                color=colors.get(region.area_name, TORONTO_DEFAULT_COLOR) if region.area_name else TORONTO_DEFAULT_COLOR,
            )
            for region in REGION_OPTIONS
        ],
        default_color=TORONTO_DEFAULT_COLOR,
    )
