"""Toronto region options and their map colours."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

SATURATION = 62
LIGHTNESS = 60
MIN_HUE_DISTANCE = 38
MAX_HUE_SHIFTS = 12
TORONTO_DEFAULT_COLOR = "#94a3b8"


@dataclass(slots=True, frozen=True)
class Region:
    id: str
    label: str
    area_name: Optional[str]
    disabled: bool


REGION_OPTIONS: tuple[Region, ...] = (
    Region("all", "Full Toronto", None, False),
    Region("scarborough", "Scarborough", "SCARBOROUGH", False),
    Region("etobicoke", "Etobicoke", "ETOBICOKE", True),
    Region("north-york", "North York", "NORTH YORK", True),
    Region("east-york", "East York", "EAST YORK", True),
    Region("toronto", "Old Toronto", "TORONTO", True),
    Region("york", "York", "YORK", True),
)


def string_to_hue(value: str | None) -> int:
    if not value:
        return 0
    hue = 0
    for char in value:
        hue = (hue * 37 + ord(char)) % 360
    return hue


def hsl_to_hex(h: float, s: float, l: float) -> str:
    saturation = s / 100
    lightness = l / 100
    chroma = saturation * min(lightness, 1 - lightness)

    def channel(n: int) -> str:
        k = (n + h / 30) % 12
        value = lightness - chroma * max(min(k - 3, 9 - k, 1), -1)
        return f"{math.floor(value * 255 + 0.5):02x}"

    return f"#{channel(0)}{channel(8)}{channel(4)}"


def hue_distance(a: float, b: float) -> float:
    diff = abs(a - b) % 360
    return min(diff, 360 - diff)


@dataclass
class HueAllocator:
    """Hands out hues that stay at least ``min_distance`` degrees apart.

    Create one per rendering session; hues it has issued are remembered in
    ``used_hues``.
    """

    min_distance: int = MIN_HUE_DISTANCE
    used_hues: list[int] = field(default_factory=list)

    def next_hue(self, seed: int) -> int:
        hue = seed
        for _ in range(MAX_HUE_SHIFTS):
            if all(hue_distance(hue, used) >= self.min_distance for used in self.used_hues):
                break
            hue = (hue + self.min_distance) % 360
        self.used_hues.append(hue)
        return hue

    def color_for(self, area_name: str) -> str:
        return hsl_to_hex(self.next_hue(string_to_hue(area_name)), SATURATION, LIGHTNESS)


def build_region_color_map(
    regions: tuple[Region, ...] = REGION_OPTIONS,
    allocator: HueAllocator | None = None,
) -> dict[str, str]:
    allocator = allocator or HueAllocator()
    return {region.area_name: allocator.color_for(region.area_name) for region in regions if region.area_name}
