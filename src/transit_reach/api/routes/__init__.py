"""Route group exports."""

from . import health, regions, travel_times

__all__ = ["health", "regions", "travel_times"]
