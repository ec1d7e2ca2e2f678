"""Session cache for resolved per-stop routes."""

from __future__ import annotations

import logging

from ...config import Settings, settings as default_settings
from ...models.domain import RouteSummary
from ...persistence.session import SessionStore

logger = logging.getLogger(__name__)


class RouteCache:
    """Route summaries keyed by destination, arrival time and stop id.

    Destination id and arrival time form the key namespace, so changing either
    orphans every existing entry. Storage failures never reach the caller.
    """

    def __init__(
        self,
        store: SessionStore | None,
        destination_id: str,
        arrival_time: str,
        prefix: str = "traveltime-route",
    ) -> None:
        self.store = store
        self.namespace = f"{prefix}:{destination_id}:{arrival_time}:"

    @classmethod
    def from_settings(cls, store: SessionStore | None, config: Settings | None = None) -> "RouteCache":
        config = config or default_settings
        return cls(
            store,
            destination_id=config.destination_id,
            arrival_time=config.arrival_time,
            prefix=config.route_cache_prefix,
        )

    def key_for(self, stop_id: str) -> str:
        return f"{self.namespace}{stop_id}"

    def get(self, stop_id: str) -> RouteSummary | None:
        if self.store is None:
            return None
        try:
            payload = self.store.read_json(self.key_for(stop_id))
            if not payload:
                return None
            return RouteSummary.from_dict(payload)
        except Exception as exc:
            logger.warning(f"Failed to read cached route payload for stop '{stop_id}': {exc}")
            return None

    def set(self, stop_id: str, summary: RouteSummary) -> None:
        if self.store is None:
            return
        try:
            self.store.write_json(self.key_for(stop_id), summary.to_dict())
        except Exception as exc:
            logger.warning(f"Unable to cache route payload for stop '{stop_id}': {exc}")
