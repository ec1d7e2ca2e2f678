"""HTTP client for the TravelTime time-filter and routes endpoints."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import httpx

from ...config import Settings, settings as default_settings
from .errors import CredentialsNotConfiguredError, RateLimitError, TravelTimeHTTPError

RATE_LIMIT_STATUS = 429

logger = logging.getLogger(__name__)


class TravelTimeClient:
    def __init__(
        self,
        config: Settings | None = None,
        *,
        app_id: str | None = None,
        api_key: str | None = None,
        http_client: httpx.Client | None = None,
        max_retry_attempts: int | None = None,
        base_retry_delay_seconds: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config or default_settings
        self.app_id = app_id if app_id is not None else self.config.traveltime_app_id
        self.api_key = api_key if api_key is not None else self.config.traveltime_api_key
        self.matrix_url = self.config.matrix_api_url
        self.routes_url = self.config.routes_api_url
        self.timeout = self.config.request_timeout_seconds
        self.max_retry_attempts = (
            max_retry_attempts if max_retry_attempts is not None else self.config.max_retry_attempts
        )
        self.base_retry_delay_seconds = (
            base_retry_delay_seconds
            if base_retry_delay_seconds is not None
            else self.config.base_retry_delay_seconds
        )
        self._http_client = http_client
        self._sleep = sleep

    @property
    def credentials_configured(self) -> bool:
        return bool(self.app_id and self.api_key)

    def require_credentials(self) -> None:
        if not self.credentials_configured:
            raise CredentialsNotConfiguredError()

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Application-Id": self.app_id or "",
            "X-Api-Key": self.api_key or "",
        }

    def _post(self, url: str, payload: dict) -> httpx.Response:
        if self._http_client is not None:
            return self._http_client.post(url, json=payload, headers=self._headers())
        with httpx.Client(timeout=httpx.Timeout(self.timeout, connect=10.0)) as client:
            return client.post(url, json=payload, headers=self._headers())

    def time_filter(self, payload: dict) -> Any:
        """POST a matrix search, retrying rate-limited attempts with linear backoff."""
        self.require_credentials()

        attempt = 1
        while True:
            response = self._post(self.matrix_url, payload)
            if response.status_code == RATE_LIMIT_STATUS and attempt < self.max_retry_attempts:
                wait_time = self.base_retry_delay_seconds * attempt
                logger.warning(
                    f"TravelTime rate limit hit, retrying in {wait_time:.2f}s "
                    f"(attempt {attempt + 1}/{self.max_retry_attempts})"
                )
                self._sleep(wait_time)
                attempt += 1
                continue

            if response.status_code == RATE_LIMIT_STATUS:
                raise RateLimitError("time-filter", response.status_code, response.text)
            if not response.is_success:
                raise TravelTimeHTTPError("time-filter", response.status_code, response.text)
            return response.json()

    def routes(self, payload: dict) -> Any:
        """POST a single route search. Rate limiting is not retried."""
        self.require_credentials()

        response = self._post(self.routes_url, payload)
        if response.status_code == RATE_LIMIT_STATUS:
            raise RateLimitError("routes", response.status_code, response.text)
        if not response.is_success:
            raise TravelTimeHTTPError("routes", response.status_code, response.text)
        return response.json()


def check_health(config: Settings | None = None) -> bool:
    """TravelTime has no health endpoint; report whether requests can be authorised."""
    return TravelTimeClient(config).credentials_configured
