"""Thin Neon API client for the project list and consumption history endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from neon_usage.config import (
    API_BASE_URL,
    CONSUMPTION_HISTORY_ENDPOINT,
    PROJECTS_ENDPOINT,
    REQUEST_TIMEOUT_SECONDS,
    Settings,
)

logger = logging.getLogger(__name__)


@dataclass
class NeonAPIError(Exception):
    """Represents a failed API request."""

    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (status={self.status_code})"


class NeonAPIClient:
    """Minimal client for single-response GET calls. Failures are not retried."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = API_BASE_URL,
        timeout_seconds: int = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        if not api_key:
            raise ValueError("A Neon API key is required.")

        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            }
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "NeonAPIClient":
        return cls(
            settings.api_key,
            base_url=settings.base_url,
            timeout_seconds=settings.timeout_seconds,
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "NeonAPIClient":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def list_projects(self, params: dict[str, Any]) -> dict[str, Any]:
        return self._get(PROJECTS_ENDPOINT, params=params)

    def get_consumption_history(self, params: dict[str, Any]) -> dict[str, Any]:
        return self._get(CONSUMPTION_HISTORY_ENDPOINT, params=params)

    def _get(self, path: str, *, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self.base_url}/{path.lstrip('/')}"

        try:
            response = self.session.get(url, params=params, timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            raise NeonAPIError(f"Request failed: {exc}") from exc

        if not response.ok:
            logger.warning("Neon API %s returned %s", path, response.status_code)
            raise NeonAPIError(
                message=self._error_message(response),
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise NeonAPIError("Neon API returned non-JSON response") from exc

        if not isinstance(payload, dict):
            raise NeonAPIError("Unexpected response payload: root is not an object")
        return payload

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        status_text = response.reason or "Request failed"
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and payload.get("message"):
            return f"Neon API Error: {status_text}: {payload['message']}"
        return f"Neon API Error: {status_text}"
