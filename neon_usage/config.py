"""Application configuration for the Neon usage dashboard."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

API_BASE_URL = "https://console.neon.tech/api/v2"
PROJECTS_ENDPOINT = "/projects"
CONSUMPTION_HISTORY_ENDPOINT = "/consumption_history/v2/projects"

METRIC_COMPUTE_UNIT_SECONDS = "compute_unit_seconds"
METRIC_ROOT_BRANCH_BYTES = "root_branch_bytes_month"
METRIC_CHILD_BRANCH_BYTES = "child_branch_bytes_month"
METRIC_INSTANT_RESTORE_BYTES = "instant_restore_bytes_month"
METRIC_PUBLIC_TRANSFER_BYTES = "public_network_transfer_bytes"
METRIC_PRIVATE_TRANSFER_BYTES = "private_network_transfer_bytes"
METRIC_EXTRA_BRANCHES = "extra_branches_month"

REQUESTED_METRICS = (
    METRIC_COMPUTE_UNIT_SECONDS,
    METRIC_ROOT_BRANCH_BYTES,
    METRIC_CHILD_BRANCH_BYTES,
    METRIC_INSTANT_RESTORE_BYTES,
    METRIC_PUBLIC_TRANSFER_BYTES,
    METRIC_PRIVATE_TRANSFER_BYTES,
    METRIC_EXTRA_BRANCHES,
)

DEFAULT_LOOKBACK_DAYS = 30
DEFAULT_GRANULARITY = "daily"
PROJECTS_PAGE_LIMIT = 400
CACHE_TTL_SECONDS = 900
REQUEST_TIMEOUT_SECONDS = 30

ENV_NEON_API_KEY = "NEON_API_KEY"
ENV_NEON_ORG_ID = "NEON_ORG_ID"
ENV_NEON_API_BASE_URL = "NEON_API_BASE_URL"
ENV_LOG_LEVEL = "LOG_LEVEL"


class ConfigurationError(ValueError):
    """Raised when required settings are missing at startup."""


@dataclass(frozen=True)
class Settings:
    api_key: str
    org_id: str
    base_url: str = API_BASE_URL
    timeout_seconds: int = REQUEST_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from the process environment.

        Raises ``ConfigurationError`` naming every missing variable.
        """
        env = os.environ if environ is None else environ

        api_key = (env.get(ENV_NEON_API_KEY) or "").strip()
        org_id = (env.get(ENV_NEON_ORG_ID) or "").strip()

        missing = [
            name
            for name, value in ((ENV_NEON_API_KEY, api_key), (ENV_NEON_ORG_ID, org_id))
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")

        base_url = (env.get(ENV_NEON_API_BASE_URL) or "").strip() or API_BASE_URL
        return cls(api_key=api_key, org_id=org_id, base_url=base_url)


def resolve_log_level(name: str | None, default: int = logging.INFO) -> int:
    """Map a level name such as ``debug`` to its numeric level; unknown names give ``default``."""
    if not name or not name.strip():
        return default
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else default
