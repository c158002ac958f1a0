"""
Runtime configuration for the incident gateway.

Built once per invocation and handed to each component, so no service reads
the process environment on its own.
"""

from dataclasses import dataclass
import os
from typing import Mapping, Optional


@dataclass(frozen=True)
class GatewayConfig:
    """Resource names and tuning knobs for one invocation."""

    environment: str = "dev"
    project_name: str = "servicenow-gateway"
    credentials_secret_id: str = ""
    incidents_table_name: str = ""
    api_logs_table_name: str = ""
    log_level: str = "INFO"

    # 0 keeps the per-invocation fetch; > 0 opts into the in-process cache.
    credentials_cache_ttl_seconds: int = 0
    # None leaves the timeout to the Lambda runtime.
    upstream_timeout_seconds: Optional[float] = None

    @classmethod
    def from_environment(cls, env: Optional[Mapping[str, str]] = None) -> "GatewayConfig":
        """Load settings from environment variables."""
        env = os.environ if env is None else env
        timeout = env.get("UPSTREAM_TIMEOUT_SECONDS")
        return cls(
            environment=env.get("ENVIRONMENT", "dev"),
            project_name=env.get("PROJECT_NAME", "servicenow-gateway"),
            credentials_secret_id=env.get("SERVICENOW_CREDENTIALS_SECRET", ""),
            incidents_table_name=env.get("INCIDENTS_TABLE_NAME", ""),
            api_logs_table_name=env.get("API_LOGS_TABLE_NAME", ""),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            credentials_cache_ttl_seconds=int(env.get("CREDENTIALS_CACHE_TTL_SECONDS") or 0),
            upstream_timeout_seconds=float(timeout) if timeout else None,
        )
