"""
ServiceNow Table API transport.

Sends one authenticated request and hands back the status and parsed body.
HTTP error statuses are results, not exceptions: only a failure to reach the
instance at all raises TransportError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from models.incident import ServiceNowCredentials
from utils.error_handling import TransportError
from utils.logging_config import get_logger

logger = get_logger(__name__)

INCIDENT_TABLE_PATH = "/api/now/table/incident"


def incident_path(incident_id: Optional[str] = None) -> str:
    """Table API path for the incident collection or one incident."""
    if incident_id is None:
        return INCIDENT_TABLE_PATH
    return f"{INCIDENT_TABLE_PATH}/{quote(str(incident_id), safe='')}"


@dataclass(frozen=True)
class UpstreamResponse:
    """Status code plus JSON body, or raw text when the body is not JSON."""

    status_code: int
    data: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def result(self) -> Any:
        """The `result` member of a Table API body, if there is one."""
        if isinstance(self.data, dict):
            return self.data.get("result")
        return None


class ServiceNowClient:
    """Basic-auth client for one ServiceNow instance."""

    def __init__(
        self,
        credentials: ServiceNowCredentials,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.instance_url = credentials.instance_url
        self._auth = (credentials.username, credentials.password.get_secret_value())
        self.session = session or requests.Session()
        self.timeout = timeout

    def send(
        self,
        method: str,
        path: str,
        query: Optional[Dict[str, Any]] = None,
        body: Optional[Any] = None,
    ) -> UpstreamResponse:
        """Perform one request against `instance_url + path`."""
        url = f"{self.instance_url}{path}"
        logger.debug("Calling ServiceNow", extra={"method": method, "path": path})

        try:
            response = self.session.request(
                method,
                url,
                params=query or None,
                json=body,
                headers={"Accept": "application/json", "Content-Type": "application/json"},
                auth=self._auth,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"Unable to reach ServiceNow: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            # Error pages from the instance or proxies are often HTML.
            data = response.text

        return UpstreamResponse(status_code=response.status_code, data=data)
