"""
Incident operations against ServiceNow.

List, get, create and update share one skeleton: call ServiceNow, record
telemetry, classify the status, mirror what came back. `IncidentOperation`
captures what differs between them.
"""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Any, Dict, Optional
import uuid

from models.response import Envelope
from services.mirror_service import IncidentMirror
from services.servicenow_client import ServiceNowClient, incident_path
from services.telemetry_service import CallTelemetryRecorder
from utils.error_handling import TransportError, UpstreamRejected
from utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class IncidentOperation:
    """Per-operation parameters of the shared call/telemetry/mirror flow."""

    name: str
    method: str
    success_status: int
    failure_message: str
    not_found_eligible: bool = False
    returns_collection: bool = False


LIST_INCIDENTS = IncidentOperation(
    name="list_incidents",
    method="GET",
    success_status=200,
    failure_message="Failed to retrieve incidents from ServiceNow",
    returns_collection=True,
)
GET_INCIDENT = IncidentOperation(
    name="get_incident",
    method="GET",
    success_status=200,
    failure_message="Failed to retrieve incident from ServiceNow",
    not_found_eligible=True,
)
CREATE_INCIDENT = IncidentOperation(
    name="create_incident",
    method="POST",
    success_status=201,
    failure_message="Failed to create incident in ServiceNow",
)
UPDATE_INCIDENT = IncidentOperation(
    name="update_incident",
    method="PUT",
    success_status=200,
    failure_message="Failed to update incident in ServiceNow",
    not_found_eligible=True,
)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class IncidentService:
    """Compose transport, telemetry and mirror into one envelope per call."""

    def __init__(
        self,
        client: ServiceNowClient,
        telemetry: CallTelemetryRecorder,
        mirror: IncidentMirror,
    ):
        self.client = client
        self.telemetry = telemetry
        self.mirror = mirror

    def list_incidents(self, query: Optional[Dict[str, Any]] = None) -> Envelope:
        """Query parameters are passed to ServiceNow untouched."""
        return self._execute(LIST_INCIDENTS, incident_path(), query=query or {})

    def get_incident(self, incident_id: str) -> Envelope:
        return self._execute(GET_INCIDENT, incident_path(incident_id))

    def create_incident(self, incident: Dict[str, Any]) -> Envelope:
        return self._execute(CREATE_INCIDENT, incident_path(), body=incident)

    def update_incident(self, incident_id: str, changes: Dict[str, Any]) -> Envelope:
        return self._execute(UPDATE_INCIDENT, incident_path(incident_id), body=changes)

    def _execute(
        self,
        operation: IncidentOperation,
        path: str,
        query: Optional[Dict[str, Any]] = None,
        body: Optional[Any] = None,
    ) -> Envelope:
        request_id = str(uuid.uuid4())
        start = time.perf_counter()
        logger.info(
            "Calling ServiceNow",
            extra={"operation": operation.name, "request_id": request_id, "path": path},
        )

        try:
            response = self.client.send(operation.method, path, query=query, body=body)
        except TransportError as exc:
            self.telemetry.record(
                request_id, path, operation.method, 500, _elapsed_ms(start), error=str(exc)
            )
            logger.error(
                operation.failure_message,
                extra={"request_id": request_id, "error": str(exc)},
            )
            return Envelope.failure(500, operation.failure_message, details=str(exc))

        latency_ms = _elapsed_ms(start)

        if not response.ok:
            rejected = UpstreamRejected(response.status_code, response.data)
            self.telemetry.record(
                request_id, path, operation.method, response.status_code, latency_ms,
                error=str(rejected),
            )
            if operation.not_found_eligible and response.status_code == 404:
                logger.info("Incident not found", extra={"request_id": request_id, "path": path})
                return Envelope.failure(404, "Incident not found")

            logger.error(
                operation.failure_message,
                extra={"request_id": request_id, "upstream_status": response.status_code},
            )
            return Envelope.failure(500, operation.failure_message, details=str(rejected))

        self.telemetry.record(
            request_id, path, operation.method, response.status_code, latency_ms
        )

        result = response.result
        if operation.returns_collection:
            incidents = result if isinstance(result, list) else []
            self.mirror.upsert_many(incidents)
            logger.info(
                "ServiceNow call succeeded",
                extra={"operation": operation.name, "request_id": request_id,
                       "latency_ms": latency_ms, "count": len(incidents)},
            )
            return Envelope.ok(operation.success_status, incidents, count=len(incidents))

        self.mirror.upsert(result)
        logger.info(
            "ServiceNow call succeeded",
            extra={"operation": operation.name, "request_id": request_id, "latency_ms": latency_ms},
        )
        return Envelope.ok(operation.success_status, result)
