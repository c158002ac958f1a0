"""
Incident mirror.

Keeps the last-seen ServiceNow state of each incident in DynamoDB. Each write
replaces the whole row for its sys_id; a failed write is logged and reported
through the returned WriteResult only.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import ValidationError

from models.incident import MirroredIncident
from repositories.dynamodb_repo import DynamoDbRepository
from utils.error_handling import MirrorWriteFailed, WriteResult
from utils.logging_config import get_logger

logger = get_logger(__name__)


class IncidentMirror:
    """Best-effort upsert of incidents into the local store."""

    def __init__(self, repository: DynamoDbRepository, environment: str, project_name: str):
        self.repository = repository
        self.environment = environment
        self.project_name = project_name

    def upsert(self, incident: Any) -> WriteResult:
        if not isinstance(incident, Mapping) or not incident.get("sys_id"):
            logger.warning("Incident has no sys_id; skipping mirror write")
            return WriteResult.failure(MirrorWriteFailed("Incident has no sys_id"))

        incident_id = incident["sys_id"]
        try:
            item = MirroredIncident.from_upstream(
                incident, self.environment, self.project_name
            ).to_item()
            self.repository.put(item)
        except ValidationError as exc:
            logger.error(
                "Incident could not be projected for mirroring",
                extra={"incident_id": str(incident_id), "error_count": exc.error_count()},
            )
            return WriteResult.failure(MirrorWriteFailed(str(exc)))
        except Exception as exc:
            logger.error(
                "Failed to store incident in DynamoDB",
                extra={"incident_id": str(incident_id), "error": str(exc)},
            )
            return WriteResult.failure(MirrorWriteFailed(str(exc)))

        logger.debug("Incident stored in DynamoDB", extra={"incident_id": incident_id})
        return WriteResult.success()

    def upsert_many(self, incidents: list) -> int:
        """Mirror each incident in order; returns how many were written."""
        written = 0
        for incident in incidents:
            if self.upsert(incident).ok:
                written += 1
        return written
