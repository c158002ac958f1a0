"""Call telemetry: one call-log record per ServiceNow call attempt."""

from __future__ import annotations

from typing import Optional

from models.incident import CallLogRecord
from repositories.dynamodb_repo import DynamoDbRepository
from utils.error_handling import TelemetryWriteFailed, WriteResult
from utils.logging_config import get_logger

logger = get_logger(__name__)


class CallTelemetryRecorder:
    """Persist call logs. Never raises to its caller."""

    def __init__(self, repository: DynamoDbRepository, environment: str, project_name: str):
        self.repository = repository
        self.environment = environment
        self.project_name = project_name

    def record(
        self,
        request_id: str,
        endpoint: str,
        method: str,
        status_code: int,
        latency_ms: int,
        error: Optional[str] = None,
    ) -> WriteResult:
        try:
            record = CallLogRecord(
                request_id=request_id,
                endpoint=endpoint,
                method=method,
                status_code=status_code,
                response_time=latency_ms,
                environment=self.environment,
                project_name=self.project_name,
                error=error,
            )
            self.repository.put(record.to_item())
        except Exception as exc:
            logger.error(
                "Failed to log API request",
                extra={"request_id": request_id, "endpoint": endpoint, "error": str(exc)},
            )
            return WriteResult.failure(TelemetryWriteFailed(str(exc)))

        logger.debug(
            "API request logged",
            extra={"request_id": request_id, "endpoint": endpoint, "status_code": status_code},
        )
        return WriteResult.success()
