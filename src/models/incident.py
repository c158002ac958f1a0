"""ServiceNow credential, incident mirror and call log models."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class ServiceNowCredentials(BaseModel):
    """Secret payload stored in Secrets Manager. Never persisted or logged."""

    model_config = ConfigDict(hide_input_in_errors=True)

    instance_url: str = Field(min_length=1)
    username: str = Field(min_length=1)
    password: SecretStr

    @field_validator("instance_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


# Upstream field name -> mirrored attribute name.
MIRRORED_FIELDS = {
    "sys_id": "incident_id",
    "sys_created_on": "created_at",
    "sys_updated_on": "updated_at",
    "number": "number",
    "short_description": "short_description",
    "description": "description",
    "priority": "priority",
    "impact": "impact",
    "urgency": "urgency",
    "state": "state",
    "assigned_to": "assigned_to",
    "category": "category",
    "subcategory": "subcategory",
    "caller_id": "caller_id",
    "opened_by": "opened_by",
    "closed_at": "closed_at",
    "resolved_at": "resolved_at",
}


class MirroredIncident(BaseModel):
    """
    Local projection of a ServiceNow incident, keyed by incident_id (sys_id).

    Values are kept as ServiceNow sends them: plain strings, or link/value
    objects for reference fields. Fields outside the projection are dropped.
    """

    incident_id: str = Field(min_length=1)
    created_at: Optional[Any] = None
    updated_at: Optional[Any] = None
    number: Optional[Any] = None
    short_description: Optional[Any] = None
    description: Optional[Any] = None
    priority: Optional[Any] = None
    impact: Optional[Any] = None
    urgency: Optional[Any] = None
    state: Optional[Any] = None
    assigned_to: Optional[Any] = None
    category: Optional[Any] = None
    subcategory: Optional[Any] = None
    caller_id: Optional[Any] = None
    opened_by: Optional[Any] = None
    closed_at: Optional[Any] = None
    resolved_at: Optional[Any] = None
    environment: str
    project_name: str

    @classmethod
    def from_upstream(
        cls, incident: Mapping[str, Any], environment: str, project_name: str
    ) -> "MirroredIncident":
        """Project an upstream record onto the mirrored shape."""
        values = {
            target: incident.get(source)
            for source, target in MIRRORED_FIELDS.items()
        }
        return cls(**values, environment=environment, project_name=project_name)

    def to_item(self) -> dict:
        """DynamoDB item; unset attributes are omitted."""
        return _dynamodb_safe(self.model_dump(exclude_none=True))


class CallLogRecord(BaseModel):
    """One write-once entry per ServiceNow call attempt."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    endpoint: str
    method: str
    status_code: str
    response_time: int
    environment: str
    project_name: str
    error: Optional[str] = None

    @field_validator("status_code", mode="before")
    @classmethod
    def _status_as_text(cls, value: Any) -> str:
        return str(value)

    def to_item(self) -> dict:
        return self.model_dump()


def _dynamodb_safe(value: Any) -> Any:
    """DynamoDB rejects floats; store them as Decimal, recursing into containers."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {key: _dynamodb_safe(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_dynamodb_safe(item) for item in value]
    return value
