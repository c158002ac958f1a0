"""Pydantic models for credentials, incidents, call logs and API envelopes."""

from models.incident import (  # noqa: F401
    CallLogRecord,
    MirroredIncident,
    ServiceNowCredentials,
)
from models.response import CORS_HEADERS, Envelope  # noqa: F401
