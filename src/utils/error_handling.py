"""Gateway error taxonomy and the result type for best-effort writes."""

from dataclasses import dataclass
import json
from typing import Any, Optional


class GatewayError(Exception):
    """Base class for gateway errors."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class CredentialUnavailable(GatewayError):
    """Raised when ServiceNow credentials cannot be fetched or parsed."""

    def __init__(self, message: str = "Unable to retrieve ServiceNow credentials"):
        super().__init__(message, status_code=500)


class TransportError(GatewayError):
    """Raised when ServiceNow cannot be reached (DNS, TCP, TLS)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)


class UpstreamRejected(GatewayError):
    """A reachable ServiceNow instance answered with a non-2xx status."""

    def __init__(self, upstream_status: int, body: Any):
        self.upstream_status = upstream_status
        self.body = body
        super().__init__(
            f"ServiceNow API returned status {upstream_status}: {_render_body(body)}",
            status_code=upstream_status,
        )


class MirrorWriteFailed(GatewayError):
    """Mirroring an incident into the local store failed."""


class TelemetryWriteFailed(GatewayError):
    """Persisting a call log record failed."""


class InvalidRequest(GatewayError):
    """Raised when the inbound request cannot be interpreted."""

    def __init__(self, message: str = "Invalid request"):
        super().__init__(message, status_code=400)


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a best-effort write. Callers may ignore it."""

    ok: bool
    error: Optional[GatewayError] = None

    @classmethod
    def success(cls) -> "WriteResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: GatewayError) -> "WriteResult":
        return cls(ok=False, error=error)


def _render_body(body: Any) -> str:
    if isinstance(body, str):
        return json.dumps(body)
    try:
        return json.dumps(body, default=str)
    except (TypeError, ValueError):
        return repr(body)
