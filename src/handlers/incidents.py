"""
Handler for /incidents and /incidents/{id}.

Fetches ServiceNow credentials, picks the incident operation from the HTTP
method and the presence of an id, and always answers with a JSON envelope
carrying CORS headers.
"""

from __future__ import annotations

import base64
import json
from typing import Any, Dict, Optional

from models.response import Envelope
from utils.config import GatewayConfig
from utils.error_handling import CredentialUnavailable, InvalidRequest
from utils.logging_config import get_logger, set_log_level

logger = get_logger(__name__)

# Lazy-loaded collaborators; boto3 clients are reused across warm invocations.
_credential_provider: Optional["CredentialProvider"] = None
_repositories: Dict[str, "DynamoDbRepository"] = {}
_session: Optional["requests.Session"] = None


def _get_credential_provider(config: GatewayConfig):
    """Lazy-load CredentialProvider, with a cache only when one is configured."""
    global _credential_provider
    if _credential_provider is None or _credential_provider.secret_id != config.credentials_secret_id:
        from services.credential_service import CredentialProvider
        from utils.cache_service import TTLCache

        cache = None
        if config.credentials_cache_ttl_seconds > 0:
            cache = TTLCache(ttl_seconds=config.credentials_cache_ttl_seconds)
        _credential_provider = CredentialProvider(config.credentials_secret_id, cache=cache)
    return _credential_provider


def _get_repository(table_name: str):
    """Lazy-load one DynamoDbRepository per table."""
    if table_name not in _repositories:
        from repositories.dynamodb_repo import DynamoDbRepository
        _repositories[table_name] = DynamoDbRepository(table_name)
    return _repositories[table_name]


def _get_session():
    """Lazy-load one requests session so connections survive warm invocations."""
    global _session
    if _session is None:
        import requests
        _session = requests.Session()
    return _session


def _build_incident_service(config: GatewayConfig, credentials):
    """Wire an IncidentService for this invocation's credentials."""
    from services.incident_service import IncidentService
    from services.mirror_service import IncidentMirror
    from services.servicenow_client import ServiceNowClient
    from services.telemetry_service import CallTelemetryRecorder

    return IncidentService(
        client=ServiceNowClient(
            credentials, session=_get_session(), timeout=config.upstream_timeout_seconds
        ),
        telemetry=CallTelemetryRecorder(
            _get_repository(config.api_logs_table_name),
            config.environment,
            config.project_name,
        ),
        mirror=IncidentMirror(
            _get_repository(config.incidents_table_name),
            config.environment,
            config.project_name,
        ),
    )


def _http_method(event: Dict[str, Any]) -> str:
    method = event.get("httpMethod") or (
        event.get("requestContext", {}).get("http", {}).get("method", "")
    )
    return method.upper()


def _incident_id(event: Dict[str, Any]) -> Optional[str]:
    """Path identifier from pathParameters, else from an /incidents/{id} path."""
    path_params = event.get("pathParameters") or {}
    if path_params.get("id"):
        return path_params["id"]

    path = event.get("path") or event.get("rawPath") or ""
    segments = [segment for segment in path.split("/") if segment]
    if len(segments) >= 2 and segments[-2] == "incidents":
        return segments[-1]
    return None


def _json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    raw = event.get("body")
    if not raw:
        return {}
    try:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw).decode("utf-8")
        return json.loads(raw)
    except ValueError as exc:
        raise InvalidRequest("Invalid JSON body") from exc


def _dispatch(event: Dict[str, Any], service) -> Envelope:
    method = _http_method(event)
    incident_id = _incident_id(event)

    if method == "GET":
        if incident_id:
            return service.get_incident(incident_id)
        return service.list_incidents(event.get("queryStringParameters") or {})

    if method == "POST":
        return service.create_incident(_json_body(event))

    if method == "PUT":
        if not incident_id:
            return Envelope.failure(400, "Incident ID is required for updates")
        return service.update_incident(incident_id, _json_body(event))

    return Envelope.failure(405, "Method not allowed")


def lambda_handler(event, context):
    """Route one incident request; never raises."""
    aws_request_id = getattr(context, "aws_request_id", None)

    try:
        logger.info(
            "Processing incident request",
            extra={
                "aws_request_id": aws_request_id,
                "method": _http_method(event),
                "path": event.get("path") or event.get("rawPath"),
            },
        )
        config = GatewayConfig.from_environment()
        set_log_level(config.log_level)
        credentials = _get_credential_provider(config).fetch()
        envelope = _dispatch(event, _build_incident_service(config, credentials))
    except CredentialUnavailable:
        logger.error("Credentials unavailable", extra={"aws_request_id": aws_request_id})
        envelope = Envelope.failure(500, "Internal server error")
    except InvalidRequest as exc:
        envelope = Envelope.failure(exc.status_code, str(exc))
    except Exception:
        logger.exception("Incident request failed", extra={"aws_request_id": aws_request_id})
        envelope = Envelope.failure(500, "Internal server error")

    logger.info(
        "Request completed",
        extra={"status_code": envelope.status_code, "aws_request_id": aws_request_id},
    )
    return envelope.to_lambda_response()
