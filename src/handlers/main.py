"""
Single entrypoint Lambda that routes API Gateway requests to handler modules.

Accepts both REST API (v1) and HTTP API (v2) event shapes.
"""

from typing import Callable, Optional, Tuple

from models.response import Envelope

from . import health_check, incidents


def _method_and_path(event) -> Tuple[str, str]:
    http = event.get("requestContext", {}).get("http", {})
    method = event.get("httpMethod") or http.get("method", "")
    path = event.get("path") or event.get("rawPath") or http.get("path", "")
    return method.upper(), path


def lambda_handler(event, context):
    """Entry point invoked by API Gateway."""
    method, path = _method_and_path(event)

    # (method or None for any, path prefix, handler); most specific first.
    route_table: Tuple[Tuple[Optional[str], str, Callable], ...] = (
        ("GET", "/health", health_check.lambda_handler),
        (None, "/incidents", incidents.lambda_handler),
    )

    for route_method, prefix, handler in route_table:
        if route_method and route_method != method:
            continue
        if path == prefix or path.startswith(prefix + "/"):
            return handler(event, context)

    return Envelope.failure(404, "Route not found", details=f"{method} {path}").to_lambda_response()
