"""Health probe: read-only connectivity checks against the AWS services used."""

import json
import os
import time
from datetime import datetime, timezone
from typing import Dict

import boto3

from utils.logging_config import get_logger

logger = get_logger(__name__)

HEALTH_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
    "Access-Control-Allow-Methods": "GET,OPTIONS",
}

# service name -> (boto3 client name, probe)
_PROBES = {
    "dynamodb": ("dynamodb", lambda client: client.list_tables(Limit=1)),
    "secretsManager": ("secretsmanager", lambda client: client.list_secrets(MaxResults=1)),
    "cloudwatchLogs": ("logs", lambda client: client.describe_log_groups(limit=1)),
}


def _check_services() -> Dict[str, Dict[str, str]]:
    checks = {}
    for name, (client_name, probe) in _PROBES.items():
        try:
            probe(boto3.client(client_name))
            checks[name] = {"status": "healthy", "message": f"{name} connection successful"}
        except Exception as exc:
            checks[name] = {"status": "unhealthy", "message": str(exc)}
    return checks


def _system_info() -> Dict[str, str]:
    return {
        "environment": os.environ.get("ENVIRONMENT", "dev"),
        "project": os.environ.get("PROJECT_NAME", "servicenow-gateway"),
        "region": os.environ.get("AWS_REGION", "unknown"),
        "memory": os.environ.get("AWS_LAMBDA_FUNCTION_MEMORY_SIZE", "unknown"),
        "version": os.environ.get("AWS_LAMBDA_FUNCTION_VERSION", "unknown"),
        "runtime": os.environ.get("AWS_EXECUTION_ENV", "unknown"),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def lambda_handler(event, context):
    """Return 200 when every dependency answers, 503 otherwise."""
    start = time.perf_counter()
    try:
        checks = _check_services()
        healthy = all(check["status"] == "healthy" for check in checks.values())
        response_time = int((time.perf_counter() - start) * 1000)

        logger.info(
            "Health check completed",
            extra={"healthy": healthy, "response_time_ms": response_time},
        )
        return {
            "statusCode": 200 if healthy else 503,
            "headers": HEALTH_HEADERS,
            "body": json.dumps(
                {
                    "status": "healthy" if healthy else "unhealthy",
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "responseTime": f"{response_time}ms",
                    "system": _system_info(),
                    "services": checks,
                    "message": "All systems operational"
                    if healthy
                    else "Some services are experiencing issues",
                }
            ),
        }
    except Exception as exc:
        logger.exception("Health check failed")
        return {
            "statusCode": 500,
            "headers": HEALTH_HEADERS,
            "body": json.dumps(
                {
                    "status": "error",
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "error": "Health check failed",
                    "details": str(exc),
                }
            ),
        }
