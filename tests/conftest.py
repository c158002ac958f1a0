"""
Pytest configuration to ensure paths are set up correctly for tests.

This allows imports like `from handlers import incidents` to work
when running tests, simulating the Lambda environment where code
is deployed from the src/ directory.
"""

import os
import sys
from pathlib import Path

import boto3
import pytest


def _ensure_paths_on_sys_path() -> None:
    """Add repository root AND src/ to sys.path if missing.

    The src/ directory is added to simulate Lambda's import behavior,
    where Code.from_asset("src") makes src/ the root of the package.
    """
    repo_root = Path(__file__).resolve().parents[1]
    src_root = repo_root / "src"

    # Add repo root first (for imports like infrastructure.*)
    root_str = str(repo_root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)

    # Add src/ for Lambda-style imports (from handlers import ...)
    src_str = str(src_root)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_paths_on_sys_path()

# Ensure boto3 has offline-friendly defaults so tests do not require AWS access.
os.environ.setdefault("AWS_REGION", "eu-west-2")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("AWS_SESSION_TOKEN", "test")
os.environ.setdefault("ENVIRONMENT", "dev")

# Lambda environment variables used by handlers
os.environ.setdefault("PROJECT_NAME", "servicenow-gateway")
os.environ.setdefault(
    "SERVICENOW_CREDENTIALS_SECRET",
    "arn:aws:secretsmanager:eu-west-2:123456789:secret:servicenow",
)
os.environ.setdefault("INCIDENTS_TABLE_NAME", "test-incidents")
os.environ.setdefault("API_LOGS_TABLE_NAME", "test-api-logs")

# Create a default boto3 session so resources/clients do not error during import.
boto3.setup_default_session(region_name="eu-west-2")


class InMemoryRepository:
    """Stand-in for DynamoDbRepository keyed on one attribute."""

    def __init__(self, key_name: str):
        self.key_name = key_name
        self.items = {}
        self.puts = []

    def put(self, item):
        self.puts.append(dict(item))
        self.items[item[self.key_name]] = dict(item)

    def get(self, key):
        return self.items.get(key[self.key_name])


@pytest.fixture
def incident_store():
    return InMemoryRepository("incident_id")


@pytest.fixture
def call_log_store():
    return InMemoryRepository("request_id")


@pytest.fixture
def credentials():
    from models.incident import ServiceNowCredentials

    return ServiceNowCredentials(
        instance_url="https://dev12345.service-now.com/",
        username="integration",
        password="s3cret",
    )
