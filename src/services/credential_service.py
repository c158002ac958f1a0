"""
ServiceNow credential provider.

Reads the `{instance_url, username, password}` secret from Secrets Manager.
Every call goes to the secret store unless an in-process TTL cache is
supplied; a broken cache never blocks the direct fetch.
"""

from __future__ import annotations

from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from models.incident import ServiceNowCredentials
from utils.cache_service import TTLCache
from utils.error_handling import CredentialUnavailable
from utils.logging_config import get_logger

logger = get_logger(__name__)


class CredentialProvider:
    """Fetch and parse ServiceNow credentials."""

    def __init__(self, secret_id: str, client=None, cache: Optional[TTLCache] = None):
        self.secret_id = secret_id
        self.client = client or boto3.client("secretsmanager")
        self.cache = cache

    def fetch(self) -> ServiceNowCredentials:
        """Return credentials or raise CredentialUnavailable. No retry."""
        cached = self._read_cache()
        if cached is not None:
            return cached

        credentials = self._fetch_from_secret_store()
        self._write_cache(credentials)
        return credentials

    def _fetch_from_secret_store(self) -> ServiceNowCredentials:
        if not self.secret_id:
            logger.error("ServiceNow credentials secret is not configured")
            raise CredentialUnavailable()

        try:
            secret_value = self.client.get_secret_value(SecretId=self.secret_id)
            return ServiceNowCredentials.model_validate_json(secret_value["SecretString"])
        except (ClientError, BotoCoreError, KeyError, TypeError, ValidationError) as exc:
            # Only the exception type: parse errors could echo the secret.
            logger.error(
                "Failed to get ServiceNow credentials",
                extra={"secret_id": self.secret_id, "error_type": type(exc).__name__},
            )
            raise CredentialUnavailable() from exc

    def _read_cache(self) -> Optional[ServiceNowCredentials]:
        if self.cache is None:
            return None
        try:
            cached = self.cache.get(self.secret_id)
        except Exception as exc:
            logger.warning("Credential cache read failed", extra={"error": str(exc)})
            return None
        if cached is not None:
            logger.debug("Credential cache hit", extra={"secret_id": self.secret_id})
        return cached

    def _write_cache(self, credentials: ServiceNowCredentials) -> None:
        if self.cache is None:
            return
        try:
            self.cache.set(self.secret_id, credentials)
        except Exception as exc:
            logger.warning("Credential cache write failed", extra={"error": str(exc)})
