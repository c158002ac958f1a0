"""
Environment-specific configuration settings for the CDK app.
"""

from dataclasses import dataclass
import os


@dataclass
class Settings:
    """Deployment settings with small, low-cost defaults."""

    environment: str = "dev"
    project_name: str = "servicenow-gateway"
    aws_region: str = "eu-west-2"

    # Lambda Configuration
    lambda_memory_mb: int = 256
    lambda_timeout_seconds: int = 30
    log_level: str = "INFO"

    # Opt-in credential cache; 0 fetches the secret on every invocation.
    credentials_cache_ttl_seconds: int = 0

    @classmethod
    def from_environment(cls) -> "Settings":
        """Load settings from environment variables."""
        env = os.environ.get("ENVIRONMENT", "dev")
        project_name = os.environ.get("PROJECT_NAME", "servicenow-gateway")
        region = os.environ.get("CDK_DEFAULT_REGION", "eu-west-2")

        # Production overrides
        if env == "prod":
            return cls(
                environment="prod",
                project_name=project_name,
                aws_region=region,
                lambda_memory_mb=512,
                log_level="WARNING",
            )

        return cls(
            environment=env,
            project_name=project_name,
            aws_region=region,
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
        )
