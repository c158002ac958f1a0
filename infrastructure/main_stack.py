"""
Main CDK Stack for the ServiceNow incident gateway.
"""

from aws_cdk import (
    Stack,
    Tags,
    CfnOutput,
)
from constructs import Construct

from infrastructure.constructs.data_layer import DataLayerConstruct
from infrastructure.constructs.api_layer import ApiLayerConstruct
from infrastructure.config.settings import Settings


class IncidentGatewayStack(Stack):
    """Main stack wiring all constructs together."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        settings: Settings,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Global tags for cost/accounting.
        Tags.of(self).add("Project", settings.project_name)
        Tags.of(self).add("Environment", settings.environment)
        Tags.of(self).add("ManagedBy", "cdk")

        # 1) Data layer.
        data_construct = DataLayerConstruct(
            self,
            "DataLayer",
            environment=settings.environment,
            project_name=settings.project_name,
        )

        # 2) API layer (single Lambda).
        api_construct = ApiLayerConstruct(
            self,
            "ApiLayer",
            environment=settings.environment,
            project_name=settings.project_name,
            servicenow_secret_arn=data_construct.servicenow_secret.secret_arn,
            incidents_table_name=data_construct.incidents_table.table_name,
            api_logs_table_name=data_construct.api_logs_table.table_name,
            log_level=settings.log_level,
            credentials_cache_ttl_seconds=settings.credentials_cache_ttl_seconds,
            lambda_memory_mb=settings.lambda_memory_mb,
            lambda_timeout_seconds=settings.lambda_timeout_seconds,
        )

        # Permissions for the API Lambda.
        data_construct.servicenow_secret.grant_read(api_construct.main_lambda)
        data_construct.incidents_table.grant_read_write_data(api_construct.main_lambda)
        data_construct.api_logs_table.grant_write_data(api_construct.main_lambda)

        # Outputs to quickly find resources.
        CfnOutput(self, "ApiEndpoint", value=api_construct.api.api_endpoint)
        CfnOutput(self, "IncidentsTable", value=data_construct.incidents_table.table_name)
        CfnOutput(self, "ApiLogsTable", value=data_construct.api_logs_table.table_name)
        CfnOutput(self, "ServiceNowSecretArn", value=data_construct.servicenow_secret.secret_arn)
