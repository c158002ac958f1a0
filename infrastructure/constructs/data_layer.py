"""
Data layer construct: incident mirror table, API call log table and the
ServiceNow credentials secret.
"""

from aws_cdk import (
    RemovalPolicy,
    aws_dynamodb as dynamodb,
    aws_secretsmanager as secretsmanager,
)
from constructs import Construct


class DataLayerConstruct(Construct):
    """Provision the gateway's storage resources."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        environment: str,
        project_name: str,
    ) -> None:
        super().__init__(scope, construct_id)

        removal_policy = RemovalPolicy.RETAIN if environment == "prod" else RemovalPolicy.DESTROY

        # Filled in by operators: {"instance_url", "username", "password"}.
        self.servicenow_secret = secretsmanager.Secret(
            self,
            "ServiceNowCredentials",
            secret_name=f"{project_name}/{environment}/servicenow-credentials",
            generate_secret_string=secretsmanager.SecretStringGenerator(
                secret_string_template=(
                    '{"instance_url": "https://example.service-now.com", "username": "integration"}'
                ),
                generate_string_key="password",
                exclude_punctuation=True,
            ),
            removal_policy=removal_policy,
        )

        self.incidents_table = dynamodb.Table(
            self,
            "Incidents",
            partition_key=dynamodb.Attribute(
                name="incident_id", type=dynamodb.AttributeType.STRING
            ),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            point_in_time_recovery=environment == "prod",
            removal_policy=removal_policy,
        )

        self.api_logs_table = dynamodb.Table(
            self,
            "ApiLogs",
            partition_key=dynamodb.Attribute(
                name="request_id", type=dynamodb.AttributeType.STRING
            ),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            removal_policy=removal_policy,
        )
