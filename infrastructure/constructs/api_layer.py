"""
API layer construct: one Lambda behind an HTTP API.

The Lambda serves /incidents, /incidents/{id} and /health.
"""

from aws_cdk import (
    BundlingOptions,
    Duration,
    aws_iam as iam,
    aws_lambda as _lambda,
    aws_apigatewayv2 as apigw,
    aws_apigatewayv2_integrations as integrations,
    aws_logs as logs,
)
from constructs import Construct


class ApiLayerConstruct(Construct):
    """Expose incident endpoints via HTTP API."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        environment: str,
        project_name: str,
        servicenow_secret_arn: str,
        incidents_table_name: str,
        api_logs_table_name: str,
        log_level: str = "INFO",
        credentials_cache_ttl_seconds: int = 0,
        lambda_memory_mb: int = 256,
        lambda_timeout_seconds: int = 30,
    ) -> None:
        super().__init__(scope, construct_id)

        # AWS-managed Powertools layer (includes pydantic)
        powertools_layer = _lambda.LayerVersion.from_layer_version_arn(
            self,
            "PowertoolsLayer",
            f"arn:aws:lambda:{scope.region}:017000801446:layer:AWSLambdaPowertoolsPythonV3-python312-x86:7"
        )

        # Installs requests and python-json-logger next to the source.
        bundled_code = _lambda.Code.from_asset(
            "src",
            bundling=BundlingOptions(
                image=_lambda.Runtime.PYTHON_3_12.bundling_image,
                command=[
                    "bash", "-c",
                    "pip install -r requirements-lambda.txt -t /asset-output && "
                    "cp -r . /asset-output"
                ],
            ),
        )

        self.main_lambda = _lambda.Function(
            self,
            "ApiHandler",
            runtime=_lambda.Runtime.PYTHON_3_12,
            handler="handlers.main.lambda_handler",
            code=bundled_code,
            layers=[powertools_layer],
            memory_size=lambda_memory_mb,
            timeout=Duration.seconds(lambda_timeout_seconds),
            architecture=_lambda.Architecture.X86_64,
            environment={
                "ENVIRONMENT": environment,
                "PROJECT_NAME": project_name,
                "SERVICENOW_CREDENTIALS_SECRET": servicenow_secret_arn,
                "INCIDENTS_TABLE_NAME": incidents_table_name,
                "API_LOGS_TABLE_NAME": api_logs_table_name,
                "LOG_LEVEL": log_level,
                "CREDENTIALS_CACHE_TTL_SECONDS": str(credentials_cache_ttl_seconds),
            },
            log_retention=logs.RetentionDays.ONE_WEEK,
        )

        # Read-only calls made by the health probe.
        self.main_lambda.add_to_role_policy(
            iam.PolicyStatement(
                actions=[
                    "dynamodb:ListTables",
                    "secretsmanager:ListSecrets",
                    "logs:DescribeLogGroups",
                ],
                resources=["*"],
            )
        )

        self.api = apigw.HttpApi(
            self,
            "HttpApi",
            api_name=f"{project_name}-api-{environment}",
            cors_preflight=apigw.CorsPreflightOptions(
                allow_origins=["*"],
                allow_methods=[apigw.CorsHttpMethod.ANY],
                allow_headers=["Content-Type", "Authorization", "X-Api-Key"],
            ),
        )

        integration = integrations.HttpLambdaIntegration(
            "LambdaIntegration", self.main_lambda
        )

        route_defs = [
            (apigw.HttpMethod.GET, "/incidents"),
            (apigw.HttpMethod.POST, "/incidents"),
            (apigw.HttpMethod.GET, "/incidents/{id}"),
            (apigw.HttpMethod.PUT, "/incidents/{id}"),
            (apigw.HttpMethod.GET, "/health"),
        ]

        for method, path in route_defs:
            self.api.add_routes(
                path=path,
                methods=[method],
                integration=integration,
            )
