import pulumi_aws as aws
import pulumi_aws.apigatewayv2 as apigw

from chat_infra.config import StackConfig

ROUTES = [
    ("GET", "/"),
    ("POST", "/chat"),
    ("GET", "/health"),
]


def _route_resource_name(method: str, route: str) -> str:
    return f"route-{method.lower()}-{route.strip('/') or 'root'}"


def create_api(config: StackConfig, lambda_func: aws.lambda_.Function) -> apigw.Api:
    # 1) HTTP API; the function does its own method/path dispatch
    api = apigw.Api(
        "chat-api",
        name=config.resource_name("api-gateway"),
        protocol_type="HTTP",
        cors_configuration=apigw.ApiCorsConfigurationArgs(
            allow_origins=["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
            allow_credentials=False,
            max_age=300,
        ),
        tags=config.tags,
    )

    # 2) Wire up a Lambda proxy integration
    integration = apigw.Integration(
        "lambda-integration",
        api_id=api.id,
        integration_type="AWS_PROXY",
        integration_uri=lambda_func.invoke_arn,
        integration_method="POST",
        payload_format_version="2.0",
    )

    # 3) One route per endpoint, all proxied to the same integration
    for method, route in ROUTES:
        apigw.Route(
            _route_resource_name(method, route),
            api_id=api.id,
            route_key=f"{method} {route}",
            target=integration.id.apply(lambda iid: f"integrations/{iid}"),
        )

    # 4) Default stage, auto-deployed, with uniform throttling
    apigw.Stage(
        "api-stage",
        api_id=api.id,
        name="$default",
        auto_deploy=True,
        default_route_settings=apigw.StageDefaultRouteSettingsArgs(
            throttling_burst_limit=config.api_throttle_burst_limit,
            throttling_rate_limit=config.api_throttle_rate_limit,
        ),
        tags=config.tags,
    )

    # 5) Only this API may invoke the function
    aws.lambda_.Permission(
        "api-lambda-permission",
        action="lambda:InvokeFunction",
        function=lambda_func.name,
        principal="apigateway.amazonaws.com",
        source_arn=api.execution_arn.apply(lambda arn: f"{arn}/*/*"),
    )

    return api
