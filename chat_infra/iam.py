import pulumi_aws as aws

from chat_infra.config import StackConfig

LAMBDA_MANAGED_POLICIES = {
    "basic-exec": "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole",
    "bedrock": "arn:aws:iam::aws:policy/AmazonBedrockFullAccess",
    "s3": "arn:aws:iam::aws:policy/AmazonS3FullAccess",
}


def create_lambda_role(config: StackConfig) -> aws.iam.Role:
    # 1) IAM role assumed by the chat function
    lambda_role = aws.iam.Role(
        "lambda-role",
        name=config.resource_name("lambda-role"),
        assume_role_policy=aws.iam.get_policy_document(
            statements=[{
                "effect": "Allow",
                "principals": [{
                    "type": "Service",
                    "identifiers": ["lambda.amazonaws.com"],
                }],
                "actions": ["sts:AssumeRole"],
            }]
        ).json,
        tags=config.tags,
    )

    # 2) Logging, Bedrock model invocation and S3 memory access
    for suffix, policy_arn in LAMBDA_MANAGED_POLICIES.items():
        aws.iam.RolePolicyAttachment(
            f"lambda-{suffix}",
            role=lambda_role.name,
            policy_arn=policy_arn,
        )

    return lambda_role
