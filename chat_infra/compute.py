import base64
import hashlib
import os
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from chat_infra.config import InvalidStackConfig, StackConfig

LAMBDA_RUNTIME = "python3.12"
LAMBDA_HANDLER = "lambda_handler.handler"


@dataclass(frozen=True)
class LambdaArtifact:
    path: str
    code_hash: str


def source_code_hash(path: str) -> str:
    """Base64-encoded SHA-256 of the artifact, the value Lambda compares to decide on a redeploy."""
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(1024 * 1024), b""):
            digest.update(chunk)
    return base64.b64encode(digest.digest()).decode("ascii")


def resolve_artifact(config: StackConfig) -> LambdaArtifact:
    """Locate and hash the pre-built zip; must run before any resource is declared."""
    path = os.path.abspath(config.lambda_package)
    if not os.path.isfile(path):
        raise InvalidStackConfig(
            f"lambda package {path} not found; build it before running pulumi"
        )
    artifact = LambdaArtifact(path=path, code_hash=source_code_hash(path))
    pulumi.log.info(f"deploying {config.resource_name('api')} from {path} (sha256 {artifact.code_hash})")
    return artifact


def create_lambda(
    config: StackConfig,
    artifact: LambdaArtifact,
    lambda_role: aws.iam.Role,
    memory_bucket: aws.s3.Bucket,
    cors_origin: pulumi.Input[str],
) -> aws.lambda_.Function:
    """
    Deploy the chat handler from its pre-built zip.

    cors_origin is the externally visible origin of the frontend; it comes from
    the distribution (or the custom domain), never the other way round.
    """
    return aws.lambda_.Function(
        "chat-fn",
        name=config.resource_name("api"),
        code=pulumi.FileArchive(artifact.path),
        source_code_hash=artifact.code_hash,
        handler=LAMBDA_HANDLER,
        runtime=LAMBDA_RUNTIME,
        role=lambda_role.arn,
        timeout=config.lambda_timeout,
        environment=aws.lambda_.FunctionEnvironmentArgs(
            variables={
                "CORS_ORIGINS": cors_origin,
                "S3_BUCKET": memory_bucket.bucket,
                "USE_S3": "true",
                "BEDROCK_MODEL_ID": config.bedrock_model_id,
            },
        ),
        tags=config.tags,
    )
