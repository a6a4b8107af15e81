from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pulumi
import pulumi_aws as aws
import pulumi_aws.apigatewayv2 as apigw

from chat_infra.api import create_api
from chat_infra.compute import create_lambda, resolve_artifact
from chat_infra.config import StackConfig
from chat_infra.domain import DomainCertificate, create_alias_records, create_certificate
from chat_infra.iam import create_lambda_role
from chat_infra.storage import create_frontend_bucket, create_memory_bucket
from chat_infra.web import create_distribution


@dataclass
class ChatStack:
    config: StackConfig
    account_id: str
    memory_bucket: aws.s3.Bucket
    frontend_bucket: aws.s3.Bucket
    lambda_func: aws.lambda_.Function
    api: apigw.Api
    distribution: aws.cloudfront.Distribution
    domain: Optional[DomainCertificate] = None
    alias_records: List[aws.route53.Record] = field(default_factory=list)

    def outputs(self) -> Dict[str, pulumi.Input[str]]:
        return {
            "api_gateway_url": self.api.api_endpoint,
            "cloudfront_url": self.distribution.domain_name.apply(lambda d: f"https://{d}"),
            "memory_bucket_name": self.memory_bucket.bucket,
            "frontend_bucket_name": self.frontend_bucket.bucket,
            "lambda_function_name": self.lambda_func.name,
            "custom_domain_url": f"https://{self.domain.root_domain}" if self.domain else "",
        }


def cors_origin(config: StackConfig, distribution: aws.cloudfront.Distribution) -> pulumi.Output[str]:
    # Always derived from the distribution so the function keeps its edge to it
    return distribution.domain_name.apply(
        lambda d: f"https://{config.root_domain if config.use_custom_domain else d}"
    )


def deploy(config: StackConfig) -> ChatStack:
    # ---------------------------------------------------------------------------
    # 0) ARTIFACT (checked before anything is declared)
    # ---------------------------------------------------------------------------
    artifact = resolve_artifact(config)

    # ---------------------------------------------------------------------------
    # 1) IDENTITY
    # ---------------------------------------------------------------------------
    account_id = aws.get_caller_identity().account_id
    pulumi.log.info(f"provisioning {config.name_prefix} in account {account_id}")

    # ---------------------------------------------------------------------------
    # 2) STORAGE
    # ---------------------------------------------------------------------------
    memory_bucket = create_memory_bucket(config, account_id)
    frontend_bucket, _, website, _ = create_frontend_bucket(config, account_id)

    # ---------------------------------------------------------------------------
    # 3) DOMAIN (certificate first, CloudFront needs it validated)
    # ---------------------------------------------------------------------------
    domain = create_certificate(config)

    # ---------------------------------------------------------------------------
    # 4) CDN
    # ---------------------------------------------------------------------------
    distribution = create_distribution(config, frontend_bucket, website, domain)
    alias_records = create_alias_records(domain, distribution) if domain else []

    # ---------------------------------------------------------------------------
    # 5) COMPUTE (reads the distribution's domain, never the reverse)
    # ---------------------------------------------------------------------------
    lambda_role = create_lambda_role(config)
    lambda_func = create_lambda(
        config,
        artifact,
        lambda_role,
        memory_bucket,
        cors_origin(config, distribution),
    )

    # ---------------------------------------------------------------------------
    # 6) API
    # ---------------------------------------------------------------------------
    api = create_api(config, lambda_func)

    return ChatStack(
        config=config,
        account_id=account_id,
        memory_bucket=memory_bucket,
        frontend_bucket=frontend_bucket,
        lambda_func=lambda_func,
        api=api,
        distribution=distribution,
        domain=domain,
        alias_records=alias_records,
    )
