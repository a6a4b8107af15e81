from typing import Optional

import pulumi_aws as aws

from chat_infra.config import StackConfig
from chat_infra.domain import DomainCertificate

ALL_METHODS = ["DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT"]
CACHED_METHODS = ["GET", "HEAD"]


def _viewer_certificate(domain: Optional[DomainCertificate]):
    if domain is None:
        return aws.cloudfront.DistributionViewerCertificateArgs(
            cloudfront_default_certificate=True,
        )
    return aws.cloudfront.DistributionViewerCertificateArgs(
        acm_certificate_arn=domain.certificate_arn,
        ssl_support_method="sni-only",
        minimum_protocol_version="TLSv1.2_2021",
    )


def create_distribution(
    config: StackConfig,
    frontend_bucket: aws.s3.Bucket,
    website: aws.s3.BucketWebsiteConfiguration,
    domain: Optional[DomainCertificate] = None,
) -> aws.cloudfront.Distribution:
    origin_id = frontend_bucket.bucket.apply(lambda name: f"S3-{name}")

    return aws.cloudfront.Distribution(
        "frontend-distribution",
        enabled=True,
        is_ipv6_enabled=True,
        default_root_object="index.html",
        comment=config.resource_name("frontend"),
        aliases=domain.domain_names if domain else [],
        # Website endpoints only speak HTTP, so the origin leg stays unencrypted
        origins=[
            aws.cloudfront.DistributionOriginArgs(
                domain_name=website.website_endpoint,
                origin_id=origin_id,
                custom_origin_config=aws.cloudfront.DistributionOriginCustomOriginConfigArgs(
                    http_port=80,
                    https_port=443,
                    origin_protocol_policy="http-only",
                    origin_ssl_protocols=["TLSv1.2"],
                ),
            )
        ],
        default_cache_behavior=aws.cloudfront.DistributionDefaultCacheBehaviorArgs(
            allowed_methods=ALL_METHODS,
            cached_methods=CACHED_METHODS,
            target_origin_id=origin_id,
            viewer_protocol_policy="redirect-to-https",
            forwarded_values=aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesArgs(
                query_string=False,
                cookies=aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesCookiesArgs(
                    forward="none",
                ),
            ),
            min_ttl=0,
            default_ttl=3600,
            max_ttl=86400,
        ),
        # SPA routing: unknown paths get the app shell
        custom_error_responses=[
            aws.cloudfront.DistributionCustomErrorResponseArgs(
                error_code=404,
                response_code=200,
                response_page_path="/index.html",
            ),
        ],
        restrictions=aws.cloudfront.DistributionRestrictionsArgs(
            geo_restriction=aws.cloudfront.DistributionRestrictionsGeoRestrictionArgs(
                restriction_type="none",
            ),
        ),
        viewer_certificate=_viewer_certificate(domain),
        tags=config.tags,
    )
