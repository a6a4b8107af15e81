import json
from typing import Optional

import pulumi
import pulumi_aws as aws

from chat_infra.config import StackConfig


def create_memory_bucket(config: StackConfig, account_id: str) -> aws.s3.Bucket:
    # 1) Private bucket that persists conversation memory
    bucket = aws.s3.Bucket(
        "memory-bucket",
        bucket=config.bucket_name("memory", account_id),
        tags=config.tags,
    )

    # 2) Lock down every public-access dimension
    aws.s3.BucketPublicAccessBlock(
        "memory-public-access-block",
        bucket=bucket.id,
        block_public_acls=True,
        block_public_policy=True,
        ignore_public_acls=True,
        restrict_public_buckets=True,
    )

    # 3) Bucket owner owns every object, ACLs disabled
    aws.s3.BucketOwnershipControls(
        "memory-ownership-controls",
        bucket=bucket.id,
        rule=aws.s3.BucketOwnershipControlsRuleArgs(
            object_ownership="BucketOwnerEnforced",
        ),
    )

    return bucket


def public_read_policy(bucket_name: str) -> str:
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Sid": "PublicReadGetObject",
                    "Effect": "Allow",
                    "Principal": "*",
                    "Action": ["s3:GetObject"],
                    "Resource": [f"arn:aws:s3:::{bucket_name}/*"],
                }
            ],
        }
    )


def create_frontend_bucket(
    config: StackConfig,
    account_id: str,
    opts: Optional[pulumi.ResourceOptions] = None,
):
    """
    Public bucket serving the static frontend as a website origin.
    opts is applied to every resource declared here.
    Returns:
      - bucket: the S3 bucket
      - access_block: the relaxed public access block
      - website: website configuration (its endpoint is the CDN origin)
      - policy: public-read bucket policy
    """
    # 1) Bucket for the static site
    bucket = aws.s3.Bucket(
        "frontend-bucket",
        bucket=config.bucket_name("frontend", account_id),
        tags=config.tags,
        opts=opts,
    )

    # 2) Ensure public policies aren't blocked
    access_block = aws.s3.BucketPublicAccessBlock(
        "frontend-public-access-block",
        bucket=bucket.id,
        block_public_acls=False,
        block_public_policy=False,
        ignore_public_acls=False,
        restrict_public_buckets=False,
        opts=opts,
    )

    # 3) Website hosting
    website = aws.s3.BucketWebsiteConfiguration(
        "frontend-website",
        bucket=bucket.id,
        index_document=aws.s3.BucketWebsiteConfigurationIndexDocumentArgs(
            suffix="index.html",
        ),
        error_document=aws.s3.BucketWebsiteConfigurationErrorDocumentArgs(
            key="404.html",
        ),
        opts=opts,
    )

    # 4) Public reads; the access block must be relaxed first or S3 rejects the policy
    policy = aws.s3.BucketPolicy(
        "frontend-bucket-policy",
        bucket=bucket.id,
        policy=bucket.id.apply(public_read_policy),
        opts=pulumi.ResourceOptions.merge(opts, pulumi.ResourceOptions(depends_on=[access_block])),
    )

    return bucket, access_block, website, policy
