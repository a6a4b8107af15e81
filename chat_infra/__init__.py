"""Pulumi program for the Bedrock chat application: S3, Lambda, HTTP API, CloudFront and an optional custom domain."""
