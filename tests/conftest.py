"""Shared fixtures: Pulumi mocks that record every resource and invoke."""

import json
from dataclasses import dataclass
from typing import Any, Dict, List

import pulumi
import pytest

from chat_infra.config import StackConfig
from chat_infra.stack import deploy

ACCOUNT_ID = "123456789012"
ZONE_ID = "Z0123456789ABCDEFGHIJ"
CLOUDFRONT_DOMAIN = "d111111abcdef8.cloudfront.net"
CLOUDFRONT_ZONE_ID = "Z2FDTNDATAQYW2"
API_ENDPOINT = "https://abc123.execute-api.us-east-1.amazonaws.com"


@dataclass
class Registered:
    kind: str
    name: str
    inputs: Dict[str, Any]


class ChatMocks(pulumi.runtime.Mocks):
    def __init__(self):
        self.resources: List[Registered] = []
        self.calls: List[str] = []

    def of_kind(self, kind: str) -> List[Registered]:
        return [r for r in self.resources if r.kind == kind]

    def named(self, name: str) -> Registered:
        return next(r for r in self.resources if r.name == name)

    def index_of(self, name: str) -> int:
        return [r.name for r in self.resources].index(name)

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        kind = args.typ.rsplit(":", 1)[-1]
        inputs = dict(args.inputs)
        self.resources.append(Registered(kind, args.name, inputs))

        resource_id = f"{args.name}-id"
        state = dict(inputs)
        if kind == "Bucket":
            resource_id = inputs["bucket"]
            state["arn"] = f"arn:aws:s3:::{inputs['bucket']}"
        elif kind == "BucketWebsiteConfiguration":
            state["websiteEndpoint"] = f"{inputs['bucket']}.s3-website-us-east-1.amazonaws.com"
        elif kind == "Role":
            state["arn"] = f"arn:aws:iam::{ACCOUNT_ID}:role/{inputs.get('name', args.name)}"
        elif kind == "Function":
            arn = f"arn:aws:lambda:us-east-1:{ACCOUNT_ID}:function:{inputs['name']}"
            state["arn"] = arn
            state["invokeArn"] = (
                f"arn:aws:apigateway:us-east-1:lambda:path/2015-03-31/functions/{arn}/invocations"
            )
        elif kind == "Api":
            state["apiEndpoint"] = API_ENDPOINT
            state["executionArn"] = f"arn:aws:execute-api:us-east-1:{ACCOUNT_ID}:abc123"
        elif kind == "Distribution":
            state["domainName"] = CLOUDFRONT_DOMAIN
            state["hostedZoneId"] = CLOUDFRONT_ZONE_ID
            state["arn"] = f"arn:aws:cloudfront::{ACCOUNT_ID}:distribution/E2EXAMPLE"
        elif kind == "Certificate":
            domains = [inputs["domainName"], *inputs.get("subjectAlternativeNames", [])]
            state["arn"] = f"arn:aws:acm:us-east-1:{ACCOUNT_ID}:certificate/{args.name}"
            state["domainValidationOptions"] = [
                {
                    "domainName": domain,
                    "resourceRecordName": f"_3639ac514e785e898d2646601fa951d5.{domain}.",
                    "resourceRecordType": "CNAME",
                    "resourceRecordValue": "_98d2646601fa951d5.acm-validations.aws.",
                }
                for domain in domains
            ]
        elif kind == "Record":
            state["fqdn"] = inputs["name"].rstrip(".")
        elif kind == "CertificateValidation":
            state["certificateArn"] = inputs["certificateArn"]
        return [resource_id, state]

    def call(self, args: pulumi.runtime.MockCallArgs):
        self.calls.append(args.token)
        if args.token == "aws:index/getCallerIdentity:getCallerIdentity":
            return {
                "accountId": ACCOUNT_ID,
                "arn": f"arn:aws:iam::{ACCOUNT_ID}:user/deployer",
                "id": ACCOUNT_ID,
                "userId": "AIDAEXAMPLE",
            }
        if args.token == "aws:route53/getZone:getZone":
            return {"id": ZONE_ID, "zoneId": ZONE_ID, "name": args.args["name"]}
        if args.token == "aws:iam/getPolicyDocument:getPolicyDocument":
            return {
                "id": "lambda-trust",
                "json": json.dumps({"Version": "2012-10-17", "Statement": args.args.get("statements", [])}),
            }
        return {}


@pytest.fixture
def mocks():
    chat_mocks = ChatMocks()
    pulumi.runtime.set_mocks(chat_mocks, preview=False)
    return chat_mocks


@pytest.fixture
def artifact(tmp_path):
    path = tmp_path / "lambda-deployment.zip"
    path.write_bytes(b"PK\x05\x06" + b"\x00" * 18)
    return path


@pytest.fixture
def make_config(artifact):
    def _make(**overrides):
        values = {
            "project_name": "chatapp",
            "environment": "dev",
            "lambda_package": str(artifact),
        }
        values.update(overrides)
        return StackConfig(**values)

    return _make


@pytest.fixture
def run_program(mocks):
    """Run a callable as a Pulumi program; registrations are complete when it returns."""

    def _run(fn):
        result = {}

        @pulumi.runtime.test
        def program():
            result["value"] = fn()

        program()
        return result["value"]

    return _run


@pytest.fixture
def deploy_stack(run_program):
    return lambda config: run_program(lambda: deploy(config))
