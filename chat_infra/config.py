"""
Stack configuration and resource naming.

Everything is read from the Pulumi stack config and validated before a single
resource is declared, so a bad value never leaves a half-provisioned stack.
"""

import re
from dataclasses import dataclass
from typing import Dict, List

import pulumi

ENVIRONMENTS = ("dev", "test", "prod")
DEFAULT_MODEL_ID = "anthropic.claude-3-5-sonnet-20240620-v1:0"
DEFAULT_LAMBDA_PACKAGE = "backend/lambda-deployment.zip"

_PROJECT_NAME = re.compile(r"[a-z0-9-]+")


class InvalidStackConfig(pulumi.RunError):
    """Raised when the stack configuration cannot produce a valid deployment."""


@dataclass(frozen=True)
class StackConfig:
    project_name: str
    environment: str
    bedrock_model_id: str = DEFAULT_MODEL_ID
    lambda_timeout: int = 60
    api_throttle_burst_limit: int = 10
    api_throttle_rate_limit: float = 5
    use_custom_domain: bool = False
    root_domain: str = ""
    lambda_package: str = DEFAULT_LAMBDA_PACKAGE

    def __post_init__(self):
        problems = []
        if not _PROJECT_NAME.fullmatch(self.project_name or ""):
            problems.append(
                f"project_name {self.project_name!r} may only contain lowercase letters, digits and hyphens"
            )
        if self.environment not in ENVIRONMENTS:
            problems.append(
                f"environment {self.environment!r} must be one of {', '.join(ENVIRONMENTS)}"
            )
        if not self.bedrock_model_id:
            problems.append("bedrock_model_id must not be empty")
        if not 1 <= self.lambda_timeout <= 900:
            problems.append(f"lambda_timeout must be between 1 and 900 seconds, got {self.lambda_timeout}")
        if self.api_throttle_burst_limit <= 0:
            problems.append("api_throttle_burst_limit must be positive")
        if self.api_throttle_rate_limit <= 0:
            problems.append("api_throttle_rate_limit must be positive")
        if self.use_custom_domain and not self.root_domain.strip():
            problems.append("root_domain is required when use_custom_domain is true")
        elif self.root_domain != self.root_domain.strip():
            problems.append(f"root_domain {self.root_domain!r} has surrounding whitespace")
        if problems:
            raise InvalidStackConfig("invalid stack configuration: " + "; ".join(problems))

    @classmethod
    def from_pulumi_config(cls, config: pulumi.Config) -> "StackConfig":
        model_id = config.get("bedrock_model_id")
        timeout = config.get_int("lambda_timeout")
        burst = config.get_int("api_throttle_burst_limit")
        rate = config.get_float("api_throttle_rate_limit")
        use_domain = config.get_bool("use_custom_domain")
        return cls(
            project_name=config.require("project_name"),
            environment=config.require("environment"),
            bedrock_model_id=DEFAULT_MODEL_ID if model_id is None else model_id,
            lambda_timeout=60 if timeout is None else timeout,
            api_throttle_burst_limit=10 if burst is None else burst,
            api_throttle_rate_limit=5 if rate is None else rate,
            use_custom_domain=bool(use_domain),
            root_domain=(config.get("root_domain") or "").strip(),
            lambda_package=config.get("lambda_package") or DEFAULT_LAMBDA_PACKAGE,
        )

    # -----------------------------------------------------------------------
    # Naming
    # -----------------------------------------------------------------------
    @property
    def name_prefix(self) -> str:
        return f"{self.project_name}-{self.environment}"

    def resource_name(self, role: str) -> str:
        return f"{self.name_prefix}-{role}"

    def bucket_name(self, role: str, account_id: str) -> str:
        # S3 names are global; the account id keeps them unique
        return f"{self.name_prefix}-{role}-{account_id}"

    @property
    def tags(self) -> Dict[str, str]:
        return {
            "Project": self.project_name,
            "Environment": self.environment,
            "ManagedBy": "pulumi",
        }

    @property
    def domain_names(self) -> List[str]:
        if not self.use_custom_domain:
            return []
        return [self.root_domain, f"www.{self.root_domain}"]


def load_config() -> StackConfig:
    return StackConfig.from_pulumi_config(pulumi.Config())
