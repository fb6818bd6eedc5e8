"""
Stack configuration loaded from pulumi.Config().

Provides a typed, immutable view of stack settings. All settings are read from
Pulumi config (e.g. Pulumi.<stack>.yaml or pulumi config set). Every key has a
default except where noted; the domain name additionally falls back to the
DOMAIN_NAME environment variable. Used by __main__.main() and the Website
component to pick the architecture, name resources and toggle DNS.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Any, Callable

import pulumi

ARCHITECTURES = ("static", "ssr")

PRODUCTION_STAGE = "production"

# Single DNS label: lowercase letters, digits and inner hyphens, at most 63 chars.
_LABEL_RE = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$")


def is_dns_label(label: str) -> bool:
    """Return True if label is a single lowercase DNS label (e.g. "www")."""
    return bool(_LABEL_RE.match(label))


def is_domain_name(domain: str) -> bool:
    """
    Return True if domain is a name of at least two labels without a
    trailing dot (e.g. "nodm.name").
    """
    labels = domain.split(".")
    return len(labels) >= 2 and all(is_dns_label(label) for label in labels)


def _get_bool(config: pulumi.Config, key: str, default: Any) -> bool:
    raw = config.get(key)
    if raw is None:
        return default
    return str(raw).strip().lower() in ("1", "true", "yes")


def _get_int(config: pulumi.Config, key: str, default: Any) -> int:
    raw = config.get(key)
    return default if raw is None else int(raw)


def _get_str(config: pulumi.Config, key: str, default: Any) -> str | None:
    return config.get(key) or default


def _get_list(config: pulumi.Config, key: str, default: Any) -> list[str]:
    raw = config.get_object(key)
    return list(default) if raw is None else [str(item) for item in raw]


# (key, parser, default); parser receives (config, key, default) and returns value.
_CONFIG_SPEC: list[tuple[str, Callable[[pulumi.Config, str, Any], Any], Any]] = [
    ("project_name", _get_str, "nodm-name"),
    ("domain_name", _get_str, None),
    ("subdomains", _get_list, ["www"]),
    ("bucket_name", _get_str, None),
    ("architecture", _get_str, "ssr"),
    ("content_dir", _get_str, None),
    ("server_bundle_dir", _get_str, os.path.join("..", "app", ".output", "server")),
    ("lambda_runtime", _get_str, "nodejs22.x"),
    ("lambda_timeout", _get_int, 30),
    ("lambda_memory_size", _get_int, 512),
    ("price_class", _get_str, "PriceClass_100"),
    ("protect_bucket", _get_bool, None),
]


@dataclass(frozen=True)
class StackConfig:
    """
    Stack configuration from Pulumi config.

    Attributes:
        project_name: Used in resource names and the Project tag.
        stage: Stack name; "production" protects the bucket.
        domain_name: Apex domain (e.g. "nodm.name"). None disables the
            certificate, the hosted-zone lookup and all DNS records.
        subdomains: Labels served alongside the apex (e.g. ["www"]).
        bucket_name: S3 bucket name (globally unique; defaults to project_name).
        architecture: "static" (CDN to S3) or "ssr" (CDN to API gateway and S3).
        content_dir: Optional local directory uploaded to the bucket.
        server_bundle_dir: Directory archived as the Lambda function code (ssr).
        lambda_runtime: Lambda runtime identifier (ssr).
        lambda_timeout: Lambda execution timeout in seconds (ssr).
        lambda_memory_size: Lambda memory in MB (ssr).
        price_class: CloudFront price class.
        protect_bucket: Protect and retain the bucket; defaults to True in the
            production stage.
    """

    project_name: str
    stage: str
    domain_name: str | None = None
    subdomains: list[str] = field(default_factory=lambda: ["www"])
    bucket_name: str | None = None
    architecture: str = "ssr"
    content_dir: str | None = None
    server_bundle_dir: str = os.path.join("..", "app", ".output", "server")
    lambda_runtime: str = "nodejs22.x"
    lambda_timeout: int = 30
    lambda_memory_size: int = 512
    price_class: str = "PriceClass_100"
    protect_bucket: bool | None = None

    def __post_init__(self):
        # Frozen dataclass: derived defaults go through object.__setattr__.
        if self.bucket_name is None:
            object.__setattr__(self, "bucket_name", self.project_name)
        if self.protect_bucket is None:
            object.__setattr__(
                self, "protect_bucket", self.stage == PRODUCTION_STAGE
            )
        self.validate()

    @property
    def is_ssr(self) -> bool:
        return self.architecture == "ssr"

    def validate(self) -> None:
        """
        Reject settings that would produce an invalid resource graph.

        Raises:
            ValueError: On an unknown architecture, a malformed domain or
                subdomain, non-positive Lambda limits, or a missing
                content directory.
        """
        if self.architecture not in ARCHITECTURES:
            raise ValueError(
                f"architecture must be one of {ARCHITECTURES}, "
                f"got {self.architecture!r}"
            )
        if self.domain_name is not None and not is_domain_name(self.domain_name):
            raise ValueError(f"invalid domain_name {self.domain_name!r}")
        for label in self.subdomains:
            if not is_dns_label(label):
                raise ValueError(f"subdomain {label!r} is not a single DNS label")
        if len(set(self.subdomains)) != len(self.subdomains):
            raise ValueError(f"duplicate subdomains in {self.subdomains}")
        if self.lambda_timeout <= 0 or self.lambda_memory_size <= 0:
            raise ValueError("lambda_timeout and lambda_memory_size must be positive")
        if self.content_dir is not None and not os.path.isdir(self.content_dir):
            raise ValueError(f"content_dir {self.content_dir!r} is not a directory")

    @classmethod
    def from_pulumi_config(cls, config: pulumi.Config, stage: str) -> "StackConfig":
        """
        Build StackConfig from pulumi.Config(). Keys missing from config take
        the defaults in _CONFIG_SPEC; domain_name falls back to $DOMAIN_NAME.
        """
        kwargs = {
            key: parser(config, key, default) for key, parser, default in _CONFIG_SPEC
        }
        if kwargs["domain_name"] is None:
            kwargs["domain_name"] = os.environ.get("DOMAIN_NAME") or None
        return cls(stage=stage, **kwargs)
