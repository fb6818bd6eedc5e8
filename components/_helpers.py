"""
Pure helpers for naming, DNS, policies and site content. Testable without
Pulumi runtime.

Used by the certificate component (validation_option_for), the distribution
component (bucket_read_policy, api_origin_domain), the compute component
(lambda_assume_role_policy) and the bucket component (iter_site_files,
content_type). No Pulumi types; all functions accept and return plain Python
types so they can be unit-tested without a Pulumi stack.
"""

import json
import mimetypes
import os
from typing import Any, Iterable, Iterator

POLICY_VERSION = "2012-10-17"


def subdomain_fqdns(
    domain: str,
    subdomains: Iterable[str],
) -> list[str]:
    """Return ``<label>.<domain>`` for each subdomain label, in order."""
    return [f"{label}.{domain}" for label in subdomains]


def all_domains(
    domain: str,
    subdomains: Iterable[str],
) -> list[str]:
    """
    Return the apex domain followed by every subdomain FQDN.

    This is the set of names the certificate covers and the distribution
    serves, e.g. ``["nodm.name", "www.nodm.name"]``.
    """
    return [domain, *subdomain_fqdns(domain, subdomains)]


def site_url(
    host: str,
) -> str:
    """Return the HTTPS URL for a host name."""
    return f"https://{host}"


def common_tags(
    project_name: str,
    stage: str,
) -> dict[str, str]:
    """Tags applied to every taggable resource."""
    return {
        "Project": project_name,
        "ManagedBy": "Pulumi",
        "Stage": stage,
    }


def bucket_read_policy(
    bucket_arn: str,
    distribution_arn: str,
) -> str:
    """
    Return the bucket policy JSON granting CloudFront read access.

    Only the CloudFront service principal may call s3:GetObject, and only
    when the request is signed on behalf of ``distribution_arn``.
    """
    return json.dumps(
        {
            "Version": POLICY_VERSION,
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"Service": "cloudfront.amazonaws.com"},
                    "Action": "s3:GetObject",
                    "Resource": f"{bucket_arn}/*",
                    "Condition": {
                        "StringEquals": {"AWS:SourceArn": distribution_arn},
                    },
                }
            ],
        }
    )


def lambda_assume_role_policy() -> str:
    """Return the trust policy JSON letting Lambda assume a role."""
    return json.dumps(
        {
            "Version": POLICY_VERSION,
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"Service": "lambda.amazonaws.com"},
                    "Action": "sts:AssumeRole",
                }
            ],
        }
    )


def validation_option_for(
    options: Iterable[Any],
    domain: str,
) -> Any:
    """
    Pick the certificate domain validation option for ``domain``.

    ACM does not guarantee the order of domain_validation_options, so records
    are matched by ``domain_name`` rather than by index.

    Raises:
        KeyError: If the certificate has no option for the domain.
    """
    for option in options:
        if option.domain_name == domain:
            return option
    raise KeyError(f"no validation option for {domain}")


def api_origin_domain(
    api_endpoint: str,
) -> str:
    """
    Return the host part of an API gateway endpoint URL.

    CloudFront origins take a bare host name, e.g.
    ``https://abc123.execute-api.us-east-1.amazonaws.com`` becomes
    ``abc123.execute-api.us-east-1.amazonaws.com``.
    """
    host = api_endpoint.split("://", 1)[-1]
    return host.split("/", 1)[0]


def content_type(
    path: str,
) -> str:
    """Guess the Content-Type of a site file from its name."""
    guessed, _ = mimetypes.guess_type(path)
    return guessed or "application/octet-stream"


def iter_site_files(
    content_dir: str,
) -> Iterator[tuple[str, str]]:
    """
    Yield ``(object_key, file_path)`` for every file below content_dir.

    Keys are relative POSIX paths (``css/site.css``). Files are yielded in
    sorted order so repeated runs declare objects identically.
    """
    for root, dirs, files in os.walk(content_dir):
        dirs.sort()
        for filename in sorted(files):
            path = os.path.join(root, filename)
            key = os.path.relpath(path, content_dir).replace(os.sep, "/")
            yield key, path
