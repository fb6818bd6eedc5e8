"""
Website infrastructure components.

Each concern is encapsulated in its own ComponentResource for clear ownership,
testability, and reuse. The Website component wires them from StackConfig:

- **SiteBucket**: private S3 bucket, Block Public Access, OAC, optional content.
- **SiteCertificate**: DNS-validated ACM certificate in us-east-1; exposes
  certificate_arn once issued and the hosted zone_id.
- **SsrFunction**: Lambda function behind an HTTP API; exposes origin_domain.
- **SiteDistribution**: CloudFront (static or dual origin) and the bucket
  read policy; exposes domain_name and hosted_zone_id for alias records.
- **AliasRecords**: Route 53 A alias records for the apex and subdomains.
"""

from components.cdn import SiteDistribution
from components.certificate import SiteCertificate
from components.compute import SsrFunction
from components.dns import AliasRecords
from components.storage import SiteBucket
from components.website import Website

__all__ = [
    "AliasRecords",
    "SiteBucket",
    "SiteCertificate",
    "SiteDistribution",
    "SsrFunction",
    "Website",
]
