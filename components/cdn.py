"""
CloudFront distribution in front of the site bucket, and optionally the SSR API.

Two layouts share this component:

- **static**: a single S3 origin (via OAC) serving ``index.html`` as the
  default root object.
- **ssr**: dual origin. The API gateway is the default origin for dynamic
  pages; static file patterns (``/assets/*``, icons, images, JSON, text) are
  routed to S3 with long TTLs.

Viewers are always redirected to HTTPS. With a certificate the distribution
serves the custom domains; without one it uses the default CloudFront
certificate. The bucket policy is created here because it must name the
distribution's ARN.
"""

import pulumi
import pulumi_aws as aws

from components._helpers import bucket_read_policy
from components.storage import SiteBucket

ID: str = "nodm:cdn:SiteDistribution"

S3_ORIGIN_ID = "s3-static-origin"
API_ORIGIN_ID = "api-gateway-origin"

READ_METHODS = ["GET", "HEAD", "OPTIONS"]
ALL_METHODS = ["DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT"]

# Routed to S3 ahead of the API default behavior, in this order.
STATIC_PATH_PATTERNS = ["/assets/*", "/*.ico", "/*.png", "/*.svg", "/*.json", "/*.txt"]

# Headers the SSR handler needs to render per request.
FORWARDED_HEADERS = [
    "Accept",
    "Accept-Language",
    "Authorization",
    "CloudFront-Forwarded-Proto",
    "Host",
    "Origin",
    "Referer",
    "User-Agent",
]

# (min, default, max) TTLs in seconds.
STATIC_SITE_TTLS = (0, 3600, 86400)
SSR_TTLS = (0, 60, 3600)
STATIC_ASSET_TTLS = (0, 86400, 31536000)


def _static_asset_behavior(
    path_pattern: str,
) -> aws.cloudfront.DistributionOrderedCacheBehaviorArgs:
    min_ttl, default_ttl, max_ttl = STATIC_ASSET_TTLS
    return aws.cloudfront.DistributionOrderedCacheBehaviorArgs(
        path_pattern=path_pattern,
        target_origin_id=S3_ORIGIN_ID,
        viewer_protocol_policy="redirect-to-https",
        allowed_methods=READ_METHODS,
        cached_methods=READ_METHODS,
        forwarded_values=aws.cloudfront.DistributionOrderedCacheBehaviorForwardedValuesArgs(
            query_string=False,
            cookies=aws.cloudfront.DistributionOrderedCacheBehaviorForwardedValuesCookiesArgs(
                forward="none",
            ),
        ),
        min_ttl=min_ttl,
        default_ttl=default_ttl,
        max_ttl=max_ttl,
        compress=True,
    )


def _static_default_behavior() -> aws.cloudfront.DistributionDefaultCacheBehaviorArgs:
    min_ttl, default_ttl, max_ttl = STATIC_SITE_TTLS
    return aws.cloudfront.DistributionDefaultCacheBehaviorArgs(
        target_origin_id=S3_ORIGIN_ID,
        viewer_protocol_policy="redirect-to-https",
        allowed_methods=READ_METHODS,
        cached_methods=READ_METHODS,
        forwarded_values=aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesArgs(
            query_string=False,
            cookies=aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesCookiesArgs(
                forward="none",
            ),
        ),
        min_ttl=min_ttl,
        default_ttl=default_ttl,
        max_ttl=max_ttl,
    )


def _ssr_default_behavior() -> aws.cloudfront.DistributionDefaultCacheBehaviorArgs:
    # Short default TTL; the handler's Cache-Control headers take precedence.
    min_ttl, default_ttl, max_ttl = SSR_TTLS
    return aws.cloudfront.DistributionDefaultCacheBehaviorArgs(
        target_origin_id=API_ORIGIN_ID,
        viewer_protocol_policy="redirect-to-https",
        allowed_methods=ALL_METHODS,
        cached_methods=READ_METHODS,
        forwarded_values=aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesArgs(
            query_string=True,
            headers=FORWARDED_HEADERS,
            cookies=aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesCookiesArgs(
                forward="all",
            ),
        ),
        min_ttl=min_ttl,
        default_ttl=default_ttl,
        max_ttl=max_ttl,
        compress=True,
    )


class SiteDistribution(pulumi.ComponentResource):
    """
    CloudFront distribution plus the bucket policy that lets it read S3.

    Resources: Distribution, BucketPolicy.
    """

    def __init__(
        self,
        name: str,
        bucket: SiteBucket,
        tags: dict[str, str],
        aliases: list[str] | None = None,
        certificate_arn: pulumi.Input[str] | None = None,
        api_origin_domain: pulumi.Input[str] | None = None,
        price_class: str = "PriceClass_100",
        opts: pulumi.ResourceOptions | None = None,
    ):
        """
        Create the distribution and the bucket read policy.

        Args:
            name: Pulumi resource name prefix.
            bucket: Site bucket component providing the S3 origin and OAC.
            tags: Tags for the distribution.
            aliases: Custom domains to serve; requires certificate_arn.
            certificate_arn: Validated ACM certificate (us-east-1). None uses
                the default CloudFront certificate.
            api_origin_domain: Host of the SSR API. If set, the dual-origin
                layout is used; otherwise the static layout.
            price_class: CloudFront price class.

        Outputs (set on self, registered for the component):
            domain_name: Distribution FQDN (alias record target).
            hosted_zone_id: CloudFront hosted zone ID (alias record zone).
            arn: Distribution ARN.
            url: HTTPS URL of the distribution.
        """
        super().__init__(ID, name, None, opts)

        if aliases and certificate_arn is None:
            raise ValueError("aliases require a certificate_arn")

        origins = [
            aws.cloudfront.DistributionOriginArgs(
                origin_id=S3_ORIGIN_ID,
                domain_name=bucket.bucket_regional_domain_name,
                origin_access_control_id=bucket.oac_id,
            )
        ]
        if api_origin_domain is not None:
            origins.insert(
                0,
                aws.cloudfront.DistributionOriginArgs(
                    origin_id=API_ORIGIN_ID,
                    domain_name=api_origin_domain,
                    custom_origin_config=aws.cloudfront.DistributionOriginCustomOriginConfigArgs(
                        http_port=80,
                        https_port=443,
                        origin_protocol_policy="https-only",
                        origin_ssl_protocols=["TLSv1.2"],
                    ),
                ),
            )
            default_cache_behavior = _ssr_default_behavior()
            ordered_cache_behaviors = [
                _static_asset_behavior(pattern) for pattern in STATIC_PATH_PATTERNS
            ]
            default_root_object = None
        else:
            default_cache_behavior = _static_default_behavior()
            ordered_cache_behaviors = None
            default_root_object = "index.html"

        if certificate_arn is not None:
            viewer_certificate = aws.cloudfront.DistributionViewerCertificateArgs(
                acm_certificate_arn=certificate_arn,
                ssl_support_method="sni-only",
                minimum_protocol_version="TLSv1.2_2021",
            )
        else:
            viewer_certificate = aws.cloudfront.DistributionViewerCertificateArgs(
                cloudfront_default_certificate=True,
            )

        restrictions = aws.cloudfront.DistributionRestrictionsArgs(
            geo_restriction=aws.cloudfront.DistributionRestrictionsGeoRestrictionArgs(
                restriction_type="none",
            ),
        )

        # Explicit depends_on so the distribution is deleted before the OAC.
        distribution_opts = pulumi.ResourceOptions(
            parent=self,
            depends_on=[bucket.oac],
        )
        self.distribution = aws.cloudfront.Distribution(
            resource_name=f"{name}-cdn",
            enabled=True,
            aliases=aliases or None,
            default_root_object=default_root_object,
            origins=origins,
            default_cache_behavior=default_cache_behavior,
            ordered_cache_behaviors=ordered_cache_behaviors,
            price_class=price_class,
            restrictions=restrictions,
            viewer_certificate=viewer_certificate,
            tags=tags,
            opts=distribution_opts,
        )

        policy = pulumi.Output.all(bucket.bucket_arn, self.distribution.arn).apply(
            lambda arns: bucket_read_policy(*arns)
        )
        aws.s3.BucketPolicy(
            resource_name=f"{name}-bucket-policy",
            bucket=bucket.bucket_id,
            policy=policy,
            opts=pulumi.ResourceOptions(parent=self),
        )

        self.domain_name: pulumi.Output[str] = self.distribution.domain_name
        self.hosted_zone_id: pulumi.Output[str] = self.distribution.hosted_zone_id
        self.arn: pulumi.Output[str] = self.distribution.arn
        self.url: pulumi.Output[str] = pulumi.Output.concat(
            "https://", self.distribution.domain_name
        )
        self.register_outputs(
            {
                "domain_name": self.domain_name,
                "hosted_zone_id": self.hosted_zone_id,
                "arn": self.arn,
                "url": self.url,
            }
        )
