"""
Complete website stack: wires the bucket, certificate, SSR backend,
distribution and DNS components according to StackConfig.

Dependency flow (each arrow is an output reference Pulumi orders on):

    SiteBucket ──────────────┐
    SiteCertificate ─────────┼─> SiteDistribution ─> AliasRecords
    SsrFunction (ssr only) ──┘

Without a domain name, SiteCertificate and AliasRecords are skipped and the
site is only reachable on the CloudFront domain.
"""

import pulumi

from components._helpers import all_domains, common_tags, site_url
from components.cdn import SiteDistribution
from components.certificate import SiteCertificate
from components.compute import SsrFunction
from components.dns import AliasRecords
from components.storage import SiteBucket
from config import StackConfig

ID: str = "nodm:site:Website"


class Website(pulumi.ComponentResource):
    """Static or server-rendered website served through CloudFront."""

    def __init__(
        self,
        name: str,
        config: StackConfig,
        opts: pulumi.ResourceOptions | None = None,
    ):
        """
        Declare every resource the configured architecture needs.

        Outputs (set on self, registered for the component):
            bucket_name: Site bucket name.
            cdn_url: HTTPS URL of the CloudFront domain.
            custom_domain_url: HTTPS URL of the apex domain, or None.
            subdomain_urls: ``{label: url}`` for each subdomain (empty
                without a domain).
            function_name: Lambda function name, or None for static sites.
            api_endpoint: HTTP API endpoint, or None for static sites.
        """
        super().__init__(ID, name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)
        tags = common_tags(config.project_name, config.stage)

        pulumi.log.info(
            f"Declaring {config.architecture} site for stage {config.stage}", self
        )

        self.bucket = SiteBucket(
            name=f"{name}-storage",
            bucket_name=config.bucket_name,
            project_name=config.project_name,
            tags=tags,
            content_dir=config.content_dir,
            protect=config.protect_bucket,
            opts=child_opts,
        )

        self.certificate: SiteCertificate | None = None
        aliases: list[str] = []
        if config.domain_name:
            self.certificate = SiteCertificate(
                name=f"{name}-tls",
                domain_name=config.domain_name,
                subdomains=config.subdomains,
                tags=tags,
                opts=child_opts,
            )
            aliases = all_domains(config.domain_name, config.subdomains)
        else:
            pulumi.log.warn(
                "No domain_name configured; serving on the CloudFront domain only",
                self,
            )

        self.ssr: SsrFunction | None = None
        if config.is_ssr:
            self.ssr = SsrFunction(
                name=f"{name}-ssr",
                project_name=config.project_name,
                bundle_dir=config.server_bundle_dir,
                tags=tags,
                runtime=config.lambda_runtime,
                timeout=config.lambda_timeout,
                memory_size=config.lambda_memory_size,
                opts=child_opts,
            )

        self.distribution = SiteDistribution(
            name=f"{name}-cdn",
            bucket=self.bucket,
            tags=tags,
            aliases=aliases,
            certificate_arn=(
                self.certificate.certificate_arn if self.certificate else None
            ),
            api_origin_domain=self.ssr.origin_domain if self.ssr else None,
            price_class=config.price_class,
            opts=child_opts,
        )

        self.dns: AliasRecords | None = None
        if self.certificate is not None:
            self.dns = AliasRecords(
                name=f"{name}-dns",
                zone_id=self.certificate.zone_id,
                domains=self.certificate.domains,
                target_domain_name=self.distribution.domain_name,
                target_zone_id=self.distribution.hosted_zone_id,
                opts=child_opts,
            )

        self.bucket_name: pulumi.Output[str] = self.bucket.bucket_id
        self.cdn_url: pulumi.Output[str] = self.distribution.url
        self.custom_domain_url: str | None = (
            site_url(config.domain_name) if config.domain_name else None
        )
        self.subdomain_urls: dict[str, str] = (
            {
                label: site_url(f"{label}.{config.domain_name}")
                for label in config.subdomains
            }
            if config.domain_name
            else {}
        )
        self.function_name: pulumi.Output[str] | None = (
            self.ssr.function_name if self.ssr else None
        )
        self.api_endpoint: pulumi.Output[str] | None = (
            self.ssr.api_endpoint if self.ssr else None
        )
        self.register_outputs(
            {
                "bucket_name": self.bucket_name,
                "cdn_url": self.cdn_url,
                "custom_domain_url": self.custom_domain_url,
                "subdomain_urls": self.subdomain_urls,
                "function_name": self.function_name,
                "api_endpoint": self.api_endpoint,
            }
        )
