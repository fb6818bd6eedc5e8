"""
ACM certificate for the apex domain and its subdomains, validated over DNS.

CloudFront only accepts certificates issued in us-east-1, so the certificate
and its validation use a dedicated provider pinned to that region. Validation
is a fan-out/fan-in: one Route 53 CNAME per covered domain, then a single
CertificateValidation that waits for all of them. Consumers should read
``certificate_arn`` from this component rather than from the certificate, so
they are only applied once the certificate is issued.
"""

import pulumi
import pulumi_aws as aws

from components._helpers import all_domains, subdomain_fqdns, validation_option_for

ID: str = "nodm:acm:SiteCertificate"

CERTIFICATE_REGION = "us-east-1"

VALIDATION_RECORD_TTL = 60


class SiteCertificate(pulumi.ComponentResource):
    """
    Hosted-zone lookup, DNS-validated certificate and its validation records.

    Resources: Provider (us-east-1), Certificate, one validation Record per
    domain, CertificateValidation.
    """

    def __init__(
        self,
        name: str,
        domain_name: str,
        subdomains: list[str],
        tags: dict[str, str],
        opts: pulumi.ResourceOptions | None = None,
    ):
        """
        Create the certificate and wait for DNS validation.

        Args:
            name: Pulumi resource name prefix.
            domain_name: Apex domain; its public hosted zone must exist.
            subdomains: Labels added as subject alternative names.
            tags: Tags for the certificate.

        Outputs (set on self, registered for the component):
            certificate_arn: ARN of the issued certificate.
            zone_id: Route 53 hosted zone ID of the apex domain.
            domains: Every name the certificate covers, apex first.
        """
        super().__init__(ID, name, None, opts)

        self.domains: list[str] = all_domains(domain_name, subdomains)

        zone = aws.route53.get_zone_output(name=domain_name, private_zone=False)
        self.zone_id: pulumi.Output[str] = zone.zone_id

        us_east_1 = aws.Provider(
            resource_name=f"{name}-{CERTIFICATE_REGION}",
            region=CERTIFICATE_REGION,
            opts=pulumi.ResourceOptions(parent=self),
        )
        cert_opts = pulumi.ResourceOptions(parent=self, provider=us_east_1)

        self.certificate = aws.acm.Certificate(
            resource_name=f"{name}-cert",
            domain_name=domain_name,
            subject_alternative_names=subdomain_fqdns(domain_name, subdomains),
            validation_method="DNS",
            tags=tags,
            opts=cert_opts,
        )

        # Fan out: one record per domain. Subdomains are single DNS labels and
        # never wildcards, so each covered name has its own validation record
        # name and no DNS record is owned by two of these resources.
        child_opts = pulumi.ResourceOptions(parent=self)
        records = []
        for index, domain in enumerate(self.domains):
            option = self.certificate.domain_validation_options.apply(
                lambda options, d=domain: validation_option_for(options, d)
            )
            records.append(
                aws.route53.Record(
                    resource_name=f"{name}-validation-record-{index}",
                    name=option.apply(lambda o: o.resource_record_name),
                    type=option.apply(lambda o: o.resource_record_type),
                    records=[option.apply(lambda o: o.resource_record_value)],
                    zone_id=self.zone_id,
                    ttl=VALIDATION_RECORD_TTL,
                    allow_overwrite=True,
                    opts=child_opts,
                )
            )

        # Fan in: blocks until ACM reports the certificate as issued.
        validation = aws.acm.CertificateValidation(
            resource_name=f"{name}-validation",
            certificate_arn=self.certificate.arn,
            validation_record_fqdns=[record.fqdn for record in records],
            opts=cert_opts,
        )

        self.certificate_arn: pulumi.Output[str] = validation.certificate_arn
        self.register_outputs(
            {
                "certificate_arn": self.certificate_arn,
                "zone_id": self.zone_id,
                "domains": self.domains,
            }
        )
