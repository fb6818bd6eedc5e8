"""
Route 53 alias records pointing the site's domains at CloudFront.
"""

import pulumi
import pulumi_aws as aws

ID: str = "nodm:dns:AliasRecords"


class AliasRecords(pulumi.ComponentResource):
    """
    One ``A`` alias record per domain, all targeting the same distribution.

    The apex record is named ``<name>-apex``; every other domain uses its
    leading label under a ``sub-`` prefix (``<name>-sub-www``).
    """

    def __init__(
        self,
        name: str,
        zone_id: pulumi.Input[str],
        domains: list[str],
        target_domain_name: pulumi.Input[str],
        target_zone_id: pulumi.Input[str],
        opts: pulumi.ResourceOptions | None = None,
    ):
        """
        Args:
            name: Pulumi resource name prefix.
            zone_id: Hosted zone holding the records.
            domains: Apex domain first, then each subdomain FQDN.
            target_domain_name: Distribution domain name.
            target_zone_id: Distribution hosted zone ID.
        """
        super().__init__(ID, name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)
        alias = aws.route53.RecordAliasArgs(
            name=target_domain_name,
            zone_id=target_zone_id,
            evaluate_target_health=False,
        )

        self.records: dict[str, aws.route53.Record] = {}
        apex = domains[0]
        for domain in domains:
            suffix = "apex" if domain == apex else "sub-" + domain.split(".", 1)[0]
            self.records[domain] = aws.route53.Record(
                resource_name=f"{name}-{suffix}",
                name=domain,
                type="A",
                zone_id=zone_id,
                aliases=[alias],
                opts=child_opts,
            )

        self.fqdns: dict[str, pulumi.Output[str]] = {
            domain: record.fqdn for domain, record in self.records.items()
        }
        self.register_outputs({"fqdns": self.fqdns})
