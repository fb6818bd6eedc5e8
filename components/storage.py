"""
Private S3 bucket for site assets, reachable only through CloudFront.

This component creates the bucket, a Block Public Access configuration that
always denies all four public-access paths, and the Origin Access Control
(OAC) CloudFront uses to sign its requests. The read policy itself needs the
distribution's ARN and therefore lives in the distribution component.
Optionally uploads a local directory as bucket objects.
"""

import pulumi
import pulumi_aws as aws

from components._helpers import content_type, iter_site_files

ID: str = "nodm:storage:SiteBucket"

# Always applied; not configurable. Used by tests and callers to assert on
# secure defaults.
S3_BLOCK_PUBLIC_ACCESS: dict[str, bool] = {
    "block_public_acls": True,
    "block_public_policy": True,
    "ignore_public_acls": True,
    "restrict_public_buckets": True,
}


class SiteBucket(pulumi.ComponentResource):
    """
    S3 bucket with Block Public Access, an S3 OAC and optional site content.

    Resources: Bucket, BucketPublicAccessBlock, OriginAccessControl and one
    BucketObjectv2 per file in content_dir.
    """

    def __init__(
        self,
        name: str,
        bucket_name: str,
        project_name: str,
        tags: dict[str, str],
        content_dir: str | None = None,
        protect: bool = False,
        opts: pulumi.ResourceOptions | None = None,
    ):
        """
        Create the bucket, its public access block and the OAC.

        Args:
            name: Pulumi resource name prefix for the child resources.
            bucket_name: Physical bucket name (globally unique).
            project_name: Used for the OAC name and description.
            tags: Tags for the bucket and its objects.
            content_dir: If set, upload every file below it.
            protect: Protect the bucket and retain it on delete (production).

        Outputs (set on self, registered for the component):
            bucket_id: Bucket name as returned by AWS.
            bucket_arn: Bucket ARN (for the CloudFront read policy).
            bucket_regional_domain_name: Regional endpoint used as the origin.
            oac_id: Origin Access Control ID for the S3 origin.
        """
        super().__init__(ID, name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        bucket_opts = pulumi.ResourceOptions(
            parent=self,
            protect=protect,
            retain_on_delete=protect,
        )
        self.bucket = aws.s3.Bucket(
            resource_name=f"{name}-bucket",
            bucket=bucket_name,
            tags=tags,
            opts=bucket_opts,
        )

        aws.s3.BucketPublicAccessBlock(
            resource_name=f"{name}-public-access-block",
            bucket=self.bucket.id,
            opts=child_opts,
            **S3_BLOCK_PUBLIC_ACCESS,
        )

        # retain_on_delete avoids 409 OriginAccessControlInUse on destroy while
        # AWS still references the OAC from the deleted distribution.
        oac_opts = pulumi.ResourceOptions(
            parent=self,
            retain_on_delete=True,
        )
        self.oac = aws.cloudfront.OriginAccessControl(
            resource_name=f"{name}-oac",
            name=f"{project_name}-oac",
            description=f"OAC for {project_name} S3 bucket",
            origin_access_control_origin_type="s3",
            signing_behavior="always",
            signing_protocol="sigv4",
            opts=oac_opts,
        )

        if content_dir:
            count = 0
            for key, path in iter_site_files(content_dir):
                aws.s3.BucketObjectv2(
                    resource_name=f"{name}-object-{key}",
                    bucket=self.bucket.id,
                    key=key,
                    source=pulumi.FileAsset(path),
                    content_type=content_type(key),
                    tags=tags,
                    opts=child_opts,
                )
                count += 1
            pulumi.log.info(f"Uploading {count} files from {content_dir}", self)

        self.bucket_id: pulumi.Output[str] = self.bucket.id
        self.bucket_arn: pulumi.Output[str] = self.bucket.arn
        self.bucket_regional_domain_name: pulumi.Output[str] = (
            self.bucket.bucket_regional_domain_name
        )
        self.oac_id: pulumi.Output[str] = self.oac.id
        self.register_outputs(
            {
                "bucket_id": self.bucket_id,
                "bucket_arn": self.bucket_arn,
                "bucket_regional_domain_name": self.bucket_regional_domain_name,
                "oac_id": self.oac_id,
            }
        )
