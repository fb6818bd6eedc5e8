"""
nodm-name website infrastructure - Pulumi entrypoint.

Builds one Website component from stack config. Two architectures share the
same domain and are selected with the ``architecture`` config key:

- **static**: CloudFront serving a private S3 bucket through OAC.
- **ssr**: CloudFront with the Lambda/HTTP API as default origin and S3 for
  static asset paths.

A custom domain is optional (``domain_name`` config or ``DOMAIN_NAME`` env).
When set, an ACM certificate and Route 53 alias records are declared for the
apex and every configured subdomain.

Stack exports: bucket_name, cdn_url, and when applicable custom_domain_url,
<label>_url per subdomain, lambda_function_name, api_gateway_url.
"""

import pulumi

from components import Website
from config import StackConfig


def main():
    """
    Read config, declare the website and export its URLs.
    """
    try:
        config = StackConfig.from_pulumi_config(pulumi.Config(), pulumi.get_stack())
    except ValueError as e:
        pulumi.log.error(f"Invalid stack configuration: {e}")
        raise

    site = Website(name=config.project_name, config=config)

    outputs = [
        ("bucket_name", site.bucket_name),
        ("cdn_url", site.cdn_url),
    ]
    if site.custom_domain_url is not None:
        outputs.append(("custom_domain_url", site.custom_domain_url))
    for label, url in site.subdomain_urls.items():
        outputs.append((f"{label}_url", url))
    if site.ssr is not None:
        outputs.append(("lambda_function_name", site.function_name))
        outputs.append(("api_gateway_url", site.api_endpoint))

    for output_name, value in outputs:
        pulumi.export(output_name, value)


if __name__ == "__main__":
    main()
