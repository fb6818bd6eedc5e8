"""Tests for pure helpers"""

import json
from dataclasses import dataclass

import pytest

from components import _helpers


@dataclass
class Option:
    domain_name: str
    resource_record_name: str


class TestDomains:
    def test_subdomain_fqdns(self):
        assert _helpers.subdomain_fqdns("nodm.name", ["www", "blog"]) == [
            "www.nodm.name",
            "blog.nodm.name",
        ]

    def test_all_domains_starts_with_apex(self):
        assert _helpers.all_domains("nodm.name", ["www"]) == [
            "nodm.name",
            "www.nodm.name",
        ]

    def test_all_domains_without_subdomains(self):
        assert _helpers.all_domains("nodm.name", []) == ["nodm.name"]

    def test_site_url(self):
        assert _helpers.site_url("www.nodm.name") == "https://www.nodm.name"


class TestCommonTags:
    def test_includes_stage(self):
        assert _helpers.common_tags("nodm-name", "dev") == {
            "Project": "nodm-name",
            "ManagedBy": "Pulumi",
            "Stage": "dev",
        }


class TestBucketReadPolicy:
    def test_scoped_to_distribution(self):
        policy = json.loads(
            _helpers.bucket_read_policy(
                "arn:aws:s3:::nodm-name",
                "arn:aws:cloudfront::123456789012:distribution/E1",
            )
        )
        (statement,) = policy["Statement"]
        assert statement["Effect"] == "Allow"
        assert statement["Principal"] == {"Service": "cloudfront.amazonaws.com"}
        assert statement["Action"] == "s3:GetObject"
        assert statement["Resource"] == "arn:aws:s3:::nodm-name/*"
        assert statement["Condition"] == {
            "StringEquals": {
                "AWS:SourceArn": "arn:aws:cloudfront::123456789012:distribution/E1"
            }
        }


class TestLambdaAssumeRolePolicy:
    def test_trusts_lambda_only(self):
        policy = json.loads(_helpers.lambda_assume_role_policy())
        (statement,) = policy["Statement"]
        assert statement["Principal"] == {"Service": "lambda.amazonaws.com"}
        assert statement["Action"] == "sts:AssumeRole"


class TestValidationOptionFor:
    def test_matches_by_domain_not_position(self):
        options = [
            Option("www.nodm.name", "_b.www.nodm.name."),
            Option("nodm.name", "_a.nodm.name."),
        ]
        assert (
            _helpers.validation_option_for(options, "nodm.name").resource_record_name
            == "_a.nodm.name."
        )

    def test_missing_domain_raises(self):
        with pytest.raises(KeyError):
            _helpers.validation_option_for([Option("nodm.name", "_a")], "www.nodm.name")


class TestApiOriginDomain:
    def test_strips_scheme(self):
        assert (
            _helpers.api_origin_domain(
                "https://abc123.execute-api.us-east-1.amazonaws.com"
            )
            == "abc123.execute-api.us-east-1.amazonaws.com"
        )

    def test_strips_path(self):
        assert _helpers.api_origin_domain("https://api.example.com/prod") == (
            "api.example.com"
        )


class TestContentType:
    def test_html(self):
        assert _helpers.content_type("index.html") == "text/html"

    def test_unknown_extension(self):
        assert _helpers.content_type("LICENSE") == "application/octet-stream"


class TestIterSiteFiles:
    def test_relative_posix_keys_in_sorted_order(self, tmp_path):
        (tmp_path / "index.html").write_text("<html></html>")
        (tmp_path / "css").mkdir()
        (tmp_path / "css" / "site.css").write_text("body {}")
        keys = [key for key, _ in _helpers.iter_site_files(str(tmp_path))]
        assert keys == ["index.html", "css/site.css"]

    def test_empty_directory(self, tmp_path):
        assert list(_helpers.iter_site_files(str(tmp_path))) == []
