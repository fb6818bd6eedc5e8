"""Tests for the program entrypoint and its stack exports"""

import importlib.util
from pathlib import Path

import pulumi
import pytest

from tests.conftest import PROJECT, token

MAIN_PATH = Path(__file__).resolve().parent.parent / "__main__.py"


def load_program():
    """Import __main__.py under another name so main() is not run on import."""
    spec = importlib.util.spec_from_file_location("nodm_program", MAIN_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def program(monkeypatch):
    monkeypatch.delenv("DOMAIN_NAME", raising=False)
    yield load_program()
    pulumi.runtime.set_all_config({})


@pytest.fixture
def exports(monkeypatch) -> dict:
    recorded = {}
    monkeypatch.setattr(
        pulumi, "export", lambda name, value: recorded.__setitem__(name, value)
    )
    return recorded


def set_config(values: dict[str, str]):
    pulumi.runtime.set_all_config(
        {f"{PROJECT}:{key}": value for key, value in values.items()}
    )


@pulumi.runtime.test
def run_and_resolve(program, exports, check):
    program.main()
    return pulumi.Output.all(**exports).apply(check)


class TestExports:
    def test_static_without_domain(self, mocks, program, exports):
        set_config({"architecture": "static"})

        def check(values):
            assert values == {
                "bucket_name": token(f"{PROJECT}-storage-bucket", "id"),
                "cdn_url": "https://" + token(f"{PROJECT}-cdn-cdn", "domainName"),
            }

        run_and_resolve(program, exports, check)
        assert set(exports) == {"bucket_name", "cdn_url"}

    def test_ssr_with_domain(self, mocks, program, exports):
        set_config({"architecture": "ssr", "domain_name": "nodm.name"})

        def check(values):
            assert values["custom_domain_url"] == "https://nodm.name"
            assert values["www_url"] == "https://www.nodm.name"
            assert values["lambda_function_name"] == f"{PROJECT}-app"
            assert values["api_gateway_url"] == "https://" + token(
                f"{PROJECT}-ssr-api", "apiEndpoint"
            )

        run_and_resolve(program, exports, check)
        assert set(exports) == {
            "bucket_name",
            "cdn_url",
            "custom_domain_url",
            "www_url",
            "lambda_function_name",
            "api_gateway_url",
        }

    def test_one_url_per_subdomain(self, mocks, program, exports):
        set_config(
            {
                "architecture": "static",
                "domain_name": "nodm.name",
                "subdomains": '["www", "blog"]',
            }
        )

        def check(values):
            assert values["www_url"] == "https://www.nodm.name"
            assert values["blog_url"] == "https://blog.nodm.name"
            assert "lambda_function_name" not in values

        run_and_resolve(program, exports, check)


class TestInvalidConfig:
    def test_logs_and_reraises(self, mocks, program, exports, monkeypatch):
        errors = []
        monkeypatch.setattr(
            pulumi.log, "error", lambda msg, *args, **kwargs: errors.append(msg)
        )
        set_config({"architecture": "edge"})
        with pytest.raises(ValueError, match="architecture"):
            program.main()
        assert len(errors) == 1
        assert "Invalid stack configuration" in errors[0]
        assert exports == {}
        assert mocks.resources == []
