"""
Pulumi mocks that record every declared resource.

Mocked outputs embed a ``mock[<resource name>]`` marker, so any input that
references another resource's output carries that resource's name. Tests use
this to rebuild the dependency graph from resolved inputs alone.
"""

import re
from dataclasses import dataclass
from typing import Any

import pulumi
import pytest

from config import StackConfig

PROJECT = "nodm-name"
STACK = "dev"

ZONE_ID = "Z0000000MOCKZONE"
CLOUDFRONT_ZONE_ID = "Z2FDTNDATAQYW2"

_REF_RE = re.compile(r"mock\[([^\]]+)\]")


def token(name: str, attr: str) -> str:
    return f"mock[{name}]/{attr}"


def referenced_names(value: Any) -> set[str]:
    """Names of every resource whose output appears anywhere in value."""
    if isinstance(value, str):
        return set(_REF_RE.findall(value))
    if isinstance(value, dict):
        return set().union(*(referenced_names(v) for v in value.values()))
    if isinstance(value, (list, tuple)):
        return set().union(*(referenced_names(v) for v in value))
    return set()


@dataclass
class Declared:
    typ: str
    name: str
    inputs: dict

    @property
    def kind(self) -> str:
        """Short type name, e.g. "Record" for aws:route53/record:Record."""
        return self.typ.rsplit(":", 1)[-1]


def _computed_outputs(typ: str, name: str, inputs: dict) -> dict:
    kind = typ.rsplit(":", 1)[-1]
    outputs = {"arn": token(name, "arn")}
    if kind == "Bucket":
        outputs["bucket"] = inputs.get("bucket", name)
        outputs["bucketRegionalDomainName"] = token(name, "regional")
    elif kind == "Distribution":
        outputs["domainName"] = token(name, "domainName")
        outputs["hostedZoneId"] = CLOUDFRONT_ZONE_ID
    elif kind == "Certificate":
        domains = [inputs["domainName"], *inputs.get("subjectAlternativeNames", [])]
        outputs["domainValidationOptions"] = [
            {
                "domainName": domain,
                "resourceRecordName": f"_acme.{domain}.",
                "resourceRecordType": "CNAME",
                "resourceRecordValue": f"_token.{domain}.acm-validations.aws.",
            }
            for domain in domains
        ]
    elif kind == "Record":
        outputs["fqdn"] = token(name, "fqdn")
    elif kind == "Api":
        outputs["apiEndpoint"] = f"https://{token(name, 'apiEndpoint')}"
        outputs["executionArn"] = token(name, "executionArn")
    elif kind == "CertificateValidation":
        outputs.pop("arn")
    return outputs


class RecordingMocks(pulumi.runtime.Mocks):
    def __init__(self):
        self.resources: list[Declared] = []
        self.calls: list[str] = []

    def reset(self):
        self.resources.clear()
        self.calls.clear()

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        # Component resources have no cloud state of their own.
        if args.typ.startswith("nodm:"):
            return ["", {}]
        self.resources.append(Declared(args.typ, args.name, dict(args.inputs)))
        outputs = {**args.inputs, **_computed_outputs(args.typ, args.name, args.inputs)}
        return [token(args.name, "id"), outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        self.calls.append(args.token)
        if args.token == "aws:route53/getZone:getZone":
            return {"zoneId": ZONE_ID, "id": ZONE_ID, "name": args.args.get("name")}
        return {}

    def of_kind(self, kind: str) -> list[Declared]:
        return [r for r in self.resources if r.kind == kind]

    def by_name(self) -> dict[str, Declared]:
        return {r.name: r for r in self.resources}


_MOCKS = RecordingMocks()
pulumi.runtime.set_mocks(_MOCKS, project=PROJECT, stack=STACK, preview=False)


@pytest.fixture
def mocks() -> RecordingMocks:
    _MOCKS.reset()
    yield _MOCKS
    _MOCKS.reset()


@pytest.fixture
def static_config() -> StackConfig:
    return StackConfig(project_name=PROJECT, stage=STACK, architecture="static")


@pytest.fixture
def ssr_config() -> StackConfig:
    return StackConfig(
        project_name=PROJECT,
        stage=STACK,
        architecture="ssr",
        domain_name="nodm.name",
        subdomains=["www"],
        server_bundle_dir="server",
    )
