"""Shared fixtures for configdiff integration tests.

Provides a snapshot file and a batch of live resource-history items that
describe the same account, with a known set of differences between them:

  - my-bucket: versioning switched from Off to Enabled
  - sg-1: arrays and relationships reordered, otherwise unchanged
  - i-1: instance type changed, tag added, captured later
  - bad-1: malformed in the snapshot (boolean configurationStateId)
  - fn-1: present live only (new item)
  - broken-1: live item with an undecodable configuration fragment
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from configdiff import normalize
from configdiff.models.records import Snapshot

_SNAPSHOT_CAPTURED = "2019-10-17T10:00:00.123Z"
_LIVE_CAPTURED = datetime(2019, 10, 17, 10, 0, 0, 456000, tzinfo=UTC)
_STATE_ID = 1571306400000

# ---------------------------------------------------------------------------
# Item builders
# ---------------------------------------------------------------------------


def _snapshot_item(
    resource_id: str,
    resource_type: str,
    configuration: dict[str, Any],
    supplementary: dict[str, Any] | None = None,
    relationships: list[dict[str, str]] | None = None,
    tags: dict[str, str] | None = None,
    state_id: object = _STATE_ID,
) -> dict[str, Any]:
    return {
        "configurationItemVersion": "1.3",
        "configurationItemCaptureTime": _SNAPSHOT_CAPTURED,
        "configurationStateId": state_id,
        "awsAccountId": "123456789012",
        "configurationItemStatus": "OK",
        "resourceType": resource_type,
        "resourceId": resource_id,
        "resourceName": resource_id,
        "ARN": f"arn:aws:test:::{resource_id}",
        "awsRegion": "us-east-1",
        "availabilityZone": "Regional",
        "resourceCreationTime": "2019-01-02T03:04:05.000Z",
        "configurationStateMd5Hash": "",
        "configuration": configuration,
        "supplementaryConfiguration": supplementary or {},
        "relationships": [
            {"resourceType": r["resourceType"], "resourceId": r["resourceId"], "name": r["relationshipName"]}
            for r in relationships or []
        ],
        "tags": tags or {},
    }


def _live_item(
    resource_id: str,
    resource_type: str,
    configuration: dict[str, Any] | str,
    supplementary: dict[str, Any] | None = None,
    relationships: list[dict[str, str]] | None = None,
    tags: dict[str, str] | None = None,
    captured: datetime = _LIVE_CAPTURED,
    state_id: str = str(_STATE_ID),
) -> dict[str, Any]:
    return {
        "version": "1.3",
        "accountId": "123456789012",
        "configurationItemCaptureTime": captured,
        "configurationItemStatus": "OK",
        "configurationStateId": state_id,
        "configurationItemMD5Hash": "",
        "arn": f"arn:aws:test:::{resource_id}",
        "resourceType": resource_type,
        "resourceId": resource_id,
        "resourceName": resource_id,
        "awsRegion": "us-east-1",
        "availabilityZone": "Regional",
        "resourceCreationTime": datetime(2019, 1, 2, 3, 4, 5, tzinfo=UTC),
        "tags": tags or {},
        "relationships": list(relationships or []),
        "configuration": configuration if isinstance(configuration, str) else json.dumps(configuration),
        "supplementaryConfiguration": {name: json.dumps(v) for name, v in (supplementary or {}).items()},
    }


def _bucket(status: str) -> dict[str, Any]:
    return {
        "resource_id": "my-bucket",
        "resource_type": "AWS::S3::Bucket",
        "configuration": {"name": "my-bucket", "owner": {"displayName": None, "id": "abc"}},
        "supplementary": {"BucketVersioningConfiguration": {"status": status, "isMfaDeleteEnabled": None}},
    }


_SG_RELATIONSHIPS = [
    {"resourceType": "AWS::EC2::VPC", "resourceId": "vpc-1", "relationshipName": "Is contained in Vpc"},
    {"resourceType": "AWS::EC2::Instance", "resourceId": "i-1", "relationshipName": "Is associated with Instance"},
]


def _security_group(reordered: bool) -> dict[str, Any]:
    ranges = ["10.0.0.0/8", "0.0.0.0/0"]
    permissions = [
        {"ipProtocol": "tcp", "fromPort": 443, "toPort": 443, "ipRanges": ranges},
        {"ipProtocol": "tcp", "fromPort": 22, "toPort": 22, "ipRanges": ["10.0.0.0/8"]},
    ]
    relationships = list(_SG_RELATIONSHIPS)
    if reordered:
        permissions[0] = {**permissions[0], "ipRanges": list(reversed(ranges))}
        permissions.reverse()
        relationships.reverse()
    return {
        "resource_id": "sg-1",
        "resource_type": "AWS::EC2::SecurityGroup",
        "configuration": {"groupId": "sg-1", "groupName": "web-sg", "ipPermissions": permissions},
        "relationships": relationships,
        "tags": {"Name": "web-sg"},
    }


def _instance(instance_type: str, tags: dict[str, str]) -> dict[str, Any]:
    return {
        "resource_id": "i-1",
        "resource_type": "AWS::EC2::Instance",
        "configuration": {
            "instanceId": "i-1",
            "instanceType": instance_type,
            "state": {"name": "running", "code": 16},
            "securityGroups": [{"groupId": "sg-1", "groupName": "web"}],
        },
        "tags": tags,
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def snapshot_items() -> list[dict[str, Any]]:
    return [
        _snapshot_item(**_bucket("Off")),
        _snapshot_item(**_security_group(reordered=False)),
        _snapshot_item(**_instance("t3.micro", {"Name": "api"})),
        _snapshot_item("bad-1", "AWS::SQS::Queue", {"queueName": "bad-1"}, state_id=True),
    ]


@pytest.fixture
def make_snapshot_bytes() -> Callable[[list[dict[str, Any]]], bytes]:
    def _make(items: list[dict[str, Any]]) -> bytes:
        document = {"fileVersion": "1.0", "configSnapshotId": "snap-123", "configurationItems": items}
        return json.dumps(document).encode()

    return _make


@pytest.fixture
def snapshot_bytes(
    snapshot_items: list[dict[str, Any]],
    make_snapshot_bytes: Callable[[list[dict[str, Any]]], bytes],
) -> bytes:
    return make_snapshot_bytes(snapshot_items)


@pytest.fixture
def snapshot_reference() -> dict[str, str]:
    return {
        "Bucket": "config-bucket",
        "Key": "AWSLogs/123456789012/Config/us-east-1/2019/10/17/ConfigSnapshot/snap-123.json.gz",
    }


@pytest.fixture
def snapshot(snapshot_bytes: bytes, snapshot_reference: dict[str, str]) -> Snapshot:
    return normalize(snapshot_bytes, reference=snapshot_reference)


@pytest.fixture
def unchanged_live_items() -> list[dict[str, Any]]:
    return [
        _live_item(**_bucket("Off")),
        _live_item(**_security_group(reordered=True)),
        _live_item(**_instance("t3.micro", {"Name": "api"})),
    ]


@pytest.fixture
def live_items() -> list[dict[str, Any]]:
    return [
        _live_item(**_bucket("Enabled")),
        _live_item(**_security_group(reordered=True)),
        _live_item(
            **_instance("t3.large", {"Name": "api", "team": "core"}),
            captured=datetime(2019, 10, 18, 9, 30, 0, 250000, tzinfo=UTC),
            state_id="1571391000000",
        ),
        _live_item("fn-1", "AWS::Lambda::Function", {"functionName": "fn-1", "runtime": "python3.12"}),
        _live_item("broken-1", "AWS::SNS::Topic", "{broken"),
    ]
