"""Shared fixtures for unit tests."""

from __future__ import annotations

import copy
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError
from kubernetes.client.exceptions import ApiException

from irsa_operator.services.aws.client import IamClient, S3Client, StsClient
from irsa_operator.services.kubernetes.client import labels_match

ACCOUNT_ID = "123456789012"


def object_key(obj: dict[str, Any]) -> tuple[str, str, str, str]:
    meta = obj["metadata"]
    return (obj["apiVersion"], obj["kind"], meta.get("namespace", ""), meta["name"])


class FakeKubernetesClient:
    """In-memory stand-in for KubernetesClient."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str, str, str], dict[str, Any]] = {}
        self.calls: list[tuple[str, tuple[str, str, str, str]]] = []
        self.failures: dict[tuple[str, str], Exception] = {}

    def fail(self, operation: str, name: str, error: Exception | None = None) -> None:
        """Make ``operation`` on the object called ``name`` ("ns/name" if namespaced) raise."""
        self.failures[(operation, name)] = error or ApiException(status=500, reason="Internal Server Error")

    def _check(self, operation: str, obj: dict[str, Any]) -> None:
        meta = obj["metadata"]
        name = f"{meta['namespace']}/{meta['name']}" if meta.get("namespace") else meta["name"]
        error = self.failures.get((operation, name))
        if error is not None:
            raise error

    def add(self, obj: dict[str, Any]) -> None:
        self.objects[object_key(obj)] = copy.deepcopy(obj)

    def apply(self, obj: dict[str, Any]) -> None:
        self.calls.append(("apply", object_key(obj)))
        self._check("apply", obj)
        self.objects[object_key(obj)] = copy.deepcopy(obj)

    def create(self, obj: dict[str, Any]) -> None:
        self.calls.append(("create", object_key(obj)))
        self._check("create", obj)
        if object_key(obj) in self.objects:
            raise ApiException(status=409, reason="AlreadyExists")
        self.objects[object_key(obj)] = copy.deepcopy(obj)

    def get(self, obj: dict[str, Any]) -> dict[str, Any] | None:
        stored = self.objects.get(object_key(obj))
        return copy.deepcopy(stored) if stored is not None else None

    def delete(
        self,
        obj: dict[str, Any],
        propagation: str = "Background",
        inclusions: dict[str, str] | None = None,
    ) -> bool:
        self.calls.append(("delete", object_key(obj)))
        self._check("delete", obj)
        live = self.objects.get(object_key(obj))
        if live is None:
            return False
        if not labels_match(live["metadata"].get("labels"), inclusions):
            return False
        del self.objects[object_key(obj)]
        return True

    def list(self, api_version: str, kind: str, namespace: str | None = None) -> list[dict[str, Any]]:
        return [
            copy.deepcopy(obj)
            for (version, k, ns, _), obj in self.objects.items()
            if version == api_version and k == kind and (namespace is None or ns == namespace)
        ]


class FakeAwsClient:
    """AwsClient whose wrappers sit on MagicMock boto3 clients."""

    def __init__(self, account_id: str = ACCOUNT_ID) -> None:
        self.iam_api = MagicMock()
        self.s3_api = MagicMock()
        self.sts_api = MagicMock()
        self.sts_api.get_caller_identity.return_value = {"Account": account_id}
        self.iam_api.get_paginator.return_value.paginate.return_value = [{"AttachedPolicies": []}]
        self.s3_api.head_object.side_effect = ClientError({"Error": {"Code": "404"}}, "HeadObject")

    def iam(self) -> IamClient:
        return IamClient(self.iam_api)

    def s3(self, region: str, bucket_name: str) -> S3Client:
        return S3Client(self.s3_api, region, bucket_name)

    def sts(self) -> StsClient:
        return StsClient(self.sts_api)

    def mutating_calls(self) -> list[str]:
        """Names of every boto3 call made, apart from reads."""
        reads = {"get_caller_identity", "head_object", "get_paginator", "list_attached_role_policies"}
        names = []
        for api in (self.iam_api, self.s3_api, self.sts_api):
            names.extend(name for name, _, _ in api.method_calls if name.split(".")[0].rstrip("()") not in reads)
        return names


@pytest.fixture(autouse=True)
def mock_kopf_event():
    """Keep handlers from posting Kubernetes events."""
    with patch("irsa_operator.utils.events.kopf.event") as mock_event:
        yield mock_event


@pytest.fixture
def kube() -> FakeKubernetesClient:
    return FakeKubernetesClient()


@pytest.fixture
def aws() -> FakeAwsClient:
    return FakeAwsClient()
