"""Tests for owned Kubernetes object manifests."""

from __future__ import annotations

import base64

import pytest

from irsa_operator.manifests import (
    build_key_secret,
    build_secret,
    build_service_account,
    key_secret_ref,
)
from irsa_operator.models import RoleManager, ServiceAccountSpec
from irsa_operator.utils.inventory import NamespacedName

MANAGED = {"irsa.cloud37.dev/managed-by": "irsa-operator"}


class TestBuildSecret:
    def test_values_are_base64(self) -> None:
        secret = build_secret("creds", "default", {"token": b"abc"})

        assert secret["data"] == {"token": base64.b64encode(b"abc").decode()}
        assert secret["type"] == "Opaque"
        assert secret["metadata"]["labels"] == MANAGED

    def test_empty_data(self) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            build_secret("creds", "default", {})


class TestKeySecret:
    """Test cases for the signing key Secret."""

    def test_fixed_location_and_type(self) -> None:
        secret = build_key_secret(b"public", b"private")

        assert secret["metadata"]["name"] == "irsa-manager-key"
        assert secret["metadata"]["namespace"] == "kube-system"
        assert secret["type"] == "kubernetes.io/ssh-auth"
        assert base64.b64decode(secret["data"]["ssh-publickey"]) == b"public"
        assert base64.b64decode(secret["data"]["ssh-privatekey"]) == b"private"

    def test_ref_points_at_secret(self) -> None:
        ref = key_secret_ref()
        secret = build_key_secret(b"public", b"private")

        assert ref["metadata"] == {"name": "irsa-manager-key", "namespace": "kube-system"}
        assert (ref["apiVersion"], ref["kind"]) == (secret["apiVersion"], secret["kind"])


class TestServiceAccount:
    """Test cases for ServiceAccount manifests."""

    def test_with_role(self) -> None:
        role = RoleManager(
            role_name="s3-reader",
            service_account=ServiceAccountSpec(name="sa-1", namespaces=("default",)),
            policies=(),
            account_id="123456789012",
        )

        sa = build_service_account(NamespacedName(name="sa-1", namespace="default"), role)

        assert sa["apiVersion"] == "v1"
        assert sa["kind"] == "ServiceAccount"
        assert sa["metadata"]["name"] == "sa-1"
        assert sa["metadata"]["namespace"] == "default"
        assert sa["metadata"]["labels"] == MANAGED
        assert sa["metadata"]["annotations"] == {
            "eks.amazonaws.com/role-arn": "arn:aws:iam::123456789012:role/s3-reader"
        }

    def test_without_role(self) -> None:
        sa = build_service_account(NamespacedName(name="sa-1", namespace="default"))

        assert "annotations" not in sa["metadata"]
