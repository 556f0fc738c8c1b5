"""Tests for the pod identity webhook manifests."""

from __future__ import annotations

import base64

import pytest
from cryptography import x509
from cryptography.x509.oid import NameOID

from irsa_operator.selfhosted.webhook import (
    create_tls_credential,
    deployment,
    mutating_webhook_configuration,
    webhook_references,
    webhook_resources,
)


@pytest.fixture(scope="module")
def credential():
    return create_tls_credential()


class TestTlsCredential:
    """Test cases for the webhook serving certificate."""

    def test_subject_and_sans(self, credential) -> None:
        cert = x509.load_pem_x509_certificate(credential.certificate)

        cn = cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value
        assert cn == "pod-identity-webhook.kube-system.svc"
        sans = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
        assert sans.get_values_for_type(x509.DNSName) == [
            "pod-identity-webhook.kube-system.svc",
            "pod-identity-webhook.kube-system.svc.cluster.local",
        ]

    def test_self_signed_ca(self, credential) -> None:
        cert = x509.load_pem_x509_certificate(credential.certificate)

        assert cert.issuer == cert.subject
        assert cert.extensions.get_extension_for_class(x509.BasicConstraints).value.ca is True

    def test_key_usage(self, credential) -> None:
        cert = x509.load_pem_x509_certificate(credential.certificate)

        usage = cert.extensions.get_extension_for_class(x509.KeyUsage).value
        assert usage.digital_signature is True
        assert usage.key_encipherment is True
        assert usage.key_cert_sign is False

    def test_ca_bundle_is_base64_certificate(self, credential) -> None:
        assert base64.b64decode(credential.ca_bundle) == credential.certificate


class TestWebhookResources:
    """Test cases for the webhook object set."""

    def test_order_and_kinds(self, credential) -> None:
        kinds = [obj["kind"] for obj in webhook_resources(credential)]

        assert kinds == [
            "Secret",
            "Deployment",
            "MutatingWebhookConfiguration",
            "ClusterRole",
            "ClusterRoleBinding",
            "ServiceAccount",
            "Service",
        ]

    def test_all_labelled_as_managed(self, credential) -> None:
        for obj in webhook_resources(credential):
            assert obj["metadata"]["labels"]["irsa.cloud37.dev/managed-by"] == "irsa-operator"
            assert obj["metadata"]["name"] == "pod-identity-webhook"

    def test_tls_secret(self, credential) -> None:
        secret = webhook_resources(credential)[0]

        assert secret["type"] == "kubernetes.io/tls"
        assert base64.b64decode(secret["data"]["tls.crt"]) == credential.certificate

    def test_references_match_resources(self, credential) -> None:
        resources = webhook_resources(credential)
        refs = webhook_references()

        assert [(r["apiVersion"], r["kind"], r["metadata"]) for r in refs] == [
            (
                obj["apiVersion"],
                obj["kind"],
                {k: v for k, v in obj["metadata"].items() if k in ("name", "namespace")},
            )
            for obj in resources
        ]


class TestDeployment:
    def test_default_image(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("WEBHOOK_IMAGE", raising=False)

        container = deployment()["spec"]["template"]["spec"]["containers"][0]

        assert container["image"] == "quay.io/amis/pod-identity-webhook:v0.0.1"

    def test_image_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WEBHOOK_IMAGE", "registry.local/webhook:v1")

        container = deployment()["spec"]["template"]["spec"]["containers"][0]

        assert container["image"] == "registry.local/webhook:v1"


class TestMutatingWebhookConfiguration:
    def test_targets_pod_creation(self) -> None:
        config = mutating_webhook_configuration("Y2E=")
        webhook = config["webhooks"][0]

        assert config["apiVersion"] == "admissionregistration.k8s.io/v1"
        assert webhook["clientConfig"]["caBundle"] == "Y2E="
        assert webhook["clientConfig"]["service"] == {
            "name": "pod-identity-webhook",
            "namespace": "kube-system",
            "path": "/mutate",
        }
        assert webhook["rules"][0]["resources"] == ["pods"]
        assert webhook["failurePolicy"] == "Ignore"
        assert webhook["sideEffects"] == "None"
