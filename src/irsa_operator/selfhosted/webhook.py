"""Manifests for the Amazon EKS pod identity webhook.

The webhook injects web identity credentials into pods whose
ServiceAccount carries the role ARN annotation. Its TLS certificate is
self-signed and doubles as the CA bundle of the mutating webhook.
"""

from __future__ import annotations

import base64
import datetime
import os
from dataclasses import dataclass
from typing import Any

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from ..constants import WEBHOOK_DEFAULT_IMAGE, WEBHOOK_NAME, WEBHOOK_NAMESPACE
from ..manifests import MANAGED_LABELS, build_secret

CERTIFICATE_DAYS = 365
APP_LABELS = {"app": WEBHOOK_NAME}


@dataclass(frozen=True)
class TlsCredential:
    """PEM-encoded certificate and private key."""

    certificate: bytes
    private_key: bytes

    @property
    def ca_bundle(self) -> str:
        return base64.b64encode(self.certificate).decode("ascii")


def service_dns_names(name: str, namespace: str) -> list[str]:
    return [f"{name}.{namespace}.svc", f"{name}.{namespace}.svc.cluster.local"]


def create_tls_credential(name: str = WEBHOOK_NAME, namespace: str = WEBHOOK_NAMESPACE) -> TlsCredential:
    """Create a self-signed serving certificate for the webhook Service."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    dns_names = service_dns_names(name, namespace)
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, dns_names[0])])
    now = datetime.datetime.now(datetime.timezone.utc)

    certificate = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=CERTIFICATE_DAYS))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                content_commitment=False,
                key_encipherment=True,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=False,
                crl_sign=False,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
        .add_extension(x509.SubjectAlternativeName([x509.DNSName(n) for n in dns_names]), critical=False)
        .sign(key, hashes.SHA256())
    )

    return TlsCredential(
        certificate=certificate.public_bytes(serialization.Encoding.PEM),
        private_key=key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        ),
    )


def _metadata(namespaced: bool = True, **extra: Any) -> dict[str, Any]:
    meta: dict[str, Any] = {"name": WEBHOOK_NAME, "labels": dict(MANAGED_LABELS)}
    if namespaced:
        meta["namespace"] = WEBHOOK_NAMESPACE
    meta.update(extra)
    return meta


def service_account() -> dict[str, Any]:
    return {"apiVersion": "v1", "kind": "ServiceAccount", "metadata": _metadata()}


def cluster_role() -> dict[str, Any]:
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "ClusterRole",
        "metadata": _metadata(namespaced=False),
        "rules": [
            {"apiGroups": [""], "resources": ["secrets"], "verbs": ["create", "get", "update", "patch"]},
            {"apiGroups": [""], "resources": ["serviceaccounts"], "verbs": ["get", "watch", "list"]},
            {
                "apiGroups": ["certificates.k8s.io"],
                "resources": ["certificatesigningrequests"],
                "verbs": ["create", "get", "list", "watch"],
            },
        ],
    }


def cluster_role_binding() -> dict[str, Any]:
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "ClusterRoleBinding",
        "metadata": _metadata(namespaced=False),
        "roleRef": {"apiGroup": "rbac.authorization.k8s.io", "kind": "ClusterRole", "name": WEBHOOK_NAME},
        "subjects": [{"kind": "ServiceAccount", "name": WEBHOOK_NAME, "namespace": WEBHOOK_NAMESPACE}],
    }


def service() -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": _metadata(
            annotations={
                "prometheus.io/port": "443",
                "prometheus.io/scheme": "https",
                "prometheus.io/scrape": "true",
            }
        ),
        "spec": {
            "ports": [{"port": 443, "targetPort": 443}],
            "selector": dict(APP_LABELS),
        },
    }


def deployment(image: str | None = None) -> dict[str, Any]:
    image = image or os.getenv("WEBHOOK_IMAGE", WEBHOOK_DEFAULT_IMAGE)
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": _metadata(),
        "spec": {
            "replicas": 1,
            "selector": {"matchLabels": dict(APP_LABELS)},
            "template": {
                "metadata": {"labels": dict(APP_LABELS)},
                "spec": {
                    "serviceAccountName": WEBHOOK_NAME,
                    "containers": [
                        {
                            "name": WEBHOOK_NAME,
                            "image": image,
                            "imagePullPolicy": "Always",
                            "command": [
                                "/webhook",
                                "--in-cluster",
                                f"--namespace={WEBHOOK_NAMESPACE}",
                                f"--service-name={WEBHOOK_NAME}",
                                f"--tls-secret={WEBHOOK_NAME}",
                                "--annotation-prefix=eks.amazonaws.com",
                                "--token-audience=sts.amazonaws.com",
                                "--logtostderr",
                            ],
                            "volumeMounts": [
                                {"name": "webhook-certs", "mountPath": "/var/run/app/certs", "readOnly": False},
                            ],
                        }
                    ],
                    "volumes": [{"name": "webhook-certs", "emptyDir": {}}],
                },
            },
        },
    }


def mutating_webhook_configuration(ca_bundle: str) -> dict[str, Any]:
    return {
        "apiVersion": "admissionregistration.k8s.io/v1",
        "kind": "MutatingWebhookConfiguration",
        "metadata": _metadata(namespaced=False),
        "webhooks": [
            {
                "name": "pod-identity-webhook.amazonaws.com",
                "clientConfig": {
                    "service": {"name": WEBHOOK_NAME, "namespace": WEBHOOK_NAMESPACE, "path": "/mutate"},
                    "caBundle": ca_bundle,
                },
                "rules": [
                    {
                        "operations": ["CREATE"],
                        "apiGroups": [""],
                        "apiVersions": ["v1"],
                        "resources": ["pods"],
                    }
                ],
                "failurePolicy": "Ignore",
                "sideEffects": "None",
                "admissionReviewVersions": ["v1", "v1beta1"],
            }
        ],
    }


def tls_secret(credential: TlsCredential) -> dict[str, Any]:
    return build_secret(
        WEBHOOK_NAME,
        WEBHOOK_NAMESPACE,
        {"tls.crt": credential.certificate, "tls.key": credential.private_key},
        secret_type="kubernetes.io/tls",
    )


def webhook_resources(credential: TlsCredential | None = None) -> list[dict[str, Any]]:
    """All objects of the webhook, in apply order."""
    credential = credential or create_tls_credential()
    return [
        tls_secret(credential),
        deployment(),
        mutating_webhook_configuration(credential.ca_bundle),
        cluster_role(),
        cluster_role_binding(),
        service_account(),
        service(),
    ]


def webhook_references() -> list[dict[str, Any]]:
    """References to every webhook object, for deletion."""
    refs = [
        ("v1", "Secret", True),
        ("apps/v1", "Deployment", True),
        ("admissionregistration.k8s.io/v1", "MutatingWebhookConfiguration", False),
        ("rbac.authorization.k8s.io/v1", "ClusterRole", False),
        ("rbac.authorization.k8s.io/v1", "ClusterRoleBinding", False),
        ("v1", "ServiceAccount", True),
        ("v1", "Service", True),
    ]
    return [
        {
            "apiVersion": api_version,
            "kind": kind,
            "metadata": {"name": WEBHOOK_NAME, **({"namespace": WEBHOOK_NAMESPACE} if namespaced else {})},
        }
        for api_version, kind, namespaced in refs
    ]
