"""Builders for the Kubernetes objects the operator owns."""

from __future__ import annotations

import base64
from typing import Any

from .constants import (
    ANNOTATION_ROLE_ARN,
    FIELD_MANAGER,
    KEY_SECRET_NAME,
    KEY_SECRET_NAMESPACE,
    KEY_SECRET_PRIVATE_KEY,
    KEY_SECRET_PUBLIC_KEY,
    KEY_SECRET_TYPE,
    LABEL_MANAGED_BY,
)
from .models import RoleManager
from .utils.inventory import NamespacedName

MANAGED_LABELS = {LABEL_MANAGED_BY: FIELD_MANAGER}


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def build_secret(
    name: str,
    namespace: str,
    data: dict[str, bytes],
    secret_type: str = "Opaque",
) -> dict[str, Any]:
    """Build a Secret manifest, base64-encoding each value."""
    if not data:
        raise ValueError("Secret data must not be empty")
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "labels": dict(MANAGED_LABELS),
        },
        "type": secret_type,
        "data": {key: b64(value) for key, value in data.items()},
    }


def build_key_secret(public_key_pem: bytes, private_key_pem: bytes) -> dict[str, Any]:
    """Secret holding the service account signing key pair."""
    return build_secret(
        KEY_SECRET_NAME,
        KEY_SECRET_NAMESPACE,
        {
            KEY_SECRET_PUBLIC_KEY: public_key_pem,
            KEY_SECRET_PRIVATE_KEY: private_key_pem,
        },
        secret_type=KEY_SECRET_TYPE,
    )


def key_secret_ref() -> dict[str, Any]:
    """Reference to the key pair Secret, enough to get or delete it."""
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {"name": KEY_SECRET_NAME, "namespace": KEY_SECRET_NAMESPACE},
    }


def build_service_account(ref: NamespacedName, role: RoleManager | None = None) -> dict[str, Any]:
    """ServiceAccount manifest, annotated with the role ARN when a role is given."""
    metadata: dict[str, Any] = {
        "name": ref.name,
        "namespace": ref.namespace,
        "labels": dict(MANAGED_LABELS),
    }
    if role is not None:
        metadata["annotations"] = {ANNOTATION_ROLE_ARN: role.role_arn}
    return {"apiVersion": "v1", "kind": "ServiceAccount", "metadata": metadata}
