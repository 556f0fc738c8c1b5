"""Typed views over IRSASetup and IRSA resource specs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .utils.inventory import NamespacedName


@dataclass(frozen=True)
class S3Discovery:
    """S3 bucket hosting the OIDC discovery documents."""

    region: str = ""
    bucket_name: str = ""


@dataclass(frozen=True)
class SetupSpec:
    """Desired state of an IRSASetup resource."""

    mode: str
    cleanup: bool = False
    s3: S3Discovery = field(default_factory=S3Discovery)
    iam_oidc_provider: str = ""

    @classmethod
    def from_spec(cls, spec: dict[str, Any]) -> SetupSpec:
        s3 = (spec.get("discovery") or {}).get("s3") or {}
        return cls(
            mode=spec.get("mode", ""),
            cleanup=bool(spec.get("cleanup", False)),
            s3=S3Discovery(
                region=s3.get("region", "") or "",
                bucket_name=s3.get("bucketName", "") or "",
            ),
            iam_oidc_provider=spec.get("iamOIDCProvider", "") or "",
        )


@dataclass(frozen=True)
class ServiceAccountSpec:
    """ServiceAccount name and the namespaces it is created in."""

    name: str
    namespaces: tuple[str, ...] = ()

    def namespaced_names(self) -> list[NamespacedName]:
        return [NamespacedName(name=self.name, namespace=ns) for ns in self.namespaces]


@dataclass(frozen=True)
class BindingSpec:
    """Desired state of an IRSA resource."""

    service_account: ServiceAccountSpec
    role_name: str
    policies: tuple[str, ...] = ()
    cleanup: bool = False

    @classmethod
    def from_spec(cls, spec: dict[str, Any]) -> BindingSpec:
        sa = spec.get("serviceAccount") or {}
        return cls(
            service_account=ServiceAccountSpec(
                name=sa.get("name", "") or "",
                namespaces=tuple(sa.get("namespaces") or ()),
            ),
            role_name=(spec.get("iamRole") or {}).get("name", "") or "",
            policies=tuple(spec.get("iamPolicies") or ()),
            cleanup=bool(spec.get("cleanup", False)),
        )


@dataclass(frozen=True)
class RoleManager:
    """Role parameters resolved for a single reconcile."""

    role_name: str
    service_account: ServiceAccountSpec
    policies: tuple[str, ...]
    account_id: str

    @property
    def role_arn(self) -> str:
        return f"arn:aws:iam::{self.account_id}:role/{self.role_name}"
