"""OIDC issuer location for self-hosted and EKS setups."""

from __future__ import annotations

from typing import Protocol

from .constants import MODE_EKS, MODE_SELFHOSTED
from .models import SetupSpec
from .utils.errors import ConfigurationError


class IssuerMeta(Protocol):
    """Location of an OIDC issuer."""

    def issuer_host_path(self) -> str:
        """Issuer URL without the scheme."""
        ...

    def issuer_url(self) -> str:
        """Issuer URL with the https scheme."""
        ...


class S3IssuerMeta:
    """Issuer served from a public S3 bucket."""

    def __init__(self, region: str, bucket_name: str) -> None:
        if not region or not bucket_name:
            raise ConfigurationError(
                f"s3 region and bucket name must not be empty. "
                f"region: {region}, bucketName: {bucket_name}"
            )
        self.region = region
        self.bucket_name = bucket_name

    def issuer_host_path(self) -> str:
        return f"s3-{self.region}.amazonaws.com/{self.bucket_name}"

    def issuer_url(self) -> str:
        return f"https://{self.issuer_host_path()}"


class ProviderIssuerMeta:
    """Issuer of an OIDC provider that already exists, e.g. an EKS cluster's."""

    def __init__(self, provider_name: str) -> None:
        if not provider_name:
            raise ConfigurationError("IAM OIDC Provider Name must not be empty")
        self.provider_name = provider_name

    def issuer_host_path(self) -> str:
        return self.provider_name

    def issuer_url(self) -> str:
        return f"https://{self.issuer_host_path()}"


def new_issuer_meta(setup: SetupSpec) -> IssuerMeta:
    """Select the issuer variant for the setup's mode."""
    if setup.mode == MODE_SELFHOSTED:
        return S3IssuerMeta(setup.s3.region, setup.s3.bucket_name)
    if setup.mode == MODE_EKS:
        return ProviderIssuerMeta(setup.iam_oidc_provider)
    raise ConfigurationError(f"unsupported mode {setup.mode!r}, expected '{MODE_SELFHOSTED}' or '{MODE_EKS}'")
