"""Interfaces for self-hosted OIDC issuer components."""

from __future__ import annotations

from typing import Protocol

from .discovery import DiscoveryContents


class IdPDiscovery(Protocol):
    """Public storage for the issuer's discovery documents."""

    def create_storage(self) -> None:
        """Create the storage location and make it publicly readable."""
        ...

    def upload(self, contents: DiscoveryContents, force_update: bool) -> None:
        """Upload both documents, overwriting only when ``force_update`` is set."""
        ...

    def delete(self, contents: DiscoveryContents) -> None:
        """Delete both documents and the storage location."""
        ...


class IdentityProvider(Protocol):
    """Registration of the issuer with the cloud IAM system."""

    def create(self) -> None:
        ...

    def delete(self, account_id: str) -> None:
        ...

    def is_update(self) -> bool:
        ...

    def update(self) -> None:
        ...
