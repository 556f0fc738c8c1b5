"""Sequencing of the self-hosted OIDC issuer setup."""

from __future__ import annotations

import logging

from ..tracing import trace_span
from .base import IdentityProvider, IdPDiscovery
from .discovery import DiscoveryContents

logger = logging.getLogger(__name__)


class SetupOrchestrator:
    """Publishes the discovery documents and registers the issuer.

    No step is rolled back on failure; every step is idempotent so the
    whole sequence is simply run again on the next reconcile.
    """

    def __init__(
        self,
        discovery: IdPDiscovery,
        idp: IdentityProvider,
        contents: DiscoveryContents,
    ) -> None:
        self.discovery = discovery
        self.idp = idp
        self.contents = contents

    def execute(self, force_update: bool) -> None:
        with trace_span("create_storage"):
            self.discovery.create_storage()
        with trace_span("upload_discovery", attributes={"force_update": force_update}):
            self.discovery.upload(self.contents, force_update)
        with trace_span("create_oidc_provider"):
            self.idp.create()
        if self.idp.is_update():
            self.idp.update()
        logger.info("Self-hosted OIDC issuer provisioned")

    def delete(self, account_id: str) -> None:
        self.discovery.delete(self.contents)
        self.idp.delete(account_id)
        logger.info("Self-hosted OIDC issuer removed")
