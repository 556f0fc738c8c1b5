"""IAM registration of the self-hosted OIDC issuer."""

from __future__ import annotations

import logging

from ..constants import OIDC_CLIENT_ID, OIDC_PLACEHOLDER_THUMBPRINT
from ..issuer import IssuerMeta
from ..services.aws.client import IamClient
from ..services.aws.role import oidc_provider_arn

logger = logging.getLogger(__name__)


class AwsIdentityProvider:
    """IAM OIDC provider for an issuer."""

    def __init__(self, iam: IamClient, issuer: IssuerMeta) -> None:
        self.iam = iam
        self.issuer = issuer

    def create(self) -> None:
        # IAM fetches the real certificate chain for the issuer itself
        self.iam.create_open_id_connect_provider(
            self.issuer.issuer_url(),
            client_ids=[OIDC_CLIENT_ID],
            thumbprints=[OIDC_PLACEHOLDER_THUMBPRINT],
        )
        logger.info(f"OIDC provider registered for {self.issuer.issuer_url()}")

    def delete(self, account_id: str) -> None:
        self.iam.delete_open_id_connect_provider(oidc_provider_arn(account_id, self.issuer))
        logger.info(f"OIDC provider deregistered for {self.issuer.issuer_url()}")

    def is_update(self) -> bool:
        return False

    def update(self) -> None:
        pass
