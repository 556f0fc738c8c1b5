"""OIDC discovery documents served by a self-hosted issuer."""

from __future__ import annotations

import json
from typing import Any

from ..constants import DISCOVERY_FILE_NAME, JWKS_FILE_NAME
from ..issuer import IssuerMeta
from .keys import JWKS


class DiscoveryContents:
    """Renders the discovery configuration and key set as JSON."""

    def __init__(self, jwks: JWKS, issuer: IssuerMeta, jwks_file_name: str = JWKS_FILE_NAME) -> None:
        self.jwks = jwks
        self.issuer = issuer
        self.jwks_file_name = jwks_file_name
        self.discovery_file_name = DISCOVERY_FILE_NAME

    def discovery_document(self) -> dict[str, Any]:
        issuer_url = self.issuer.issuer_url()
        return {
            "issuer": f"{issuer_url}/",
            "jwks_uri": f"{issuer_url}/{self.jwks_file_name}",
            "authorization_endpoint": "urn:kubernetes:programmatic_authorization",
            "response_types_supported": ["id_token"],
            "subject_types_supported": ["public"],
            "id_token_signing_alg_values_supported": ["RS256"],
            "claims_supported": ["sub", "iss"],
        }

    def discovery(self) -> bytes:
        """The ``.well-known/openid-configuration`` document."""
        return json.dumps(self.discovery_document(), indent=2).encode("utf-8")

    def jwk(self) -> bytes:
        """The JWKS document."""
        return json.dumps(self.jwks.to_dict(), indent=2).encode("utf-8")
