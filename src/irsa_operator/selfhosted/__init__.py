"""Self-hosted OIDC issuer backed by S3."""

from .discovery import DiscoveryContents
from .idp import AwsIdentityProvider
from .keys import JWKS, KeyPair, create_key_pair, key_id_from_public_key, new_jwks
from .orchestrator import SetupOrchestrator
from .storage import S3IdPDiscovery

__all__ = [
    "AwsIdentityProvider",
    "DiscoveryContents",
    "JWKS",
    "KeyPair",
    "S3IdPDiscovery",
    "SetupOrchestrator",
    "create_key_pair",
    "key_id_from_public_key",
    "new_jwks",
]
