"""Service account signing keys and their JSON Web Key Set."""

from __future__ import annotations

import base64
import hashlib
from dataclasses import dataclass
from typing import Any

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537


def b64url(data: bytes) -> str:
    """Base64url encoding without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def int_to_b64url(value: int) -> str:
    length = max(1, (value.bit_length() + 7) // 8)
    return b64url(value.to_bytes(length, "big"))


@dataclass(frozen=True)
class KeyPair:
    """PEM-encoded RSA key pair."""

    public_key_pem: bytes
    private_key_pem: bytes


def create_key_pair() -> KeyPair:
    """Generate a 2048-bit RSA key pair.

    The private key is PKCS#1 ("RSA PRIVATE KEY") and the public key is
    SubjectPublicKeyInfo ("PUBLIC KEY"), the formats kube-apiserver expects
    for service account signing.
    """
    private_key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=KEY_SIZE)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return KeyPair(public_key_pem=public_pem, private_key_pem=private_pem)


def key_id_from_public_key(public_key: Any) -> str:
    """Key id: base64url(SHA-256(DER SubjectPublicKeyInfo))."""
    der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return b64url(hashlib.sha256(der).digest())


@dataclass(frozen=True)
class JWKS:
    """JSON Web Key Set for a single RSA signing key."""

    keys: tuple[dict[str, str], ...]

    def to_dict(self) -> dict[str, Any]:
        return {"keys": [dict(key) for key in self.keys]}


def new_jwks(public_key_pem: bytes) -> JWKS:
    """Build the key set published for the issuer.

    The key is listed twice, with and without ``kid``, so relying parties
    that match on key id and ones that do not both accept tokens.

    Raises:
        ValueError: if the PEM does not hold an RSA public key
    """
    public_key = serialization.load_pem_public_key(public_key_pem)
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise ValueError("public key is not RSA")

    numbers = public_key.public_numbers()
    kid = key_id_from_public_key(public_key)
    keyed = {
        "use": "sig",
        "kty": "RSA",
        "kid": kid,
        "alg": "RS256",
        "n": int_to_b64url(numbers.n),
        "e": int_to_b64url(numbers.e),
    }
    unkeyed = {key: value for key, value in keyed.items() if key != "kid"}
    return JWKS(keys=(keyed, unkeyed))
