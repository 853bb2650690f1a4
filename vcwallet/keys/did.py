"""
DID helpers and resolvers.

Wallet identities are ``did:key`` DIDs over Ed25519 public keys: the
multicodec prefix ``0xed 0x01`` followed by the raw key, base58btc encoded
with the multibase ``z`` prefix. They are self-certifying and resolve
offline.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import base58
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from ..errors import DidResolutionError
from ..token.types import key_id_to_did

DID_KEY_PREFIX = "did:key:"
ED25519_MULTICODEC = b"\xed\x01"
DID_CONTEXT = "https://www.w3.org/ns/did/v1"


def is_did(value: Optional[str]) -> bool:
    if not isinstance(value, str):
        return False
    parts = key_id_to_did(value).split(":")
    return len(parts) >= 3 and parts[0] == "did" and all(parts[1:])


def did_from_public_key(public_key: Ed25519PublicKey) -> str:
    raw = public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return DID_KEY_PREFIX + "z" + base58.b58encode(ED25519_MULTICODEC + raw).decode("ascii")


def key_id_for(did: str) -> str:
    """Default verification method id of a ``did:key`` DID."""
    fingerprint = did[len(DID_KEY_PREFIX):] if did.startswith(DID_KEY_PREFIX) else "primary"
    return f"{did}#{fingerprint}"


class DidResolver(ABC):
    """Interface for DID resolution backends."""

    @abstractmethod
    async def resolve_public_key(self, did_or_key_id: str) -> Ed25519PublicKey:
        """Return the current signing key of a DID (or of the DID a key id belongs to)."""

    @abstractmethod
    async def resolve(self, did: str) -> Dict[str, Any]:
        """Return the DID document of ``did``."""


class DidKeyResolver(DidResolver):
    """Offline resolver for Ed25519 ``did:key`` DIDs."""

    async def resolve_public_key(self, did_or_key_id: str) -> Ed25519PublicKey:
        did = key_id_to_did(did_or_key_id)
        if not did or not did.startswith(DID_KEY_PREFIX + "z"):
            raise DidResolutionError(f"Unsupported DID method: {did}", context={"did": did})
        try:
            decoded = base58.b58decode(did[len(DID_KEY_PREFIX) + 1:])
        except ValueError as e:
            raise DidResolutionError(f"Malformed did:key: {did}", cause=e) from e
        if not decoded.startswith(ED25519_MULTICODEC) or len(decoded) != 34:
            raise DidResolutionError(f"did:key is not an Ed25519 key: {did}", context={"did": did})
        return Ed25519PublicKey.from_public_bytes(decoded[len(ED25519_MULTICODEC):])

    async def resolve(self, did: str) -> Dict[str, Any]:
        did = key_id_to_did(did)
        public_key = await self.resolve_public_key(did)
        raw = public_key.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        key_id = key_id_for(did)
        return {
            "@context": [DID_CONTEXT],
            "id": did,
            "verificationMethod": [
                {
                    "id": key_id,
                    "type": "Ed25519VerificationKey2018",
                    "controller": did,
                    "publicKeyBase58": base58.b58encode(raw).decode("ascii"),
                }
            ],
            "authentication": [key_id],
            "assertionMethod": [key_id],
        }


__all__ = [
    "DID_KEY_PREFIX",
    "is_did",
    "did_from_public_key",
    "key_id_for",
    "DidResolver",
    "DidKeyResolver",
]
