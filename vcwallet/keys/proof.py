"""
Linked-data style proofs as detached JWS.

The signing input is the SHA-256 of the canonical JSON of the proof options
(without ``jws``) followed by the SHA-256 of the document (without
``proof``). The JWS uses the unencoded payload option (``b64: false``), so
only ``header..signature`` is stored in ``proof.jws``.
"""

import hashlib
from typing import Any, Dict

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from jwt import PyJWS

from ..vc import canonical_json, document_digest

PROOF_TYPE = "Ed25519Signature2018"

_jws = PyJWS()


def proof_signing_input(document: Dict[str, Any], proof: Dict[str, Any]) -> bytes:
    options = {k: v for k, v in proof.items() if k != "jws"}
    options_digest = hashlib.sha256(canonical_json(options)).hexdigest()
    return (options_digest + document_digest(document)).encode("ascii")


def create_detached_jws(private_key: Ed25519PrivateKey, document: Dict[str, Any], proof: Dict[str, Any]) -> str:
    return _jws.encode(
        proof_signing_input(document, proof),
        private_key,
        algorithm="EdDSA",
        is_payload_detached=True,
    )


def verify_detached_jws(public_key: Ed25519PublicKey, document: Dict[str, Any], proof: Dict[str, Any]) -> None:
    """Raise ``jwt.PyJWTError`` if ``proof.jws`` does not sign ``document``."""
    _jws.decode(
        proof.get("jws", ""),
        public_key,
        algorithms=["EdDSA"],
        detached_payload=proof_signing_input(document, proof),
    )


__all__ = [
    "PROOF_TYPE",
    "proof_signing_input",
    "create_detached_jws",
    "verify_detached_jws",
]
