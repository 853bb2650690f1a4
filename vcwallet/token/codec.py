"""
JWT codec for interaction tokens.

Decoding here never verifies signatures; it is used for simple claim reads
(nonce lookup, issuer DID, requested types). Trust decisions go through
``vcwallet.keys.verifier.DidVerifier``.
"""

import logging
from typing import Any, Dict

import jwt

from ..errors import DecodeError
from .types import InteractionToken, key_id_to_did

logger = logging.getLogger(__name__)

_UNVERIFIED_OPTIONS = {
    "verify_signature": False,
    "verify_exp": False,
    "verify_aud": False,
    "verify_iat": False,
    "verify_nbf": False,
}


def from_jwt(token: str) -> InteractionToken:
    """Parse a compact JWT into an ``InteractionToken`` without verification.

    Raises:
        DecodeError: if ``token`` is not a well-formed JWT with an object payload.
    """
    if not isinstance(token, str) or not token:
        raise DecodeError("Token must be a non-empty string")
    try:
        header = jwt.get_unverified_header(token)
        payload = jwt.decode(token, options=_UNVERIFIED_OPTIONS)
    except jwt.PyJWTError as e:
        logger.debug(f"JWT decode failed: {e}")
        raise DecodeError(f"Unable to decode token: {e}", cause=e) from e
    if not isinstance(payload, dict):
        raise DecodeError("Token payload is not an object")
    return InteractionToken(raw=token, header=header, payload=payload)


def decode_payload(token: str) -> Dict[str, Any]:
    """Return the unverified payload of ``token``."""
    return from_jwt(token).payload


def get_did_from_token(token: str) -> str:
    """Return the issuer DID of ``token`` (key id fragment stripped)."""
    issuer = from_jwt(token).issuer
    if not issuer:
        raise DecodeError("Token has no issuer")
    return key_id_to_did(issuer)


__all__ = ["from_jwt", "decode_payload", "get_did_from_token"]
