"""
Signature verification for interaction tokens, credentials and presentations.

All signer keys are obtained through a ``DidResolver``; nothing read from a
token or document is trusted before the checks here succeed.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import jwt

from ..errors import DidResolutionError, SdkError, ValidationError
from ..token.codec import from_jwt
from ..token.types import InteractionToken, key_id_to_did
from ..vc import VERIFIABLE_PRESENTATION_TYPE, credential_label, credential_types, issuer_id
from .did import DidKeyResolver, DidResolver
from .proof import verify_detached_jws

logger = logging.getLogger(__name__)


@dataclass
class PresentationCheck:
    """Result of structural and cryptographic presentation validation."""
    result: bool
    data: Optional[Dict[str, Any]] = None
    errors: List[str] = field(default_factory=list)

    @property
    def error(self) -> Optional[str]:
        return "; ".join(self.errors) if self.errors else None


def _parse_iso(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class DidVerifier:
    """Verifies signatures against keys resolved from DIDs."""

    def __init__(self, resolver: Optional[DidResolver] = None):
        self.resolver = resolver or DidKeyResolver()

    async def verify_jwt(self, token: str, *, verify_exp: bool = True) -> InteractionToken:
        """Verify the signature (and expiry) of a compact JWT.

        Raises:
            DecodeError: token cannot be parsed
            DidResolutionError: issuer DID cannot be resolved
            ValidationError: signature invalid or token expired
        """
        decoded = from_jwt(token)
        if not decoded.issuer:
            raise ValidationError("Token has no issuer")
        kid = decoded.header.get("kid")
        if kid and key_id_to_did(kid) != decoded.issuer_did:
            raise ValidationError(f"Token key id {kid} does not belong to issuer {decoded.issuer_did}")

        public_key = await self.resolver.resolve_public_key(decoded.issuer)
        try:
            jwt.decode(
                token,
                public_key,
                algorithms=["EdDSA"],
                options={"verify_aud": False, "verify_exp": verify_exp},
            )
        except jwt.ExpiredSignatureError as e:
            raise ValidationError(f"Token expired: {decoded.token_type or 'jwt'}", cause=e) from e
        except jwt.PyJWTError as e:
            logger.warning(f"JWT signature verification failed for {decoded.issuer_did}: {e}")
            raise ValidationError("Token signature verification failed", cause=e) from e
        return decoded

    async def validate_credential(self, credential: Dict[str, Any], position: int = 0) -> List[str]:
        """Return the list of problems with ``credential``'s proof; empty when valid."""
        label = credential_label(credential, position)
        if not isinstance(credential, dict):
            return [f"{label}: credential is not an object"]
        proof = credential.get("proof")
        if not isinstance(proof, dict) or not proof.get("jws"):
            return [f"{label}: missing proof"]

        signer = proof.get("verificationMethod")
        if not isinstance(signer, str) or not signer:
            return [f"{label}: proof verificationMethod must be a string"]
        errors: List[str] = []
        issuer = issuer_id(credential)
        if not isinstance(issuer, str) or key_id_to_did(signer) != key_id_to_did(issuer):
            errors.append(f"{label}: proof signer {signer} is not the issuer {issuer}")
        try:
            public_key = await self.resolver.resolve_public_key(signer)
            verify_detached_jws(public_key, credential, proof)
        except DidResolutionError as e:
            errors.append(f"{label}: {e.message}")
        except jwt.PyJWTError:
            errors.append(f"{label}: invalid proof signature")

        expiration = credential.get("expirationDate")
        if expiration:
            expires_at = _parse_iso(expiration)
            if expires_at is None:
                errors.append(f"{label}: malformed expirationDate")
            elif expires_at <= datetime.now(timezone.utc):
                errors.append(f"{label}: credential expired")
        return errors

    async def validate_presentation(self, presentation: Dict[str, Any]) -> PresentationCheck:
        """Check structure, the holder's proof, and every contained credential proof."""
        if not isinstance(presentation, dict):
            return PresentationCheck(result=False, errors=["presentation is not an object"])

        errors: List[str] = []
        if VERIFIABLE_PRESENTATION_TYPE not in credential_types(presentation):
            errors.append(f"type must include {VERIFIABLE_PRESENTATION_TYPE}")
        holder_entry = presentation.get("holder")
        holder = holder_entry.get("id") if isinstance(holder_entry, dict) else None
        if not isinstance(holder, str) or not holder:
            errors.append("missing holder.id")
        credentials = presentation.get("verifiableCredential")
        if not isinstance(credentials, list):
            errors.append("verifiableCredential must be a list")
            credentials = []
        proof = presentation.get("proof")
        if not isinstance(proof, dict) or not proof.get("jws"):
            errors.append("missing proof")
        else:
            if not isinstance(proof.get("challenge"), str) or not proof["challenge"]:
                errors.append("proof has no challenge")
            if not isinstance(proof.get("verificationMethod"), str) or not proof["verificationMethod"]:
                errors.append("proof verificationMethod must be a string")
        if errors:
            return PresentationCheck(result=False, data=presentation, errors=errors)

        signer = proof["verificationMethod"]
        if key_id_to_did(signer) != holder:
            errors.append(f"proof signer {signer} is not the holder {holder}")
        if proof.get("proofPurpose") != "authentication":
            errors.append("proofPurpose must be authentication")
        try:
            public_key = await self.resolver.resolve_public_key(signer)
            verify_detached_jws(public_key, presentation, proof)
        except SdkError as e:
            errors.append(e.message)
        except jwt.PyJWTError:
            errors.append("invalid presentation proof signature")

        for position, credential in enumerate(credentials):
            errors.extend(await self.validate_credential(credential, position))

        if errors:
            logger.warning(f"Presentation from {holder} failed validation: {errors}")
        return PresentationCheck(result=not errors, data=presentation, errors=errors)


__all__ = ["DidVerifier", "PresentationCheck"]
