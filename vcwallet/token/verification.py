"""Claim verification helpers for interaction tokens."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from .types import InteractionToken, key_id_to_did


@dataclass
class VerificationOutcome:
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def verify_interaction_claims(
    token: InteractionToken,
    *,
    expected_type: Optional[str] = None,
    expected_audience: Optional[str] = None,
    expected_nonce: Optional[str] = None,
    expected_issuer: Optional[str] = None,
    now: Optional[datetime] = None,
    clock_skew: timedelta = timedelta(seconds=0),
) -> VerificationOutcome:
    """Check the claims of an already signature-verified token.

    Audience and issuer comparisons are made at DID level, so a key id
    (``did#primary``) matches its bare DID.

    Args:
        token: Decoded token
        expected_type: Required ``typ`` claim
        expected_audience: DID the ``aud`` claim must name
        expected_nonce: Required ``jti`` claim
        expected_issuer: DID the ``iss`` claim must name
        now: Reference time (defaults to current UTC time)
        clock_skew: Allowed clock skew window for expiry
    Returns:
        VerificationOutcome summarizing validity and issues.
    """
    errors: List[str] = []
    warnings: List[str] = []
    now = now or datetime.now(timezone.utc)

    if token.expires_at and now > token.expires_at + clock_skew:
        errors.append(f"token_expired:{token.token_type or 'unknown'}")

    if expected_type and token.token_type != expected_type:
        errors.append(f"type_mismatch:expected {expected_type}, got {token.token_type}")

    if expected_audience is not None:
        if key_id_to_did(token.audience) != key_id_to_did(expected_audience):
            errors.append("audience_mismatch")

    if expected_nonce is not None and token.nonce != expected_nonce:
        errors.append("nonce_mismatch")

    if expected_issuer is not None:
        if key_id_to_did(token.issuer) != key_id_to_did(expected_issuer):
            errors.append("issuer_mismatch")

    if not token.nonce:
        warnings.append("missing_jti")

    return VerificationOutcome(valid=not errors, errors=errors, warnings=warnings)


__all__ = [
    "VerificationOutcome",
    "verify_interaction_claims",
]
