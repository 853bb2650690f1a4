"""
Token module initialization
"""

from .codec import from_jwt, decode_payload, get_did_from_token
from .types import (
    InteractionType,
    InteractionToken,
    JwtOptions,
    OfferedCredential,
    CredentialRequirement,
    key_id_to_did,
    specific_type_of,
)
from .verification import VerificationOutcome, verify_interaction_claims

__all__ = [
    # Codec
    "from_jwt",
    "decode_payload",
    "get_did_from_token",

    # Types
    "InteractionType",
    "InteractionToken",
    "JwtOptions",
    "OfferedCredential",
    "CredentialRequirement",
    "key_id_to_did",
    "specific_type_of",

    # Claim checks
    "VerificationOutcome",
    "verify_interaction_claims",
]
