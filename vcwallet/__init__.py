"""
vcwallet Python Package

Verifiable Credential wallet SDK: signed interaction tokens for credential
offer, share and presentation flows, plus RevocationList2020 status.
"""

__version__ = "0.1.0"

from .config import SdkOptions
from .errors import (
    ChallengeError,
    DecodeError,
    DidResolutionError,
    ExternalServiceError,
    NoMatchingCredentialsError,
    ReplayProtectionError,
    RevocationStoreError,
    SdkError,
    ValidationError,
)
from .exchange.types import (
    CredentialOfferResponseOutput,
    CredentialShareResponseOutput,
    PresentationValidationOutput,
)
from .keys.wallet import LocalWallet
from .service.service import WalletService, create_service
from .session import UserSession
from .token.types import (
    CredentialRequirement,
    InteractionToken,
    InteractionType,
    JwtOptions,
    OfferedCredential,
)

__all__ = [
    # Service
    "WalletService",
    "create_service",
    "SdkOptions",
    "UserSession",
    "LocalWallet",

    # Tokens
    "InteractionToken",
    "InteractionType",
    "JwtOptions",
    "OfferedCredential",
    "CredentialRequirement",

    # Outputs
    "CredentialOfferResponseOutput",
    "CredentialShareResponseOutput",
    "PresentationValidationOutput",

    # Errors
    "SdkError",
    "ValidationError",
    "DecodeError",
    "ReplayProtectionError",
    "NoMatchingCredentialsError",
    "ExternalServiceError",
    "RevocationStoreError",
    "DidResolutionError",
    "ChallengeError",
]
