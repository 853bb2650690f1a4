"""
Exchange module initialization
"""

from .holder import HolderService, filter_credentials, requested_types
from .protocol import CredentialExchange, RequestResolver
from .types import (
    CredentialOfferResponseOutput,
    CredentialShareResponseOutput,
    PresentationValidationOutput,
)
from .validation import (
    check_credential_structure,
    check_credentials,
    check_did,
    check_jwt_options,
    check_offered_credentials,
    check_requirements,
    ensure_valid,
)

__all__ = [
    # Protocol
    "CredentialExchange",
    "RequestResolver",
    "HolderService",
    "filter_credentials",
    "requested_types",

    # Outputs
    "CredentialOfferResponseOutput",
    "CredentialShareResponseOutput",
    "PresentationValidationOutput",

    # Validation
    "check_credential_structure",
    "check_credentials",
    "check_did",
    "check_jwt_options",
    "check_offered_credentials",
    "check_requirements",
    "ensure_valid",
]
