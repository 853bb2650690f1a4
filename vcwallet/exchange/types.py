"""Result types of the credential exchange verify operations.

When ``is_valid`` is False only ``errors`` is meaningful; the other fields
are populated on a best-effort basis for diagnostics.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class CredentialOfferResponseOutput:
    is_valid: bool
    did: Optional[str] = None
    nonce: Optional[str] = None
    selected_credentials: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "did": self.did,
            "nonce": self.nonce,
            "selectedCredentials": self.selected_credentials,
            "errors": self.errors,
        }


@dataclass
class CredentialShareResponseOutput:
    is_valid: bool
    did: Optional[str] = None
    nonce: Optional[str] = None
    supplied_credentials: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "did": self.did,
            "nonce": self.nonce,
            "suppliedCredentials": self.supplied_credentials,
            "errors": self.errors,
        }


@dataclass
class PresentationValidationOutput:
    is_valid: bool
    did: Optional[str] = None
    challenge: Optional[str] = None
    supplied_presentation: Optional[Dict[str, Any]] = None
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "did": self.did,
            "challenge": self.challenge,
            "suppliedPresentation": self.supplied_presentation,
            "errors": self.errors,
        }


__all__ = [
    "CredentialOfferResponseOutput",
    "CredentialShareResponseOutput",
    "PresentationValidationOutput",
]
