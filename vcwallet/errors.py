"""
Error taxonomy for the vcwallet SDK.

Input and structural problems raise immediately. Verification outcomes are
never raised; they are returned as result objects carrying ``errors``.
"""

from typing import Any, Dict, List, Optional


class SdkError(Exception):
    """Base class for all SDK errors."""

    code = "COR-0"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ValidationError(SdkError):
    """Malformed or missing required input."""

    code = "COR-1"

    def __init__(self, message: str, errors: Optional[List[str]] = None, **kwargs):
        self.errors = list(errors or [])
        if self.errors:
            message = f"{message}: {'; '.join(self.errors)}"
        super().__init__(message, **kwargs)


class DecodeError(SdkError):
    """A token string cannot be parsed into the expected structure."""

    code = "COR-2"


class ReplayProtectionError(SdkError):
    """No resolvable or valid request token was found for a response."""

    code = "COR-15"


class NoMatchingCredentialsError(SdkError):
    """Filtering by request constraints left nothing to sign or share."""

    code = "COR-22"


class ExternalServiceError(SdkError):
    """Failure reported by a remote collaborator or backing store."""

    code = "COR-30"

    def __init__(self, message: str, *, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class RevocationStoreError(ExternalServiceError):
    """Revocation store rejected an operation (unknown or revoked entry)."""

    code = "REV-1"


class DidResolutionError(SdkError):
    """A DID or key id could not be resolved to a public key."""

    code = "COR-31"


class ChallengeError(SdkError):
    """A presentation challenge failed its freshness/ownership checks."""

    code = "COR-32"


__all__ = [
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
