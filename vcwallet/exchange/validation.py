"""
Input validation for the exchange operations.

Each operation runs one explicit pass over its inputs. The checks return a
list of problems instead of raising one at a time, so a caller sees every
failing item at once; ``ensure_valid`` turns a non-empty list into a single
``ValidationError``.
"""

from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence

from ..errors import ValidationError
from ..keys.did import is_did
from ..token.types import CredentialRequirement, JwtOptions, OfferedCredential
from ..vc import credential_label


def check_credential_structure(credential: Any, position: int = 0) -> List[str]:
    """Legacy (``issued`` + ``claim``) or current (``issuanceDate`` + ``credentialSubject``) shape."""
    label = credential_label(credential, position)
    if not isinstance(credential, dict):
        return [f"{label}: credential is not an object"]

    errors: List[str] = []
    if "claim" in credential:
        if "credentialSubject" in credential:
            errors.append(f"{label}: mixes legacy `claim` with `credentialSubject`")
        if not credential.get("issued"):
            errors.append(f"{label}: legacy credential is missing `issued`")
    else:
        if not credential.get("issuanceDate"):
            errors.append(f"{label}: missing `issuanceDate`")
        if not isinstance(credential.get("credentialSubject"), dict):
            errors.append(f"{label}: missing `credentialSubject`")
    return errors


def check_credentials(credentials: Any) -> List[str]:
    if not isinstance(credentials, (list, tuple)):
        return ["credentials must be a list"]
    errors: List[str] = []
    for position, credential in enumerate(credentials):
        errors.extend(check_credential_structure(credential, position))
    return errors


def _is_type_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and bool(value) and all(isinstance(t, str) and t for t in value)


def check_offered_credentials(offered: Sequence[OfferedCredential]) -> List[str]:
    if not offered:
        return ["at least one offered credential is required"]
    errors: List[str] = []
    for position, credential in enumerate(offered):
        value = credential.type
        if not ((isinstance(value, str) and value) or _is_type_list(value)):
            errors.append(f"offeredCredentials[{position}]: `type` must be a string or a list of strings")
    return errors


def check_requirements(requirements: Sequence[CredentialRequirement]) -> List[str]:
    errors: List[str] = []
    for position, requirement in enumerate(requirements):
        if not _is_type_list(requirement.type):
            errors.append(f"credentialRequirements[{position}]: `type` must be a non-empty list of strings")
    return errors


def check_did(value: Optional[str], name: str, required: bool = False) -> List[str]:
    if value is None:
        return [f"`{name}` is required"] if required else []
    return [] if is_did(value) else [f"`{name}` is not a DID: {value}"]


def check_jwt_options(options: Optional[JwtOptions]) -> List[str]:
    if options is None:
        return []
    errors = check_did(options.audience_did, "audience_did")
    if isinstance(options.expires_at, str):
        try:
            datetime.fromisoformat(options.expires_at.replace("Z", "+00:00"))
        except ValueError:
            errors.append(f"`expires_at` is not an ISO-8601 date: {options.expires_at}")
    return errors


def ensure_valid(errors: Iterable[str], message: str = "Invalid parameters") -> None:
    errors = list(errors)
    if errors:
        raise ValidationError(message, errors=errors)


__all__ = [
    "check_credential_structure",
    "check_credentials",
    "check_offered_credentials",
    "check_requirements",
    "check_did",
    "check_jwt_options",
    "ensure_valid",
]
