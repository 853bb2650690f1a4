"""
Interaction token types for the credential exchange flows.

An interaction token is a compact JWT whose payload carries the standard
claims (``iss``, ``aud``, ``jti``, ``iat``, ``exp``), a ``typ`` naming the
interaction and an ``interactionToken`` object with the variant-specific
content (offered credentials, requirements, supplied credentials, ...).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class InteractionType(str, Enum):
    """Value of the ``typ`` claim for each interaction."""
    CREDENTIAL_OFFER = "credentialOffer"
    CREDENTIAL_OFFER_RESPONSE = "credentialOfferResponse"
    CREDENTIAL_REQUEST = "credentialRequest"
    CREDENTIAL_RESPONSE = "credentialResponse"


def key_id_to_did(key_id: Optional[str]) -> Optional[str]:
    """Strip the ``#fragment`` of a DID key id (``did:x:y#primary`` -> ``did:x:y``)."""
    if not key_id:
        return key_id
    return key_id.split("#", 1)[0]


@dataclass
class InteractionToken:
    """A decoded (not necessarily verified) interaction token."""
    raw: str
    header: Dict[str, Any] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def issuer(self) -> Optional[str]:
        return self.payload.get("iss")

    @property
    def issuer_did(self) -> Optional[str]:
        return key_id_to_did(self.issuer)

    @property
    def audience(self) -> Optional[str]:
        return self.payload.get("aud")

    @property
    def nonce(self) -> Optional[str]:
        return self.payload.get("jti")

    @property
    def token_type(self) -> Optional[str]:
        return self.payload.get("typ")

    @property
    def issued_at(self) -> Optional[datetime]:
        iat = self.payload.get("iat")
        return datetime.fromtimestamp(iat, tz=timezone.utc) if iat is not None else None

    @property
    def expires_at(self) -> Optional[datetime]:
        exp = self.payload.get("exp")
        return datetime.fromtimestamp(exp, tz=timezone.utc) if exp is not None else None

    @property
    def interaction(self) -> Dict[str, Any]:
        interaction = self.payload.get("interactionToken")
        return interaction if isinstance(interaction, dict) else {}

    @property
    def callback_url(self) -> Optional[str]:
        return self.interaction.get("callbackURL")

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the token has expired."""
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {"header": self.header, "payload": self.payload}


@dataclass
class JwtOptions:
    """Optional claims for generated request tokens."""
    audience_did: Optional[str] = None
    expires_at: Optional[Union[str, datetime]] = None
    nonce: Optional[str] = None
    callback_url: Optional[str] = None

    def expires_at_timestamp(self) -> Optional[int]:
        """Return ``expires_at`` as epoch seconds."""
        if self.expires_at is None:
            return None
        value = self.expires_at
        if isinstance(value, str):
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())

    def to_params(self) -> Dict[str, Any]:
        """Render as the camelCase parameter object sent to interaction builders."""
        params: Dict[str, Any] = {}
        if self.audience_did:
            params["audienceDid"] = self.audience_did
        if self.expires_at is not None:
            params["expiresAt"] = self.expires_at_timestamp()
        if self.nonce:
            params["nonce"] = self.nonce
        if self.callback_url:
            params["callbackUrl"] = self.callback_url
        return params


def specific_type_of(type_value: Union[str, List[str], None]) -> Optional[str]:
    """Specific type tag of a ``type`` value: the string itself, or tag[1] of a sequence."""
    if not type_value:
        return None
    if isinstance(type_value, str):
        return type_value
    if not isinstance(type_value, (list, tuple)):
        return None
    tag = type_value[1] if len(type_value) > 1 else type_value[-1]
    return tag if isinstance(tag, str) else None


@dataclass
class OfferedCredential:
    """A credential an issuer is willing to issue.

    ``type`` is either a single type name or an ordered tag sequence such as
    ``["Credential", "PhoneCredentialPersonV1"]``.
    """
    type: Union[str, List[str]]
    render_info: Optional[Dict[str, Any]] = None

    @property
    def specific_type(self) -> Optional[str]:
        return specific_type_of(self.type)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": list(self.type) if isinstance(self.type, list) else self.type}
        if self.render_info:
            result["renderInfo"] = self.render_info
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OfferedCredential":
        return cls(type=data.get("type"), render_info=data.get("renderInfo"))


@dataclass
class CredentialRequirement:
    """Credential type(s) a verifier accepts; ``type[1]`` is the specific type."""
    type: List[str]
    constraints: Optional[List[Any]] = None

    @property
    def specific_type(self) -> Optional[str]:
        return specific_type_of(self.type)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": list(self.type)}
        if self.constraints:
            result["constraints"] = self.constraints
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CredentialRequirement":
        return cls(type=list(data.get("type") or []), constraints=data.get("constraints"))


__all__ = [
    "InteractionType",
    "InteractionToken",
    "JwtOptions",
    "OfferedCredential",
    "CredentialRequirement",
    "key_id_to_did",
    "specific_type_of",
]
