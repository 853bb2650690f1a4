"""
Revocation list data types.

A credential's revocation status is an index into a shared revocation list
(RevocationList2020). The list is published as a credential whose subject
carries the bitmap of revoked indices.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

REVOCATION_LIST_STATUS_TYPE = "RevocationList2020Status"
REVOCATION_LIST_CREDENTIAL_TYPE = "RevocationList2020Credential"
REVOCATION_LIST_SUBJECT_TYPE = "RevocationList2020"
DEFAULT_LIST_SIZE = 131072


class CredentialStatusState(str, Enum):
    VALID = "valid"
    REVOKED = "revoked"


@dataclass
class RevocationListStatus:
    """Membership of one credential in a revocation list."""
    credential_id: str
    subject_did: Optional[str]
    list_credential_id: str
    list_index: int
    status: CredentialStatusState = CredentialStatusState.VALID
    revocation_reason: Optional[str] = None
    revoked_at: Optional[datetime] = None

    @property
    def is_revoked(self) -> bool:
        return self.status == CredentialStatusState.REVOKED

    def to_credential_status(self) -> Dict[str, Any]:
        """Render the ``credentialStatus`` entry embedded in the credential."""
        return {
            "id": f"{self.list_credential_id}#{self.list_index}",
            "type": REVOCATION_LIST_STATUS_TYPE,
            "revocationListIndex": str(self.list_index),
            "revocationListCredential": self.list_credential_id,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "credential_id": self.credential_id,
            "subject_did": self.subject_did,
            "list_credential_id": self.list_credential_id,
            "list_index": self.list_index,
            "status": self.status.value,
            "revocation_reason": self.revocation_reason,
            "revoked_at": self.revoked_at.isoformat() if self.revoked_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RevocationListStatus":
        revoked_at = data.get("revoked_at")
        return cls(
            credential_id=data["credential_id"],
            subject_did=data.get("subject_did"),
            list_credential_id=data["list_credential_id"],
            list_index=int(data["list_index"]),
            status=CredentialStatusState(data.get("status", CredentialStatusState.VALID.value)),
            revocation_reason=data.get("revocation_reason"),
            revoked_at=datetime.fromisoformat(revoked_at) if revoked_at else None,
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, raw: str) -> "RevocationListStatus":
        return cls.from_dict(json.loads(raw))


@dataclass
class RevocationList:
    """Allocation state of one revocation list owned by an issuer."""
    list_id: str
    issuer_did: str
    size: int = DEFAULT_LIST_SIZE
    next_index: int = 0
    revoked_indices: List[int] = field(default_factory=list)
    published: bool = False

    @property
    def is_full(self) -> bool:
        return self.next_index >= self.size

    def to_dict(self) -> Dict[str, Any]:
        return {
            "list_id": self.list_id,
            "issuer_did": self.issuer_did,
            "size": self.size,
            "next_index": self.next_index,
            "revoked_indices": sorted(self.revoked_indices),
            "published": self.published,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RevocationList":
        return cls(
            list_id=data["list_id"],
            issuer_did=data["issuer_did"],
            size=int(data.get("size", DEFAULT_LIST_SIZE)),
            next_index=int(data.get("next_index", 0)),
            revoked_indices=[int(i) for i in data.get("revoked_indices", [])],
            published=bool(data.get("published", False)),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, raw: str) -> "RevocationList":
        return cls.from_dict(json.loads(raw))


@dataclass
class BuildStatusResult:
    credential_status: Dict[str, Any]
    is_publish_required: bool
    revocation_list_credential: Dict[str, Any]

    @property
    def list_index(self) -> int:
        return int(self.credential_status["revocationListIndex"])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "credentialStatus": self.credential_status,
            "isPublishRequired": self.is_publish_required,
            "revocationListCredential": self.revocation_list_credential,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildStatusResult":
        return cls(
            credential_status=data["credentialStatus"],
            is_publish_required=bool(data.get("isPublishRequired", False)),
            revocation_list_credential=data.get("revocationListCredential") or {},
        )


__all__ = [
    "REVOCATION_LIST_STATUS_TYPE",
    "REVOCATION_LIST_CREDENTIAL_TYPE",
    "REVOCATION_LIST_SUBJECT_TYPE",
    "DEFAULT_LIST_SIZE",
    "CredentialStatusState",
    "RevocationListStatus",
    "RevocationList",
    "BuildStatusResult",
]
