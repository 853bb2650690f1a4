"""
W3C Verifiable Credential / Presentation helpers.

Credentials and presentations are handled as plain JSON-compatible dicts so
that signed documents survive canonicalization unchanged.
"""

import hashlib
import json
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

CREDENTIALS_CONTEXT_V1 = "https://www.w3.org/2018/credentials/v1"
REVOCATION_LIST_CONTEXT = "https://w3id.org/vc-revocation-list-2020/v1"
VERIFIABLE_PRESENTATION_TYPE = "VerifiablePresentation"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def random_id(prefix: str) -> str:
    return f"{prefix}:{secrets.token_hex(8)}"


def canonical_json(document: Dict[str, Any]) -> bytes:
    """Deterministic JSON encoding (sorted keys, compact separators)."""
    return json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def document_digest(document: Dict[str, Any]) -> str:
    """Hex SHA-256 of the canonical JSON of ``document`` without its ``proof``."""
    unsigned = {k: v for k, v in document.items() if k != "proof"}
    return hashlib.sha256(canonical_json(unsigned)).hexdigest()


def credential_types(credential: Dict[str, Any]) -> List[str]:
    value = credential.get("type") or []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        return []
    return [t for t in value if isinstance(t, str)]


def credential_specific_type(credential: Dict[str, Any]) -> Optional[str]:
    """Second type tag by convention (``["VerifiableCredential", "EmailCredentialPersonV1"]``)."""
    types = credential_types(credential)
    if len(types) > 1:
        return types[1]
    return types[0] if types else None


def credential_subject_did(credential: Dict[str, Any]) -> Optional[str]:
    """DID of the credential's subject: ``holder.id``, then ``credentialSubject.id``, then legacy ``claim.id``."""
    holder = credential.get("holder")
    if isinstance(holder, dict) and holder.get("id"):
        return holder["id"]
    for key in ("credentialSubject", "claim"):
        subject = credential.get(key)
        if isinstance(subject, dict) and subject.get("id"):
            return subject["id"]
    return None


def issuer_id(credential: Dict[str, Any]) -> Optional[str]:
    """The issuer property is either a URI string or an object with ``id``."""
    issuer = credential.get("issuer")
    if isinstance(issuer, dict):
        return issuer.get("id")
    return issuer


def credential_label(credential: Any, position: int) -> str:
    if isinstance(credential, dict) and credential.get("id"):
        return str(credential["id"])
    return f"#{position}"


def build_vc_unsigned(
    *,
    credential_subject: Dict[str, Any],
    holder_did: str,
    types: List[str],
    context: Optional[List[Any]] = None,
    credential_id: Optional[str] = None,
    issuance_date: Optional[str] = None,
    expiration_date: Optional[str] = None,
) -> Dict[str, Any]:
    """Build an unsigned VCV1 document."""
    contexts = list(context or [CREDENTIALS_CONTEXT_V1])
    if CREDENTIALS_CONTEXT_V1 not in contexts:
        contexts.insert(0, CREDENTIALS_CONTEXT_V1)
    credential: Dict[str, Any] = {
        "@context": contexts,
        "id": credential_id or random_id("claimId"),
        "type": list(types),
        "holder": {"id": holder_did},
        "credentialSubject": dict(credential_subject),
        "issuanceDate": issuance_date or utc_now_iso(),
    }
    if expiration_date:
        credential["expirationDate"] = expiration_date
    return credential


def build_vp_unsigned(
    *,
    holder_did: str,
    credentials: List[Dict[str, Any]],
    presentation_id: Optional[str] = None,
    context: Optional[List[Any]] = None,
) -> Dict[str, Any]:
    """Build an unsigned VPV1 document."""
    return {
        "@context": list(context or [CREDENTIALS_CONTEXT_V1]),
        "id": presentation_id or random_id("presentationId"),
        "type": [VERIFIABLE_PRESENTATION_TYPE],
        "holder": {"id": holder_did},
        "verifiableCredential": list(credentials),
    }


__all__ = [
    "CREDENTIALS_CONTEXT_V1",
    "REVOCATION_LIST_CONTEXT",
    "VERIFIABLE_PRESENTATION_TYPE",
    "utc_now_iso",
    "random_id",
    "canonical_json",
    "document_digest",
    "credential_types",
    "credential_specific_type",
    "credential_subject_did",
    "issuer_id",
    "credential_label",
    "build_vc_unsigned",
    "build_vp_unsigned",
]
