"""
Revocation list bitmap encoding and verifier-side status checks.

``encodedList`` is the bitmap of revoked indices (big-endian bit order),
gzip-compressed and base64url encoded without padding.
"""

import base64
import gzip
import logging
from typing import Any, Dict, Iterable, List, Optional

from bitarray import bitarray

from ..errors import SdkError
from ..keys.verifier import DidVerifier
from ..vc import CREDENTIALS_CONTEXT_V1, REVOCATION_LIST_CONTEXT, credential_label, issuer_id, utc_now_iso
from .types import (
    REVOCATION_LIST_CREDENTIAL_TYPE,
    REVOCATION_LIST_STATUS_TYPE,
    REVOCATION_LIST_SUBJECT_TYPE,
    RevocationList,
)

logger = logging.getLogger(__name__)


def encode_revoked_indices(indices: Iterable[int], size: int) -> str:
    bits = bitarray(size)
    bits.setall(0)
    for index in indices:
        bits[index] = 1
    compressed = gzip.compress(bits.tobytes())
    return base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")


def decode_encoded_list(encoded_list: str) -> bitarray:
    missing_padding = len(encoded_list) % 4
    if missing_padding:
        encoded_list += "=" * (4 - missing_padding)
    bits = bitarray()
    bits.frombytes(gzip.decompress(base64.urlsafe_b64decode(encoded_list)))
    return bits


def is_index_revoked(encoded_list: str, index: int) -> bool:
    bits = decode_encoded_list(encoded_list)
    if index < 0 or index >= len(bits):
        raise IndexError(f"Index {index} is outside the revocation list")
    return bool(bits[index])


def build_list_credential(revocation_list: RevocationList) -> Dict[str, Any]:
    """Unsigned revocation list credential reflecting the current bitmap."""
    return {
        "@context": [CREDENTIALS_CONTEXT_V1, REVOCATION_LIST_CONTEXT],
        "id": revocation_list.list_id,
        "type": ["VerifiableCredential", REVOCATION_LIST_CREDENTIAL_TYPE],
        "issuer": revocation_list.issuer_did,
        "issuanceDate": utc_now_iso(),
        "credentialSubject": {
            "id": f"{revocation_list.list_id}#list",
            "type": REVOCATION_LIST_SUBJECT_TYPE,
            "encodedList": encode_revoked_indices(revocation_list.revoked_indices, revocation_list.size),
        },
    }


class RevocationChecker:
    """Checks ``credentialStatus`` entries against published list credentials.

    ``source`` is anything exposing ``get_revocation_list_credential(list_id)``
    (a revocation store or the revocation API client). When a ``verifier``
    is given, the list credential's proof is checked too.
    """

    def __init__(self, source: Any, verifier: Optional[DidVerifier] = None):
        self.source = source
        self.verifier = verifier

    async def check(self, credential: Dict[str, Any], position: int = 0) -> List[str]:
        label = credential_label(credential, position)
        status = credential.get("credentialStatus")
        if not status:
            return []
        if not isinstance(status, dict) or status.get("type") != REVOCATION_LIST_STATUS_TYPE:
            return [f"{label}: unsupported credentialStatus"]

        list_id = status.get("revocationListCredential")
        try:
            index = int(status.get("revocationListIndex"))
        except (TypeError, ValueError):
            return [f"{label}: malformed revocationListIndex"]

        try:
            list_credential = await self.source.get_revocation_list_credential(list_id)
        except SdkError as e:
            return [f"{label}: revocation list {list_id} unavailable: {e.message}"]

        if self.verifier is not None:
            problems = await self.verifier.validate_credential(list_credential)
            if problems:
                return [f"{label}: revocation list credential is invalid"] + problems
        if issuer_id(list_credential) != issuer_id(credential):
            return [f"{label}: revocation list is not owned by the credential issuer"]

        encoded = (list_credential.get("credentialSubject") or {}).get("encodedList")
        try:
            revoked = is_index_revoked(encoded or "", index)
        except (ValueError, OSError, EOFError, IndexError) as e:
            logger.warning(f"Unreadable revocation list {list_id}: {e}")
            return [f"{label}: unreadable revocation list {list_id}"]
        if revoked:
            return [f"{label}: credential has been revoked"]
        return []


__all__ = [
    "encode_revoked_indices",
    "decode_encoded_list",
    "is_index_revoked",
    "build_list_credential",
    "RevocationChecker",
]
