"""
Revocation package for vcwallet.

Revocation list status allocation, revocation, publishing and checking,
with in-memory, Redis and remote-service stores.
"""

from .types import (
    DEFAULT_LIST_SIZE,
    REVOCATION_LIST_CREDENTIAL_TYPE,
    REVOCATION_LIST_STATUS_TYPE,
    BuildStatusResult,
    CredentialStatusState,
    RevocationList,
    RevocationListStatus,
)
from .status import (
    RevocationChecker,
    build_list_credential,
    decode_encoded_list,
    encode_revoked_indices,
    is_index_revoked,
)
from .store import MemoryRevocationStore, RevocationStore
from .redis import RedisRevocationStore
from .client import RevocationApiService
from .manager import RevocationListManager, attach_status

__all__ = [
    # Types
    "DEFAULT_LIST_SIZE",
    "REVOCATION_LIST_CREDENTIAL_TYPE",
    "REVOCATION_LIST_STATUS_TYPE",
    "BuildStatusResult",
    "CredentialStatusState",
    "RevocationList",
    "RevocationListStatus",

    # Bitmap and checks
    "RevocationChecker",
    "build_list_credential",
    "decode_encoded_list",
    "encode_revoked_indices",
    "is_index_revoked",

    # Stores
    "RevocationStore",
    "MemoryRevocationStore",
    "RedisRevocationStore",
    "RevocationApiService",

    # Manager
    "RevocationListManager",
    "attach_status",
]
