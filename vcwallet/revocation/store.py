"""
Revocation store interface and in-memory implementation.

The store is the source of truth for index allocation and status flips.
Allocation for a given credential id happens at most once: a repeated
``build_revocation_list_status`` call returns the existing entry and never
asks for a republish. Revocation is a separate path; allocating status for
a revoked credential is rejected.
"""

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..errors import RevocationStoreError
from .status import build_list_credential
from .types import DEFAULT_LIST_SIZE, BuildStatusResult, CredentialStatusState, RevocationList, RevocationListStatus

logger = logging.getLogger(__name__)


def new_list_id(base_url: Optional[str] = None) -> str:
    if base_url:
        return f"{base_url.rstrip('/')}/{uuid.uuid4().hex}"
    return f"urn:uuid:{uuid.uuid4()}"


class RevocationStore(ABC):
    """Interface for revocation list backends."""

    @abstractmethod
    async def build_revocation_list_status(
        self,
        credential_id: str,
        subject_did: Optional[str],
        *,
        issuer_did: str,
        access_token: Optional[str] = None,
    ) -> BuildStatusResult:
        """Allocate (or return the existing) list index for ``credential_id``."""

    @abstractmethod
    async def revoke_credential(
        self,
        credential_id: str,
        reason: str,
        *,
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Flip ``credential_id`` to revoked; return the unsigned updated list credential."""

    @abstractmethod
    async def publish_revocation_list_credential(
        self,
        signed_list_credential: Dict[str, Any],
        *,
        access_token: Optional[str] = None,
    ) -> None:
        """Make a signed list credential available to verifiers."""

    @abstractmethod
    async def get_status(self, credential_id: str, *, access_token: Optional[str] = None) -> RevocationListStatus:
        """Return the stored status entry of ``credential_id``."""

    @abstractmethod
    async def get_list_credential(self, list_id: str, *, access_token: Optional[str] = None) -> Dict[str, Any]:
        """Return the current unsigned list credential ``list_id``, revocations included."""

    @abstractmethod
    async def get_revocation_list_credential(self, list_id: str) -> Dict[str, Any]:
        """Return the published (signed) list credential ``list_id``."""


class MemoryRevocationStore(RevocationStore):
    """Single-process store; an ``asyncio.Lock`` serializes every mutation."""

    def __init__(self, list_size: int = DEFAULT_LIST_SIZE, list_base_url: Optional[str] = None):
        self.list_size = list_size
        self.list_base_url = list_base_url
        self._lock = asyncio.Lock()
        self._statuses: Dict[str, RevocationListStatus] = {}
        self._lists: Dict[str, RevocationList] = {}
        self._current: Dict[str, str] = {}
        self._published: Dict[str, Dict[str, Any]] = {}

    async def build_revocation_list_status(
        self,
        credential_id: str,
        subject_did: Optional[str],
        *,
        issuer_did: str,
        access_token: Optional[str] = None,
    ) -> BuildStatusResult:
        async with self._lock:
            existing = self._statuses.get(credential_id)
            if existing is not None:
                if existing.is_revoked:
                    raise RevocationStoreError(
                        f"Credential {credential_id} is revoked",
                        context={"credential_id": credential_id},
                    )
                revocation_list = self._lists[existing.list_credential_id]
                return BuildStatusResult(
                    credential_status=existing.to_credential_status(),
                    is_publish_required=False,
                    revocation_list_credential=build_list_credential(revocation_list),
                )

            revocation_list = self._lists.get(self._current.get(issuer_did, ""))
            if revocation_list is None or revocation_list.is_full:
                revocation_list = RevocationList(
                    list_id=new_list_id(self.list_base_url),
                    issuer_did=issuer_did,
                    size=self.list_size,
                )
                self._lists[revocation_list.list_id] = revocation_list
                self._current[issuer_did] = revocation_list.list_id
                logger.info(f"Allocated revocation list {revocation_list.list_id} for {issuer_did}")

            status = RevocationListStatus(
                credential_id=credential_id,
                subject_did=subject_did,
                list_credential_id=revocation_list.list_id,
                list_index=revocation_list.next_index,
            )
            revocation_list.next_index += 1
            self._statuses[credential_id] = status
            return BuildStatusResult(
                credential_status=status.to_credential_status(),
                is_publish_required=not revocation_list.published,
                revocation_list_credential=build_list_credential(revocation_list),
            )

    async def revoke_credential(
        self,
        credential_id: str,
        reason: str,
        *,
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        async with self._lock:
            status = self._statuses.get(credential_id)
            if status is None:
                raise RevocationStoreError(f"Unknown credential {credential_id}", context={"credential_id": credential_id})
            if status.is_revoked:
                raise RevocationStoreError(
                    f"Credential {credential_id} is already revoked",
                    context={"credential_id": credential_id},
                )
            status.status = CredentialStatusState.REVOKED
            status.revocation_reason = reason
            status.revoked_at = datetime.now(timezone.utc)
            revocation_list = self._lists[status.list_credential_id]
            revocation_list.revoked_indices.append(status.list_index)
            revocation_list.published = False
            return build_list_credential(revocation_list)

    async def publish_revocation_list_credential(
        self,
        signed_list_credential: Dict[str, Any],
        *,
        access_token: Optional[str] = None,
    ) -> None:
        list_id = signed_list_credential.get("id")
        async with self._lock:
            revocation_list = self._lists.get(list_id)
            if revocation_list is None:
                raise RevocationStoreError(f"Unknown revocation list {list_id}", context={"list_id": list_id})
            revocation_list.published = True
            self._published[list_id] = signed_list_credential

    async def get_status(self, credential_id: str, *, access_token: Optional[str] = None) -> RevocationListStatus:
        status = self._statuses.get(credential_id)
        if status is None:
            raise RevocationStoreError(f"Unknown credential {credential_id}", context={"credential_id": credential_id})
        return replace(status)

    async def get_list_credential(self, list_id: str, *, access_token: Optional[str] = None) -> Dict[str, Any]:
        revocation_list = self._lists.get(list_id)
        if revocation_list is None:
            raise RevocationStoreError(f"Unknown revocation list {list_id}", context={"list_id": list_id})
        return build_list_credential(revocation_list)

    async def get_revocation_list_credential(self, list_id: str) -> Dict[str, Any]:
        published = self._published.get(list_id)
        if published is None:
            raise RevocationStoreError(f"Revocation list {list_id} has not been published", context={"list_id": list_id})
        return published


__all__ = [
    "new_list_id",
    "RevocationStore",
    "MemoryRevocationStore",
]
