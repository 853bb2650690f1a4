"""Redis-backed revocation store.

Keys (all under ``prefix``):
- ``{prefix}:status:{credential_id}``: JSON ``RevocationListStatus``
- ``{prefix}:list:{list_id}``: JSON ``RevocationList`` allocation state
- ``{prefix}:current:{issuer_did}``: id of the issuer's current list
- ``{prefix}:published:{list_id}``: JSON signed list credential

Allocation and revocation use optimistic ``WATCH``/``MULTI`` transactions:
if a watched key changes before ``EXEC`` the whole read-modify-write is
repeated, so concurrent callers for the same credential id never allocate
two indices.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.exceptions import WatchError

from ..errors import RevocationStoreError
from .status import build_list_credential
from .store import RevocationStore, new_list_id
from .types import DEFAULT_LIST_SIZE, BuildStatusResult, CredentialStatusState, RevocationList, RevocationListStatus

logger = logging.getLogger(__name__)


class RedisRevocationStore(RevocationStore):
    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        prefix: str = "vcwallet:revocation",
        list_size: int = DEFAULT_LIST_SIZE,
        list_base_url: Optional[str] = None,
        max_attempts: int = 20,
    ):
        self.url = url
        self.prefix = prefix.rstrip(":")
        self.list_size = list_size
        self.list_base_url = list_base_url
        self.max_attempts = max_attempts
        self._client = None

    async def _get_client(self):
        if self._client is None:
            self._client = redis.from_url(self.url, decode_responses=True)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # Key helpers
    def _status_key(self, credential_id: str) -> str:
        return f"{self.prefix}:status:{credential_id}"

    def _list_key(self, list_id: str) -> str:
        return f"{self.prefix}:list:{list_id}"

    def _current_key(self, issuer_did: str) -> str:
        return f"{self.prefix}:current:{issuer_did}"

    def _published_key(self, list_id: str) -> str:
        return f"{self.prefix}:published:{list_id}"

    async def _load_list(self, client, list_id: str) -> RevocationList:
        raw = await client.get(self._list_key(list_id))
        if not raw:
            raise RevocationStoreError(f"Unknown revocation list {list_id}", context={"list_id": list_id})
        return RevocationList.from_json(raw)

    def _contention(self, operation: str, key: str) -> RevocationStoreError:
        logger.error(f"{operation} gave up after {self.max_attempts} conflicting attempts on {key}")
        return RevocationStoreError(f"Too much contention on {key}", context={"operation": operation})

    async def build_revocation_list_status(
        self,
        credential_id: str,
        subject_did: Optional[str],
        *,
        issuer_did: str,
        access_token: Optional[str] = None,
    ) -> BuildStatusResult:
        client = await self._get_client()
        status_key = self._status_key(credential_id)
        current_key = self._current_key(issuer_did)

        async with client.pipeline(transaction=True) as pipe:
            for _ in range(self.max_attempts):
                try:
                    await pipe.watch(status_key, current_key)
                    raw_status = await pipe.get(status_key)
                    if raw_status:
                        existing = RevocationListStatus.from_json(raw_status)
                        if existing.is_revoked:
                            raise RevocationStoreError(
                                f"Credential {credential_id} is revoked",
                                context={"credential_id": credential_id},
                            )
                        revocation_list = await self._load_list(pipe, existing.list_credential_id)
                        await pipe.unwatch()
                        return BuildStatusResult(
                            credential_status=existing.to_credential_status(),
                            is_publish_required=False,
                            revocation_list_credential=build_list_credential(revocation_list),
                        )

                    revocation_list = None
                    created = False
                    current_id = await pipe.get(current_key)
                    if current_id:
                        await pipe.watch(self._list_key(current_id))
                        revocation_list = await self._load_list(pipe, current_id)
                    if revocation_list is None or revocation_list.is_full:
                        revocation_list = RevocationList(
                            list_id=new_list_id(self.list_base_url),
                            issuer_did=issuer_did,
                            size=self.list_size,
                        )
                        created = True

                    status = RevocationListStatus(
                        credential_id=credential_id,
                        subject_did=subject_did,
                        list_credential_id=revocation_list.list_id,
                        list_index=revocation_list.next_index,
                    )
                    revocation_list.next_index += 1

                    pipe.multi()
                    pipe.set(status_key, status.to_json())
                    pipe.set(self._list_key(revocation_list.list_id), revocation_list.to_json())
                    pipe.set(current_key, revocation_list.list_id)
                    await pipe.execute()
                except WatchError:
                    logger.debug(f"Allocation for {credential_id} conflicted, retrying")
                    continue

                if created:
                    logger.info(f"Allocated revocation list {revocation_list.list_id} for {issuer_did}")
                return BuildStatusResult(
                    credential_status=status.to_credential_status(),
                    is_publish_required=not revocation_list.published,
                    revocation_list_credential=build_list_credential(revocation_list),
                )
        raise self._contention("build_revocation_list_status", status_key)

    async def revoke_credential(
        self,
        credential_id: str,
        reason: str,
        *,
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        client = await self._get_client()
        status_key = self._status_key(credential_id)

        async with client.pipeline(transaction=True) as pipe:
            for _ in range(self.max_attempts):
                try:
                    await pipe.watch(status_key)
                    raw_status = await pipe.get(status_key)
                    if not raw_status:
                        raise RevocationStoreError(
                            f"Unknown credential {credential_id}",
                            context={"credential_id": credential_id},
                        )
                    status = RevocationListStatus.from_json(raw_status)
                    if status.is_revoked:
                        raise RevocationStoreError(
                            f"Credential {credential_id} is already revoked",
                            context={"credential_id": credential_id},
                        )
                    await pipe.watch(self._list_key(status.list_credential_id))
                    revocation_list = await self._load_list(pipe, status.list_credential_id)

                    status.status = CredentialStatusState.REVOKED
                    status.revocation_reason = reason
                    status.revoked_at = datetime.now(timezone.utc)
                    revocation_list.revoked_indices.append(status.list_index)
                    revocation_list.published = False

                    pipe.multi()
                    pipe.set(status_key, status.to_json())
                    pipe.set(self._list_key(revocation_list.list_id), revocation_list.to_json())
                    await pipe.execute()
                except WatchError:
                    logger.debug(f"Revocation of {credential_id} conflicted, retrying")
                    continue
                return build_list_credential(revocation_list)
        raise self._contention("revoke_credential", status_key)

    async def publish_revocation_list_credential(
        self,
        signed_list_credential: Dict[str, Any],
        *,
        access_token: Optional[str] = None,
    ) -> None:
        client = await self._get_client()
        list_id = signed_list_credential.get("id")
        list_key = self._list_key(list_id)

        async with client.pipeline(transaction=True) as pipe:
            for _ in range(self.max_attempts):
                try:
                    await pipe.watch(list_key)
                    revocation_list = await self._load_list(pipe, list_id)
                    revocation_list.published = True
                    pipe.multi()
                    pipe.set(list_key, revocation_list.to_json())
                    pipe.set(self._published_key(list_id), json.dumps(signed_list_credential))
                    await pipe.execute()
                except WatchError:
                    continue
                logger.debug(f"Published revocation list {list_id}")
                return
        raise self._contention("publish_revocation_list_credential", list_key)

    async def get_status(self, credential_id: str, *, access_token: Optional[str] = None) -> RevocationListStatus:
        client = await self._get_client()
        raw = await client.get(self._status_key(credential_id))
        if not raw:
            raise RevocationStoreError(f"Unknown credential {credential_id}", context={"credential_id": credential_id})
        return RevocationListStatus.from_json(raw)

    async def get_list_credential(self, list_id: str, *, access_token: Optional[str] = None) -> Dict[str, Any]:
        client = await self._get_client()
        return build_list_credential(await self._load_list(client, list_id))

    async def get_revocation_list_credential(self, list_id: str) -> Dict[str, Any]:
        client = await self._get_client()
        raw = await client.get(self._published_key(list_id))
        if not raw:
            raise RevocationStoreError(f"Revocation list {list_id} has not been published", context={"list_id": list_id})
        return json.loads(raw)

    async def clear(self) -> int:
        """Delete every key under ``prefix``."""
        client = await self._get_client()
        deleted = 0
        cursor = 0
        while True:
            cursor, keys = await client.scan(cursor=cursor, match=f"{self.prefix}:*", count=500)
            if keys:
                deleted += await client.delete(*keys)
            if cursor == 0:
                break
        return deleted


__all__ = ["RedisRevocationStore"]
