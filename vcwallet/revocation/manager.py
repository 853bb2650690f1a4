"""
Revocation list manager.

Issuer-side orchestration of credential revocation status:

1. ``build_revocation_list_status`` allocates a list index for an unsigned
   credential, embeds the ``credentialStatus`` entry and, when the store
   reports a new or unpublished list, signs and publishes the list
   credential before returning.
2. ``revoke_credential`` flips the stored status and always re-signs and
   republishes the list credential.
3. ``republish`` re-signs a list whose publish failed. Stores keep the
   revocation flip, and a list with unpublished changes is published again
   by the next allocation on it.

Allocation and status transitions belong to the store; the manager never
retries a store call.
"""

import logging
from typing import Any, Awaitable, Dict, List, Optional, Set, TypeVar

from ..errors import ExternalServiceError, SdkError, ValidationError
from ..keys.base import WalletCapabilities
from ..vc import REVOCATION_LIST_CONTEXT, credential_subject_did, utc_now_iso
from .store import RevocationStore
from .types import BuildStatusResult, RevocationListStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")


def attach_status(unsigned_credential: Dict[str, Any], credential_status: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``unsigned_credential`` carrying ``credential_status``.

    The revocation list context is appended once; a credential already
    listing it keeps a single entry.
    """
    credential = dict(unsigned_credential)
    credential["credentialStatus"] = dict(credential_status)
    context = credential.get("@context") or []
    context = [context] if isinstance(context, str) else list(context)
    if REVOCATION_LIST_CONTEXT not in context:
        context.append(REVOCATION_LIST_CONTEXT)
    credential["@context"] = context
    return credential


class RevocationListManager:
    def __init__(
        self,
        wallet: WalletCapabilities,
        store: RevocationStore,
        access_token: Optional[str] = None,
    ):
        self.wallet = wallet
        self.store = store
        self.access_token = access_token
        self._unpublished: Set[str] = set()

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except SdkError:
            raise
        except Exception as e:
            logger.error(f"Revocation store {operation} failed: {e}")
            raise ExternalServiceError(f"Revocation store {operation} failed: {e}", cause=e) from e

    async def build_status(
        self,
        credential_id: str,
        subject_did: Optional[str],
        access_token: Optional[str] = None,
    ) -> BuildStatusResult:
        if not credential_id:
            raise ValidationError("`credential_id` is required to build a revocation status")
        return await self._call(
            "build_revocation_list_status",
            self.store.build_revocation_list_status(
                credential_id,
                subject_did,
                issuer_did=self.wallet.did,
                access_token=access_token or self.access_token,
            ),
        )

    async def publish_list_credential(
        self,
        list_credential: Dict[str, Any],
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Sign ``list_credential`` with a fresh issuance date and publish it."""
        unsigned = dict(list_credential)
        unsigned["issuanceDate"] = utc_now_iso()
        signed = self.wallet.sign_credential(unsigned)
        list_id = signed.get("id")
        try:
            await self._call(
                "publish_revocation_list_credential",
                self.store.publish_revocation_list_credential(signed, access_token=access_token or self.access_token),
            )
        except SdkError as e:
            self._unpublished.add(list_id)
            e.context.setdefault("list_id", list_id)
            logger.warning(f"Revocation list credential {list_id} left unpublished: {e}")
            raise
        self._unpublished.discard(list_id)
        logger.info(f"Published revocation list credential {list_id}")
        return signed

    @property
    def unpublished_list_ids(self) -> List[str]:
        """Lists whose last publish failed and still await ``republish``."""
        return sorted(self._unpublished)

    async def republish(self, list_id: str, access_token: Optional[str] = None) -> Dict[str, Any]:
        """Re-sign and publish the current state of list ``list_id``.

        Recovers from a failed publish after ``revoke_credential`` or
        ``build_revocation_list_status``: the status change is already stored,
        so only the list credential needs to reach verifiers.
        """
        list_credential = await self._call(
            "get_list_credential",
            self.store.get_list_credential(list_id, access_token=access_token or self.access_token),
        )
        return await self.publish_list_credential(list_credential, access_token)

    async def build_revocation_list_status(
        self,
        unsigned_credential: Dict[str, Any],
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return ``unsigned_credential`` with its revocation status attached."""
        result = await self.build_status(
            unsigned_credential.get("id"),
            credential_subject_did(unsigned_credential),
            access_token,
        )
        revokable = attach_status(unsigned_credential, result.credential_status)
        if result.is_publish_required:
            await self.publish_list_credential(result.revocation_list_credential, access_token)
        return revokable

    async def revoke_credential(
        self,
        credential_id: str,
        reason: str,
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Revoke ``credential_id``; returns the signed, published list credential."""
        list_credential = await self._call(
            "revoke_credential",
            self.store.revoke_credential(credential_id, reason, access_token=access_token or self.access_token),
        )
        logger.info(f"Revoked credential {credential_id}")
        return await self.publish_list_credential(list_credential, access_token)

    async def get_status(self, credential_id: str, access_token: Optional[str] = None) -> RevocationListStatus:
        return await self._call(
            "get_status",
            self.store.get_status(credential_id, access_token=access_token or self.access_token),
        )


__all__ = ["RevocationListManager", "attach_status"]
