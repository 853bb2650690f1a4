"""HTTP client for a remote revocation service."""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from ..errors import RevocationStoreError
from ..services.base import ApiService
from .store import RevocationStore
from .types import BuildStatusResult, CredentialStatusState, RevocationListStatus

logger = logging.getLogger(__name__)


class RevocationApiService(ApiService, RevocationStore):
    """Revocation store backed by the platform's revocation API.

    The remote service derives the issuer from the access token, so the
    ``issuer_did`` argument is not sent.
    """

    operations = {
        "BuildRevocationListStatus": ("POST", "/api/v1/revocation/revocation-list-2020/credentials"),
        "RevokeCredential": ("POST", "/api/v1/revocation/revoke-credentials"),
        "PublishRevocationListCredential": ("POST", "/api/v1/revocation/publish-revocation-list-credential"),
        "GetCredentialStatus": ("GET", "/api/v1/revocation/revocation-list-2020/credentials/{credential_id}"),
        "GetRevocationListCredential": ("GET", "/api/v1/revocation/revocation-lists/{list_id}"),
    }
    error_class = RevocationStoreError

    async def build_revocation_list_status(
        self,
        credential_id: str,
        subject_did: Optional[str],
        *,
        issuer_did: Optional[str] = None,
        access_token: Optional[str] = None,
    ) -> BuildStatusResult:
        body = await self.execute(
            "BuildRevocationListStatus",
            {"credentialId": credential_id, "subjectDid": subject_did},
            access_token=access_token,
        )
        self._require(body, "credentialStatus", "BuildRevocationListStatus")
        return BuildStatusResult.from_dict(body)

    async def revoke_credential(
        self,
        credential_id: str,
        reason: str,
        *,
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        body = await self.execute(
            "RevokeCredential",
            {"id": credential_id, "revocationReason": reason},
            access_token=access_token,
        )
        return self._require(body, "revocationListCredential", "RevokeCredential")

    async def publish_revocation_list_credential(
        self,
        signed_list_credential: Dict[str, Any],
        *,
        access_token: Optional[str] = None,
    ) -> None:
        await self.execute("PublishRevocationListCredential", signed_list_credential, access_token=access_token)
        logger.debug(f"Published revocation list {signed_list_credential.get('id')}")

    async def get_status(self, credential_id: str, *, access_token: Optional[str] = None) -> RevocationListStatus:
        body = await self.execute(
            "GetCredentialStatus",
            path_params={"credential_id": credential_id},
            access_token=access_token,
        )
        self._require(body, "revocationListIndex", "GetCredentialStatus")
        revoked_at = body.get("revokedAt")
        return RevocationListStatus(
            credential_id=body.get("credentialId", credential_id),
            subject_did=body.get("subjectDid"),
            list_credential_id=body.get("revocationListCredential"),
            list_index=int(body["revocationListIndex"]),
            status=CredentialStatusState(body.get("status", CredentialStatusState.VALID.value)),
            revocation_reason=body.get("revocationReason"),
            revoked_at=datetime.fromisoformat(revoked_at.replace("Z", "+00:00")) if revoked_at else None,
        )

    async def get_list_credential(self, list_id: str, *, access_token: Optional[str] = None) -> Dict[str, Any]:
        """The remote service applies revocations to the list it serves; the proof is dropped for re-signing."""
        body = await self.execute(
            "GetRevocationListCredential",
            path_params={"list_id": list_id},
            access_token=access_token,
        )
        self._require(body, "credentialSubject", "GetRevocationListCredential")
        return {key: value for key, value in body.items() if key != "proof"}

    async def get_revocation_list_credential(self, list_id: str) -> Dict[str, Any]:
        return await self.execute("GetRevocationListCredential", path_params={"list_id": list_id})


__all__ = ["RevocationApiService"]
