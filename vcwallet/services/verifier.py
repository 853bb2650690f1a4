"""Verifier interaction builder: interface and HTTP client."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..token.types import CredentialRequirement, JwtOptions
from .base import ApiService


class VerifierApi(ABC):
    """Builds unsigned credential share requests."""

    @abstractmethod
    async def build_credential_request(
        self,
        credential_requirements: List[CredentialRequirement],
        issuer_did: Optional[str] = None,
        options: Optional[JwtOptions] = None,
    ) -> Dict[str, Any]:
        """Return the unsigned ``credentialShareRequest`` payload."""


class VerifierApiService(ApiService, VerifierApi):
    operations = {
        "BuildCredentialRequest": ("POST", "/api/v1/verifier/build-credential-request"),
    }

    async def build_credential_request(
        self,
        credential_requirements: List[CredentialRequirement],
        issuer_did: Optional[str] = None,
        options: Optional[JwtOptions] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "credentialRequirements": [r.to_dict() for r in credential_requirements],
            "issuerDid": issuer_did,
        }
        if options:
            params.update(options.to_params())
        body = await self.execute("BuildCredentialRequest", params)
        return self._require(body, "credentialShareRequest", "BuildCredentialRequest")


__all__ = ["VerifierApi", "VerifierApiService"]
