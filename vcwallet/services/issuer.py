"""Issuer interaction builder: interface and HTTP client."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..token.types import JwtOptions, OfferedCredential
from .base import ApiService


class IssuerApi(ABC):
    """Builds unsigned credential offers and checks offer responses."""

    @abstractmethod
    async def build_credential_offer(
        self,
        offered_credentials: List[OfferedCredential],
        options: Optional[JwtOptions] = None,
    ) -> Dict[str, Any]:
        """Return the unsigned ``credentialOffer`` payload."""

    @abstractmethod
    async def verify_credential_offer_response(
        self,
        response_token: str,
        request_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return ``{isValid, issuer, jti, selectedCredentials, errors}``."""


class IssuerApiService(ApiService, IssuerApi):
    operations = {
        "BuildCredentialOffer": ("POST", "/api/v1/issuer/build-credential-offer"),
        "VerifyCredentialOfferResponse": ("POST", "/api/v1/issuer/verify-credential-offer-response"),
    }

    async def build_credential_offer(
        self,
        offered_credentials: List[OfferedCredential],
        options: Optional[JwtOptions] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"offeredCredentials": [c.to_dict() for c in offered_credentials]}
        if options:
            params.update(options.to_params())
        body = await self.execute("BuildCredentialOffer", params)
        return self._require(body, "credentialOffer", "BuildCredentialOffer")

    async def verify_credential_offer_response(
        self,
        response_token: str,
        request_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {
            "credentialOfferResponseToken": response_token,
            "credentialOfferRequestToken": request_token,
        }
        body = await self.execute("VerifyCredentialOfferResponse", params)
        self._require(body, "isValid", "VerifyCredentialOfferResponse")
        return body


__all__ = ["IssuerApi", "IssuerApiService"]
