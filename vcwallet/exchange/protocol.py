"""
Credential exchange protocol.

Build operations: ask an interaction builder for the unsigned payload, sign
it with the wallet and return the compact token. Verify operations: decode,
verify the signature, check the claims against the request and return a
result object. Verification never raises; input problems do.

Per exchange: Built -> Sent -> Received -> SignatureVerified ->
ClaimsChecked -> Accepted | Rejected. Nothing is retried; a failed
verification is final for that token.
"""

import inspect
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

from ..errors import DecodeError, NoMatchingCredentialsError, ReplayProtectionError, ValidationError
from ..keys.base import WalletCapabilities
from ..keys.verifier import DidVerifier
from ..services.issuer import IssuerApi
from ..services.verifier import VerifierApi
from ..token.codec import from_jwt as decode_token
from ..token.types import (
    CredentialRequirement,
    InteractionToken,
    JwtOptions,
    OfferedCredential,
    key_id_to_did,
    specific_type_of,
)
from ..vc import build_vc_unsigned, credential_specific_type, credential_types
from .holder import HolderService, filter_credentials, requested_types
from .types import CredentialOfferResponseOutput, CredentialShareResponseOutput
from .validation import (
    check_credentials,
    check_did,
    check_jwt_options,
    check_offered_credentials,
    check_requirements,
    ensure_valid,
)

logger = logging.getLogger(__name__)

RequestResolver = Callable[[str], Union[Optional[str], Awaitable[Optional[str]]]]


def _as_offered(item: Union[OfferedCredential, Dict[str, Any]]) -> OfferedCredential:
    return item if isinstance(item, OfferedCredential) else OfferedCredential.from_dict(item)


def _as_requirement(item: Union[CredentialRequirement, Dict[str, Any]]) -> CredentialRequirement:
    return item if isinstance(item, CredentialRequirement) else CredentialRequirement.from_dict(item)


def _parse_expiry(expires_at: Union[str, datetime]) -> datetime:
    if isinstance(expires_at, str):
        try:
            expires_at = datetime.fromisoformat(expires_at.replace("Z", "+00:00"))
        except ValueError as e:
            raise ValidationError(f"`expires_at` is not an ISO-8601 date: {expires_at}", cause=e) from e
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at


class CredentialExchange:
    """Offer and share flows for one wallet identity."""

    def __init__(
        self,
        wallet: WalletCapabilities,
        issuer_api: IssuerApi,
        verifier_api: VerifierApi,
        holder: Optional[HolderService] = None,
        verifier: Optional[DidVerifier] = None,
    ):
        self.wallet = wallet
        self.issuer_api = issuer_api
        self.verifier_api = verifier_api
        self.verifier = verifier or DidVerifier()
        self.holder = holder or HolderService(self.verifier)

    @staticmethod
    def from_jwt(token: str) -> InteractionToken:
        return decode_token(token)

    @staticmethod
    def get_credential_types(request: Union[str, InteractionToken]) -> List[str]:
        """Specific types requested by a share request or presentation challenge."""
        token = decode_token(request) if isinstance(request, str) else request
        return requested_types(token)

    def _sign(self, payload: Dict[str, Any]) -> str:
        return self.wallet.sign_jwt(payload, self.wallet.key_id)

    # Offer flow

    async def generate_credential_offer_request_token(
        self,
        offered_credentials: Sequence[Union[OfferedCredential, Dict[str, Any]]],
        options: Optional[JwtOptions] = None,
    ) -> str:
        offered = [_as_offered(c) for c in offered_credentials or []]
        ensure_valid(check_offered_credentials(offered) + check_jwt_options(options))
        payload = await self.issuer_api.build_credential_offer(offered, options)
        token = self._sign(payload)
        logger.info(f"Generated credential offer {payload.get('jti')} for {len(offered)} credential(s)")
        return token

    async def create_credential_offer_response_token(self, offer_token: str) -> str:
        payload = self.holder.build_credential_offer_response(offer_token)
        return self._sign(payload)

    async def verify_credential_offer_response_token(
        self,
        response_token: str,
        request_token: Optional[str] = None,
    ) -> CredentialOfferResponseOutput:
        decode_token(response_token)
        if request_token is not None:
            decode_token(request_token)
        body = await self.issuer_api.verify_credential_offer_response(response_token, request_token)
        return CredentialOfferResponseOutput(
            is_valid=bool(body.get("isValid")),
            did=key_id_to_did(body.get("issuer")),
            nonce=body.get("jti"),
            selected_credentials=list(body.get("selectedCredentials") or []),
            errors=list(body.get("errors") or []),
        )

    def sign_credential(
        self,
        credential_subject: Dict[str, Any],
        claim_metadata: Dict[str, Any],
        *,
        offer_response_token: Optional[str] = None,
        requester_did: Optional[str] = None,
        expires_at: Optional[Union[str, datetime]] = None,
    ) -> Dict[str, Any]:
        """Issue a credential for the requester of an offer (or ``requester_did``).

        ``claim_metadata`` carries ``type`` and optionally ``context``.
        """
        expiration_date = None
        if expires_at is not None:
            expiry = _parse_expiry(expires_at)
            if expiry <= datetime.now(timezone.utc):
                raise ValidationError("Expiry date should be greater than current date")
            expiration_date = expiry.isoformat(timespec="milliseconds").replace("+00:00", "Z")

        if offer_response_token:
            requester_did = decode_token(offer_response_token).issuer
        errors = check_did(requester_did, "requester_did", required=True)
        types = claim_metadata.get("type")
        if not types:
            errors.append("`claim_metadata.type` is required")
        ensure_valid(errors)

        unsigned = build_vc_unsigned(
            credential_subject=credential_subject,
            holder_did=key_id_to_did(requester_did),
            types=[types] if isinstance(types, str) else list(types),
            context=claim_metadata.get("context"),
            expiration_date=expiration_date,
        )
        return self.wallet.sign_credential(unsigned)

    def sign_credentials(
        self,
        offer_response_token: str,
        unsigned_credentials: Sequence[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        """Sign the credentials whose type the holder selected in the offer response."""
        response = decode_token(offer_response_token)
        selected = {
            specific_type_of(c.get("type"))
            for c in response.interaction.get("selectedCredentials") or []
            if isinstance(c, dict)
        }
        signed: List[Dict[str, Any]] = []
        for unsigned in unsigned_credentials:
            if credential_specific_type(unsigned) not in selected:
                continue
            signed.append(
                self.sign_credential(
                    unsigned.get("credentialSubject") or {},
                    {"type": credential_types(unsigned), "context": unsigned.get("@context")},
                    offer_response_token=offer_response_token,
                    expires_at=unsigned.get("expirationDate"),
                )
            )
        if not signed:
            raise NoMatchingCredentialsError(
                "None of the credentials were selected in the offer response",
                context={"selectedTypes": sorted(t for t in selected if t)},
            )
        return signed

    # Share flow

    async def generate_credential_share_request_token(
        self,
        credential_requirements: Sequence[Union[CredentialRequirement, Dict[str, Any]]],
        issuer_did: Optional[str] = None,
        options: Optional[JwtOptions] = None,
    ) -> str:
        requirements = [_as_requirement(r) for r in credential_requirements or []]
        ensure_valid(check_requirements(requirements) + check_did(issuer_did, "issuer_did") + check_jwt_options(options))
        payload = await self.verifier_api.build_credential_request(requirements, issuer_did, options)
        token = self._sign(payload)
        logger.info(f"Generated credential share request {payload.get('jti')}")
        return token

    async def generate_did_auth_request(self, options: Optional[JwtOptions] = None) -> str:
        return await self.generate_credential_share_request_token([], None, options)

    def get_share_credentials(
        self,
        share_request_token: str,
        credentials: Sequence[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        """The subset of ``credentials`` a share request asks for."""
        return filter_credentials(decode_token(share_request_token), credentials)

    async def create_credential_share_response_token(
        self,
        share_request_token: str,
        supplied_credentials: Sequence[Dict[str, Any]],
    ) -> str:
        ensure_valid(check_credentials(supplied_credentials), "Invalid supplied credentials")
        payload = self.holder.build_credential_response(share_request_token, supplied_credentials)
        return self._sign(payload)

    async def create_did_auth_response(self, did_auth_request_token: str) -> str:
        return await self.create_credential_share_response_token(did_auth_request_token, [])

    async def _resolve_request_token(
        self,
        response_token: str,
        request_or_resolver: Union[str, RequestResolver, None],
    ) -> Optional[str]:
        if request_or_resolver is None or isinstance(request_or_resolver, str):
            return request_or_resolver
        nonce = decode_token(response_token).nonce
        result = request_or_resolver(nonce)
        if inspect.isawaitable(result):
            result = await result
        if not result:
            raise ReplayProtectionError(f"No request token found for nonce {nonce}", context={"nonce": nonce})
        try:
            decode_token(result)
        except DecodeError as e:
            raise ReplayProtectionError(f"Request token for nonce {nonce} cannot be decoded", cause=e) from e
        return result

    async def verify_credential_share_response_token(
        self,
        response_token: str,
        request_or_resolver: Union[str, RequestResolver, None] = None,
        should_own: bool = True,
    ) -> CredentialShareResponseOutput:
        """Verify a share response.

        ``request_or_resolver`` is the request token or a callable (sync or
        async) mapping the response nonce to it.
        """
        decode_token(response_token)
        request_token = await self._resolve_request_token(response_token, request_or_resolver)
        return await self.holder.verify_credential_share_response(response_token, request_token, should_own)

    async def verify_did_auth_response(
        self,
        response_token: str,
        request_token: Union[str, RequestResolver, None] = None,
    ) -> CredentialShareResponseOutput:
        return await self.verify_credential_share_response_token(response_token, request_token)


__all__ = ["CredentialExchange", "RequestResolver"]
