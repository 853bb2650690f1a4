"""
Main wallet service.

``WalletService`` composes the exchange protocol, the presentation engine and
the revocation list manager around one wallet identity, wiring them to the
same DID verifier and holder service. ``create_service`` builds one against
the remote platform services or, with ``local=True``, fully in process.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from ..config import SdkOptions
from ..exchange.holder import HolderService
from ..exchange.protocol import CredentialExchange, RequestResolver
from ..exchange.types import (
    CredentialOfferResponseOutput,
    CredentialShareResponseOutput,
    PresentationValidationOutput,
)
from ..keys.base import WalletCapabilities
from ..keys.did import DidResolver
from ..keys.verifier import DidVerifier
from ..keys.wallet import LocalWallet
from ..presentation.engine import PresentationEngine
from ..revocation.client import RevocationApiService
from ..revocation.manager import RevocationListManager
from ..revocation.redis import RedisRevocationStore
from ..revocation.status import RevocationChecker
from ..revocation.store import MemoryRevocationStore, RevocationStore
from ..revocation.types import BuildStatusResult, RevocationListStatus
from ..services.base import ApiService
from ..services.issuer import IssuerApi, IssuerApiService
from ..services.local import LocalIssuerApi, LocalVerifierApi
from ..services.verifier import VerifierApi, VerifierApiService
from ..session import UserSession
from ..token.types import CredentialRequirement, InteractionToken, JwtOptions, OfferedCredential

logger = logging.getLogger(__name__)


class WalletService:
    """Entry point bundling every exchange, presentation and revocation operation."""

    def __init__(
        self,
        wallet: WalletCapabilities,
        *,
        issuer_api: IssuerApi,
        verifier_api: VerifierApi,
        revocation_store: RevocationStore,
        options: Optional[SdkOptions] = None,
        session: Optional[UserSession] = None,
        resolver: Optional[DidResolver] = None,
        check_revocation: bool = False,
    ):
        self.wallet = wallet
        self.options = options or SdkOptions()
        self.session = session
        self.issuer_api = issuer_api
        self.verifier_api = verifier_api
        self.revocation_store = revocation_store

        self.verifier = DidVerifier(resolver)
        checker = RevocationChecker(revocation_store, self.verifier) if check_revocation else None
        self.holder = HolderService(self.verifier, checker)
        self.exchange = CredentialExchange(wallet, issuer_api, verifier_api, self.holder, self.verifier)
        self.presentations = PresentationEngine(wallet, verifier_api, self.holder, self.verifier)
        self.revocation = RevocationListManager(
            wallet,
            revocation_store,
            access_token=session.access_token if session else None,
        )
        logger.info(f"Wallet service initialized for {wallet.did}")

    @property
    def did(self) -> str:
        return self.wallet.did

    async def close(self) -> None:
        """Close the HTTP clients and stores owned by this service."""
        for component in (self.issuer_api, self.verifier_api, self.revocation_store):
            if isinstance(component, ApiService):
                await component.close()
            elif isinstance(component, RedisRevocationStore):
                await component.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    # Tokens

    @staticmethod
    def from_jwt(token: str) -> InteractionToken:
        return CredentialExchange.from_jwt(token)

    @staticmethod
    def get_credential_types(request: Union[str, InteractionToken]) -> List[str]:
        return CredentialExchange.get_credential_types(request)

    # Offer flow

    async def generate_credential_offer_request_token(
        self,
        offered_credentials: Sequence[Union[OfferedCredential, Dict[str, Any]]],
        options: Optional[JwtOptions] = None,
    ) -> str:
        return await self.exchange.generate_credential_offer_request_token(offered_credentials, options)

    async def create_credential_offer_response_token(self, offer_token: str) -> str:
        return await self.exchange.create_credential_offer_response_token(offer_token)

    async def verify_credential_offer_response_token(
        self,
        response_token: str,
        request_token: Optional[str] = None,
    ) -> CredentialOfferResponseOutput:
        return await self.exchange.verify_credential_offer_response_token(response_token, request_token)

    def sign_credential(
        self,
        credential_subject: Dict[str, Any],
        claim_metadata: Dict[str, Any],
        **kwargs,
    ) -> Dict[str, Any]:
        return self.exchange.sign_credential(credential_subject, claim_metadata, **kwargs)

    def sign_credentials(
        self,
        offer_response_token: str,
        unsigned_credentials: Sequence[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        return self.exchange.sign_credentials(offer_response_token, unsigned_credentials)

    # Share flow

    async def generate_credential_share_request_token(
        self,
        credential_requirements: Sequence[Union[CredentialRequirement, Dict[str, Any]]],
        issuer_did: Optional[str] = None,
        options: Optional[JwtOptions] = None,
    ) -> str:
        return await self.exchange.generate_credential_share_request_token(credential_requirements, issuer_did, options)

    async def generate_did_auth_request(self, options: Optional[JwtOptions] = None) -> str:
        return await self.exchange.generate_did_auth_request(options)

    def get_share_credentials(self, share_request_token: str, credentials: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return self.exchange.get_share_credentials(share_request_token, credentials)

    async def create_credential_share_response_token(
        self,
        share_request_token: str,
        supplied_credentials: Sequence[Dict[str, Any]],
    ) -> str:
        return await self.exchange.create_credential_share_response_token(share_request_token, supplied_credentials)

    async def create_did_auth_response(self, did_auth_request_token: str) -> str:
        return await self.exchange.create_did_auth_response(did_auth_request_token)

    async def verify_credential_share_response_token(
        self,
        response_token: str,
        request_or_resolver: Union[str, RequestResolver, None] = None,
        should_own: bool = True,
    ) -> CredentialShareResponseOutput:
        return await self.exchange.verify_credential_share_response_token(response_token, request_or_resolver, should_own)

    async def verify_did_auth_response(
        self,
        response_token: str,
        request_token: Union[str, RequestResolver, None] = None,
    ) -> CredentialShareResponseOutput:
        return await self.exchange.verify_did_auth_response(response_token, request_token)

    # Presentations

    async def generate_presentation_challenge(
        self,
        credential_requirements: Sequence[Union[CredentialRequirement, Dict[str, Any]]],
        issuer_did: Optional[str] = None,
        options: Optional[JwtOptions] = None,
    ) -> str:
        return await self.presentations.generate_presentation_challenge(credential_requirements, issuer_did, options)

    def create_presentation_from_challenge(
        self,
        challenge: str,
        credentials: Sequence[Dict[str, Any]],
        domain: str,
    ) -> Dict[str, Any]:
        return self.presentations.create_presentation_from_challenge(challenge, credentials, domain)

    async def verify_presentation(self, presentation: Dict[str, Any]) -> PresentationValidationOutput:
        return await self.presentations.verify_presentation(presentation)

    # Revocation

    async def build_status(
        self,
        credential_id: str,
        subject_did: Optional[str],
        access_token: Optional[str] = None,
    ) -> BuildStatusResult:
        return await self.revocation.build_status(credential_id, subject_did, access_token)

    async def build_revocation_list_status(
        self,
        unsigned_credential: Dict[str, Any],
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self.revocation.build_revocation_list_status(unsigned_credential, access_token)

    async def revoke_credential(
        self,
        credential_id: str,
        reason: str,
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self.revocation.revoke_credential(credential_id, reason, access_token)

    async def republish_revocation_list(self, list_id: str, access_token: Optional[str] = None) -> Dict[str, Any]:
        return await self.revocation.republish(list_id, access_token)

    async def get_revocation_status(
        self,
        credential_id: str,
        access_token: Optional[str] = None,
    ) -> RevocationListStatus:
        return await self.revocation.get_status(credential_id, access_token)


def create_service(
    wallet: Optional[WalletCapabilities] = None,
    *,
    options: Optional[SdkOptions] = None,
    session: Optional[UserSession] = None,
    local: bool = False,
    resolver: Optional[DidResolver] = None,
    check_revocation: bool = False,
) -> WalletService:
    """Create a wallet service.

    With ``local=True`` the interaction builders run in process and the
    revocation state lives in Redis when ``options.redis_url`` is set, in
    memory otherwise. Without it every collaborator is an HTTP client for
    the configured environment.
    """
    wallet = wallet or LocalWallet.generate()
    options = options or SdkOptions()

    if local:
        verifier = DidVerifier(resolver)
        issuer_api: IssuerApi = LocalIssuerApi(verifier, token_ttl=options.token_ttl)
        verifier_api: VerifierApi = LocalVerifierApi(token_ttl=options.token_ttl)
        if options.redis_url:
            store: RevocationStore = RedisRevocationStore(
                url=options.redis_url,
                list_size=options.revocation_list_size,
                list_base_url=options.revocation_list_base_url,
            )
        else:
            store = MemoryRevocationStore(
                list_size=options.revocation_list_size,
                list_base_url=options.revocation_list_base_url,
            )
    else:
        client_args = {"api_key": options.access_api_key, "timeout": options.request_timeout}
        issuer_api = IssuerApiService(options.issuer_url, **client_args)
        verifier_api = VerifierApiService(options.verifier_url, **client_args)
        store = RevocationApiService(options.revocation_url, **client_args)

    return WalletService(
        wallet,
        issuer_api=issuer_api,
        verifier_api=verifier_api,
        revocation_store=store,
        options=options,
        session=session,
        resolver=resolver,
        check_revocation=check_revocation,
    )


__all__ = ["WalletService", "create_service"]
