"""
Holder side of the exchange flows.

Builds the unsigned response payloads for received offer and share request
tokens, and verifies share responses and presentation challenges on the
verifier side. Response payloads echo the request: ``jti`` and ``exp`` are
copied and ``aud`` is set to the request's issuer.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..errors import ChallengeError, NoMatchingCredentialsError, SdkError
from ..keys.verifier import DidVerifier
from ..revocation.status import RevocationChecker
from ..token.codec import from_jwt
from ..token.types import InteractionToken, InteractionType, specific_type_of
from ..token.verification import verify_interaction_claims
from ..vc import credential_label, credential_specific_type, credential_subject_did
from .types import CredentialShareResponseOutput

logger = logging.getLogger(__name__)


def requested_types(request: InteractionToken) -> List[str]:
    """Specific types of the requirements carried by a share request or challenge."""
    types: List[str] = []
    for requirement in request.interaction.get("credentialRequirements") or []:
        specific = specific_type_of(requirement.get("type")) if isinstance(requirement, dict) else None
        if specific:
            types.append(specific)
    return types


def filter_credentials(request: InteractionToken, credentials: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep the credentials whose specific type is requested; all of them for DID-auth."""
    types = requested_types(request)
    if not types:
        return list(credentials)
    return [c for c in credentials if credential_specific_type(c) in types]


def _response_payload(
    request: InteractionToken,
    interaction_type: InteractionType,
    interaction: Dict[str, Any],
) -> Dict[str, Any]:
    body = dict(interaction)
    if request.callback_url:
        body["callbackURL"] = request.callback_url
    payload: Dict[str, Any] = {"interactionToken": body, "typ": interaction_type.value}
    for claim, value in (("jti", request.nonce), ("aud", request.issuer), ("exp", request.payload.get("exp"))):
        if value is not None:
            payload[claim] = value
    return payload


class HolderService:
    """Response builder and share-response verifier."""

    def __init__(self, verifier: Optional[DidVerifier] = None, revocation_checker: Optional[RevocationChecker] = None):
        self.verifier = verifier or DidVerifier()
        self.revocation_checker = revocation_checker

    def build_credential_offer_response(self, offer_token: str) -> Dict[str, Any]:
        """Accept every offered credential."""
        offer = from_jwt(offer_token)
        selected = list(offer.interaction.get("offeredCredentials") or [])
        return _response_payload(offer, InteractionType.CREDENTIAL_OFFER_RESPONSE, {"selectedCredentials": selected})

    def build_credential_response(
        self,
        request_token: str,
        credentials: Sequence[Dict[str, Any]],
    ) -> Dict[str, Any]:
        request = from_jwt(request_token)
        supplied = filter_credentials(request, credentials)
        if requested_types(request) and not supplied:
            raise NoMatchingCredentialsError(
                "None of the supplied credentials match the requested types",
                context={"requestedTypes": requested_types(request)},
            )
        return _response_payload(request, InteractionType.CREDENTIAL_RESPONSE, {"suppliedCredentials": supplied})

    async def verify_credential_share_response(
        self,
        response_token: str,
        request_token: Optional[str] = None,
        should_own: bool = True,
    ) -> CredentialShareResponseOutput:
        decoded = from_jwt(response_token)
        try:
            response = await self.verifier.verify_jwt(response_token)
        except SdkError as e:
            logger.warning(f"Share response from {decoded.issuer_did} rejected: {e}")
            return CredentialShareResponseOutput(
                is_valid=False,
                did=decoded.issuer_did,
                nonce=decoded.nonce,
                errors=[str(e)],
            )

        errors = list(verify_interaction_claims(response, expected_type=InteractionType.CREDENTIAL_RESPONSE.value).errors)
        requirements: List[str] = []
        if request_token:
            request = from_jwt(request_token)
            requirements = requested_types(request)
            try:
                await self.verifier.verify_jwt(request_token)
            except SdkError as e:
                errors.append(f"request: {e}")
            errors.extend(
                verify_interaction_claims(
                    response,
                    expected_audience=request.issuer,
                    expected_nonce=request.nonce,
                ).errors
            )

        did = response.issuer_did
        credentials = list(response.interaction.get("suppliedCredentials") or [])
        for position, credential in enumerate(credentials):
            label = credential_label(credential, position)
            errors.extend(await self.verifier.validate_credential(credential, position))
            if should_own:
                subject = credential_subject_did(credential) if isinstance(credential, dict) else None
                if subject != did:
                    errors.append(f"{label}: credential subject {subject} is not the responder {did}")
            if requirements and isinstance(credential, dict):
                if credential_specific_type(credential) not in requirements:
                    errors.append(f"{label}: credential type was not requested")
            if self.revocation_checker is not None and isinstance(credential, dict):
                errors.extend(await self.revocation_checker.check(credential, position))

        if errors:
            logger.warning(f"Share response from {did} rejected: {errors}")
        return CredentialShareResponseOutput(
            is_valid=not errors,
            did=did,
            nonce=response.nonce,
            supplied_credentials=credentials,
            errors=errors,
        )

    async def verify_presentation_challenge(self, challenge: str, did: str) -> InteractionToken:
        """Check that ``challenge`` is signed by ``did`` and still fresh."""
        try:
            token = await self.verifier.verify_jwt(challenge)
        except SdkError as e:
            raise ChallengeError(f"Presentation challenge is invalid: {e.message}", cause=e) from e
        if token.issuer_did != did:
            raise ChallengeError(
                "Presentation challenge was not issued by this verifier",
                context={"issuer": token.issuer_did, "expected": did},
            )
        return token


__all__ = [
    "HolderService",
    "filter_credentials",
    "requested_types",
]
