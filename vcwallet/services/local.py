"""
In-process interaction builders.

``LocalIssuerApi`` and ``LocalVerifierApi`` produce the same unsigned
payloads as the remote services, which lets a wallet run the exchange flows
without a backend (tests, embedded issuers, offline verifiers).
"""

import logging
import secrets
import time
from datetime import timedelta
from typing import Any, Dict, List, Optional

from ..errors import SdkError
from ..keys.verifier import DidVerifier
from ..token.types import CredentialRequirement, InteractionType, JwtOptions, OfferedCredential, specific_type_of
from ..token.verification import verify_interaction_claims
from .issuer import IssuerApi
from .verifier import VerifierApi

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL = timedelta(minutes=30)


def build_interaction_payload(
    interaction_type: InteractionType,
    interaction: Dict[str, Any],
    options: Optional[JwtOptions] = None,
    ttl: timedelta = DEFAULT_TOKEN_TTL,
) -> Dict[str, Any]:
    """Assemble an unsigned request payload with ``typ``/``jti``/``exp``/``aud``."""
    options = options or JwtOptions()
    body = dict(interaction)
    if options.callback_url:
        body["callbackURL"] = options.callback_url
    payload: Dict[str, Any] = {
        "interactionToken": body,
        "exp": options.expires_at_timestamp() or int(time.time() + ttl.total_seconds()),
        "typ": interaction_type.value,
        "jti": str(options.nonce) if options.nonce else secrets.token_hex(8),
    }
    if options.audience_did:
        payload["aud"] = options.audience_did
    return payload


class LocalIssuerApi(IssuerApi):
    def __init__(self, verifier: Optional[DidVerifier] = None, token_ttl: timedelta = DEFAULT_TOKEN_TTL):
        self.verifier = verifier or DidVerifier()
        self.token_ttl = token_ttl

    async def build_credential_offer(
        self,
        offered_credentials: List[OfferedCredential],
        options: Optional[JwtOptions] = None,
    ) -> Dict[str, Any]:
        return build_interaction_payload(
            InteractionType.CREDENTIAL_OFFER,
            {"offeredCredentials": [c.to_dict() for c in offered_credentials]},
            options,
            self.token_ttl,
        )

    async def verify_credential_offer_response(
        self,
        response_token: str,
        request_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        errors: List[str] = []
        try:
            response = await self.verifier.verify_jwt(response_token)
        except SdkError as e:
            logger.warning(f"Offer response rejected: {e}")
            return {"isValid": False, "issuer": None, "jti": None, "selectedCredentials": [], "errors": [str(e)]}

        outcome = verify_interaction_claims(response, expected_type=InteractionType.CREDENTIAL_OFFER_RESPONSE.value)
        errors.extend(outcome.errors)
        selected = response.interaction.get("selectedCredentials") or []
        if not isinstance(selected, list):
            errors.append("selected_credentials_malformed")
            selected = []
        malformed = [i for i, c in enumerate(selected) if not isinstance(c, dict) or not specific_type_of(c.get("type"))]
        errors.extend(f"selected_credential_malformed:{i}" for i in malformed)

        if request_token:
            try:
                request = await self.verifier.verify_jwt(request_token)
            except SdkError as e:
                errors.append(f"request: {e}")
            else:
                binding = verify_interaction_claims(
                    response,
                    expected_audience=request.issuer,
                    expected_nonce=request.nonce,
                )
                errors.extend(binding.errors)
                offered_credentials = request.interaction.get("offeredCredentials") or []
                offered = {
                    specific_type_of(c.get("type"))
                    for c in (offered_credentials if isinstance(offered_credentials, list) else [])
                    if isinstance(c, dict)
                }
                for position, credential in enumerate(selected):
                    if position in malformed:
                        continue
                    selected_type = specific_type_of(credential.get("type"))
                    if selected_type not in offered:
                        errors.append(f"selected_credential_not_offered:{selected_type}")

        if errors:
            logger.warning(f"Offer response from {response.issuer_did} rejected: {errors}")
        return {
            "isValid": not errors,
            "issuer": response.issuer,
            "jti": response.nonce,
            "selectedCredentials": selected,
            "errors": errors,
        }


class LocalVerifierApi(VerifierApi):
    def __init__(self, token_ttl: timedelta = DEFAULT_TOKEN_TTL):
        self.token_ttl = token_ttl

    async def build_credential_request(
        self,
        credential_requirements: List[CredentialRequirement],
        issuer_did: Optional[str] = None,
        options: Optional[JwtOptions] = None,
    ) -> Dict[str, Any]:
        interaction: Dict[str, Any] = {
            "credentialRequirements": [r.to_dict() for r in credential_requirements],
        }
        if issuer_did:
            interaction["issuer"] = issuer_did
        return build_interaction_payload(InteractionType.CREDENTIAL_REQUEST, interaction, options, self.token_ttl)


__all__ = [
    "DEFAULT_TOKEN_TTL",
    "build_interaction_payload",
    "LocalIssuerApi",
    "LocalVerifierApi",
]
