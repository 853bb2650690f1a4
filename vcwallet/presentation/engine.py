"""
W3C Verifiable Presentation flow.

A verifier issues a presentation challenge (a share request signed with the
bare DID, without a key id). The holder wraps the requested credentials in a
presentation whose proof is bound to ``{challenge, domain}``. Verification
runs in two phases: the presentation and its credentials first, then the
embedded challenge, which must be signed by this verifier and still fresh.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from ..errors import ChallengeError
from ..exchange.holder import HolderService, requested_types
from ..exchange.types import PresentationValidationOutput
from ..exchange.validation import check_credentials, check_did, check_jwt_options, check_requirements, ensure_valid
from ..keys.base import WalletCapabilities
from ..keys.verifier import DidVerifier
from ..services.verifier import VerifierApi
from ..token.codec import from_jwt
from ..token.types import CredentialRequirement, JwtOptions
from ..vc import build_vp_unsigned, credential_label, credential_specific_type

logger = logging.getLogger(__name__)


class PresentationEngine:
    def __init__(
        self,
        wallet: WalletCapabilities,
        verifier_api: VerifierApi,
        holder: Optional[HolderService] = None,
        verifier: Optional[DidVerifier] = None,
    ):
        self.wallet = wallet
        self.verifier_api = verifier_api
        self.verifier = verifier or DidVerifier()
        self.holder = holder or HolderService(self.verifier)

    async def generate_presentation_challenge(
        self,
        credential_requirements: Sequence[Union[CredentialRequirement, Dict[str, Any]]],
        issuer_did: Optional[str] = None,
        options: Optional[JwtOptions] = None,
    ) -> str:
        requirements = [
            r if isinstance(r, CredentialRequirement) else CredentialRequirement.from_dict(r)
            for r in credential_requirements or []
        ]
        ensure_valid(check_requirements(requirements) + check_did(issuer_did, "issuer_did") + check_jwt_options(options))
        payload = await self.verifier_api.build_credential_request(requirements, issuer_did, options)
        challenge = self.wallet.sign_jwt(payload)
        logger.info(f"Generated presentation challenge {payload.get('jti')}")
        return challenge

    def create_presentation_from_challenge(
        self,
        challenge: str,
        credentials: Sequence[Dict[str, Any]],
        domain: str,
    ) -> Dict[str, Any]:
        """Wrap the requested credentials in a presentation signed for ``challenge``.

        Credentials whose specific type was not requested are left out.
        """
        token = from_jwt(challenge)
        ensure_valid(check_credentials(credentials), "Invalid credentials")
        requested = requested_types(token)
        kept = [vc for vc in credentials if credential_specific_type(vc) in requested]
        if len(kept) < len(credentials):
            logger.debug(f"Dropped {len(credentials) - len(kept)} credential(s) not requested by the challenge")
        unsigned = build_vp_unsigned(holder_did=self.wallet.did, credentials=kept)
        return self.wallet.sign_presentation(unsigned, challenge=challenge, domain=domain)

    async def verify_presentation(self, presentation: Dict[str, Any]) -> PresentationValidationOutput:
        check = await self.verifier.validate_presentation(presentation)
        if not check.result:
            return PresentationValidationOutput(
                is_valid=False,
                supplied_presentation=presentation,
                errors=list(check.errors),
            )

        data = check.data
        challenge = data["proof"]["challenge"]
        try:
            token = await self.holder.verify_presentation_challenge(challenge, self.wallet.did)
            requested = requested_types(token)
            not_requested: List[str] = [
                credential_label(vc, position)
                for position, vc in enumerate(data.get("verifiableCredential") or [])
                if requested and credential_specific_type(vc) not in requested
            ]
            if not_requested:
                raise ChallengeError(
                    f"Credentials not requested by the challenge: {', '.join(not_requested)}",
                    context={"requestedTypes": requested},
                )
        except ChallengeError as e:
            logger.warning(f"Presentation from {data['holder']['id']} failed the challenge check: {e}")
            return PresentationValidationOutput(
                is_valid=False,
                supplied_presentation=data,
                errors=[str(e)],
            )

        return PresentationValidationOutput(
            is_valid=True,
            did=data["holder"]["id"],
            challenge=challenge,
            supplied_presentation=data,
        )


__all__ = ["PresentationEngine"]
