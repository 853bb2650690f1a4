import pytest

from conftest import EMAIL_TYPE
from vcwallet import DecodeError, LocalWallet, SdkOptions, UserSession, create_service
from vcwallet.revocation.client import RevocationApiService
from vcwallet.revocation.redis import RedisRevocationStore
from vcwallet.revocation.store import MemoryRevocationStore
from vcwallet.services.issuer import IssuerApiService
from vcwallet.services.local import LocalIssuerApi
from vcwallet.services.verifier import VerifierApiService
from vcwallet.vc import build_vc_unsigned

pytestmark = pytest.mark.asyncio


async def test_local_service_end_to_end():
    issuer = create_service(local=True, options=SdkOptions(revocation_list_size=8))
    holder = create_service(local=True)
    verifier = create_service(local=True)
    assert isinstance(issuer.issuer_api, LocalIssuerApi)
    assert isinstance(issuer.revocation_store, MemoryRevocationStore)

    offer = await issuer.generate_credential_offer_request_token([{"type": EMAIL_TYPE}])
    offer_response = await holder.create_credential_offer_response_token(offer)
    assert (await issuer.verify_credential_offer_response_token(offer_response, offer)).is_valid

    unsigned = build_vc_unsigned(
        credential_subject={"id": holder.did, "data": {"email": "jane@example.com"}},
        holder_did=issuer.from_jwt(offer_response).issuer_did,
        types=EMAIL_TYPE,
    )
    revokable = await issuer.build_revocation_list_status(unsigned)
    credential = issuer.wallet.sign_credential(revokable)

    request = await verifier.generate_credential_share_request_token([{"type": EMAIL_TYPE}], issuer.did)
    share_response = await holder.create_credential_share_response_token(request, [credential])
    result = await verifier.verify_credential_share_response_token(share_response, request)
    assert result.is_valid, result.errors

    challenge = await verifier.generate_presentation_challenge([{"type": EMAIL_TYPE}])
    vp = holder.create_presentation_from_challenge(challenge, [credential], "verifier.example")
    assert (await verifier.verify_presentation(vp)).is_valid


async def test_remote_service_uses_http_clients():
    session = UserSession(access_token="session-token")
    wallet = LocalWallet.generate()
    service = create_service(wallet, options=SdkOptions(env="dev"), session=session)
    try:
        assert service.did == wallet.did
        assert isinstance(service.issuer_api, IssuerApiService)
        assert isinstance(service.verifier_api, VerifierApiService)
        assert isinstance(service.revocation_store, RevocationApiService)
        assert service.issuer_api.base_url == "https://affinity-issuer.dev.affinity-project.org"
        assert service.revocation.access_token == "session-token"
    finally:
        await service.close()


async def test_local_service_with_redis_url():
    options = SdkOptions(redis_url="redis://localhost:6379/15")
    async with create_service(local=True, options=options) as service:
        assert isinstance(service.revocation_store, RedisRevocationStore)
        assert service.revocation_store.url == "redis://localhost:6379/15"


async def test_from_jwt_is_static():
    wallet = LocalWallet.generate()
    token = wallet.sign_jwt({"typ": "credentialRequest", "jti": "n"})
    decoded = create_service(wallet, local=True).from_jwt(token)
    assert decoded.issuer == wallet.did
    with pytest.raises(DecodeError):
        create_service(local=True).from_jwt("")
