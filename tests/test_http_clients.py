import json

import httpx
import pytest

from vcwallet.errors import ExternalServiceError, RevocationStoreError
from vcwallet.keys.wallet import LocalWallet
from vcwallet.revocation.client import RevocationApiService
from vcwallet.revocation.manager import RevocationListManager
from vcwallet.revocation.types import CredentialStatusState
from vcwallet.services.issuer import IssuerApiService
from vcwallet.services.verifier import VerifierApiService
from vcwallet.token.types import CredentialRequirement, JwtOptions, OfferedCredential

pytestmark = pytest.mark.asyncio


class Recorder:
    def __init__(self, responses):
        self.responses = responses
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        canned = self.responses[request.url.path]
        return httpx.Response(canned.status_code, headers=canned.headers, content=canned.content)


async def test_issuer_client_builds_offer():
    payload = {"interactionToken": {"offeredCredentials": []}, "typ": "credentialOffer", "jti": "abc"}
    recorder = Recorder({"/api/v1/issuer/build-credential-offer": httpx.Response(200, json={"credentialOffer": payload})})
    async with IssuerApiService("https://issuer.test", api_key="key-1", transport=httpx.MockTransport(recorder)) as api:
        result = await api.build_credential_offer(
            [OfferedCredential(type="EmailCredentialPersonV1")],
            JwtOptions(audience_did="did:key:zaud", nonce="abc"),
        )
    assert result == payload

    request = recorder.requests[0]
    assert request.method == "POST"
    assert request.headers["Api-Key"] == "key-1"
    body = json.loads(request.content)
    assert body == {
        "offeredCredentials": [{"type": "EmailCredentialPersonV1"}],
        "audienceDid": "did:key:zaud",
        "nonce": "abc",
    }


async def test_verifier_client_requires_payload_key():
    recorder = Recorder({"/api/v1/verifier/build-credential-request": httpx.Response(200, json={"unexpected": 1})})
    async with VerifierApiService("https://verifier.test", transport=httpx.MockTransport(recorder)) as api:
        with pytest.raises(ExternalServiceError):
            await api.build_credential_request([CredentialRequirement(type=["Credential", "Email"])])
    body = json.loads(recorder.requests[0].content)
    assert body["credentialRequirements"] == [{"type": ["Credential", "Email"]}]


async def test_http_errors_are_wrapped():
    recorder = Recorder({"/api/v1/issuer/verify-credential-offer-response": httpx.Response(503, text="down")})
    async with IssuerApiService("https://issuer.test", transport=httpx.MockTransport(recorder)) as api:
        with pytest.raises(ExternalServiceError) as exc:
            await api.verify_credential_offer_response("response-token", "request-token")
    assert exc.value.status_code == 503
    assert isinstance(exc.value.cause, httpx.HTTPStatusError)


async def test_transport_errors_are_wrapped():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async with IssuerApiService("https://issuer.test", transport=httpx.MockTransport(handler)) as api:
        with pytest.raises(ExternalServiceError) as exc:
            await api.build_credential_offer([OfferedCredential(type="X")])
    assert isinstance(exc.value.cause, httpx.ConnectError)


async def test_revocation_client_operations():
    list_credential = {"id": "https://revocation.test/lists/1", "credentialSubject": {"encodedList": "x"}}
    credential_status = {
        "id": "https://revocation.test/lists/1#0",
        "type": "RevocationList2020Status",
        "revocationListIndex": "0",
        "revocationListCredential": "https://revocation.test/lists/1",
    }
    recorder = Recorder({
        "/api/v1/revocation/revocation-list-2020/credentials": httpx.Response(
            200,
            json={
                "credentialStatus": credential_status,
                "isPublishRequired": True,
                "revocationListCredential": list_credential,
            },
        ),
        "/api/v1/revocation/publish-revocation-list-credential": httpx.Response(200),
        "/api/v1/revocation/revoke-credentials": httpx.Response(200, json={"revocationListCredential": list_credential}),
        "/api/v1/revocation/revocation-list-2020/credentials/urn:uuid:cred-1": httpx.Response(
            200,
            json={
                "credentialId": "urn:uuid:cred-1",
                "revocationListCredential": "https://revocation.test/lists/1",
                "revocationListIndex": "0",
                "status": "revoked",
                "revocationReason": "compromised",
                "revokedAt": "2024-05-01T10:00:00Z",
            },
        ),
    })
    wallet = LocalWallet.generate()
    api = RevocationApiService("https://revocation.test", transport=httpx.MockTransport(recorder))
    manager = RevocationListManager(wallet, api, access_token="session-token")
    try:
        unsigned = {"@context": ["https://www.w3.org/2018/credentials/v1"], "id": "urn:uuid:cred-1", "credentialSubject": {"id": "did:key:zholder"}}
        revokable = await manager.build_revocation_list_status(unsigned)
        assert revokable["credentialStatus"] == credential_status

        build, publish = recorder.requests[:2]
        assert json.loads(build.content) == {"credentialId": "urn:uuid:cred-1", "subjectDid": "did:key:zholder"}
        assert build.headers["Authorization"] == "session-token"
        published = json.loads(publish.content)
        assert published["issuer"] == wallet.did
        assert published["proof"]["verificationMethod"] == wallet.key_id

        signed = await manager.revoke_credential("urn:uuid:cred-1", "compromised", access_token="other-token")
        assert signed["proof"]
        revoke = recorder.requests[2]
        assert json.loads(revoke.content) == {"id": "urn:uuid:cred-1", "revocationReason": "compromised"}
        assert revoke.headers["Authorization"] == "other-token"

        status = await manager.get_status("urn:uuid:cred-1")
        assert status.status == CredentialStatusState.REVOKED
        assert status.revoked_at is not None
    finally:
        await api.close()


async def test_revocation_client_errors_use_store_error():
    recorder = Recorder({"/api/v1/revocation/revoke-credentials": httpx.Response(409, json={"code": "already-revoked"})})
    async with RevocationApiService("https://revocation.test", transport=httpx.MockTransport(recorder)) as api:
        with pytest.raises(RevocationStoreError) as exc:
            await api.revoke_credential("urn:uuid:cred-1", "again")
    assert exc.value.status_code == 409
