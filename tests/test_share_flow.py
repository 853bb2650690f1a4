import pytest

from conftest import EMAIL_TYPE, PHONE_TYPE, issue, make_service
from vcwallet.errors import DecodeError, NoMatchingCredentialsError, ReplayProtectionError, ValidationError
from vcwallet.token.types import CredentialRequirement, InteractionType, JwtOptions

pytestmark = pytest.mark.asyncio

REQUIREMENTS = [{"type": EMAIL_TYPE}]


async def test_share_round_trip(issuer, holder, verifier):
    credential = issue(issuer, holder.did)
    request = await verifier.generate_credential_share_request_token(REQUIREMENTS, issuer.did)
    decoded = verifier.from_jwt(request)
    assert decoded.token_type == InteractionType.CREDENTIAL_REQUEST.value
    assert decoded.interaction["issuer"] == issuer.did
    assert verifier.get_credential_types(request) == ["EmailCredentialPersonV1"]

    response = await holder.create_credential_share_response_token(request, [credential])
    result = await verifier.verify_credential_share_response_token(response, request)
    assert result.is_valid, result.errors
    assert result.did == holder.did
    assert result.nonce == decoded.nonce
    assert result.supplied_credentials == [credential]


async def test_share_response_only_carries_requested_types(issuer, holder, verifier):
    email = issue(issuer, holder.did)
    phone = issue(issuer, holder.did, types=PHONE_TYPE, subject={"data": {"phone": "555"}})
    request = await verifier.generate_credential_share_request_token([CredentialRequirement(type=EMAIL_TYPE)])
    assert holder.get_share_credentials(request, [email, phone]) == [email]

    response = await holder.create_credential_share_response_token(request, [email, phone])
    supplied = holder.from_jwt(response).interaction["suppliedCredentials"]
    assert supplied == [email]


async def test_no_matching_credentials(issuer, holder, verifier):
    phone = issue(issuer, holder.did, types=PHONE_TYPE)
    request = await verifier.generate_credential_share_request_token(REQUIREMENTS)
    with pytest.raises(NoMatchingCredentialsError):
        await holder.create_credential_share_response_token(request, [phone])


async def test_structural_check_lists_every_bad_credential(issuer, holder, verifier):
    good = issue(issuer, holder.did)
    missing_date = dict(issue(issuer, holder.did), id="vc-no-date")
    del missing_date["issuanceDate"]
    also_missing = {"id": "vc-bare", "type": EMAIL_TYPE, "credentialSubject": {"id": holder.did}}
    request = await verifier.generate_credential_share_request_token(REQUIREMENTS)

    with pytest.raises(ValidationError) as exc:
        await holder.create_credential_share_response_token(request, [good, missing_date, also_missing])
    assert len(exc.value.errors) == 2
    assert any(e.startswith("vc-no-date:") for e in exc.value.errors)
    assert any(e.startswith("vc-bare:") for e in exc.value.errors)


async def test_did_auth(holder, verifier):
    request = await verifier.generate_did_auth_request(JwtOptions(audience_did=holder.did))
    assert verifier.get_credential_types(request) == []

    response = await holder.create_did_auth_response(request)
    assert holder.from_jwt(response).interaction["suppliedCredentials"] == []
    result = await verifier.verify_did_auth_response(response, request)
    assert result.is_valid, result.errors
    assert result.did == holder.did


async def test_did_auth_ignores_credential_types(issuer, holder, verifier):
    phone = issue(issuer, holder.did, types=PHONE_TYPE)
    request = await verifier.generate_credential_share_request_token([])
    response = await holder.create_credential_share_response_token(request, [phone])
    result = await verifier.verify_credential_share_response_token(response, request)
    assert result.is_valid, result.errors
    assert result.supplied_credentials == [phone]


async def test_ownership_check(issuer, holder, verifier):
    someone_else = make_service()
    credential = issue(issuer, someone_else.did)
    request = await verifier.generate_credential_share_request_token(REQUIREMENTS)
    response = await holder.create_credential_share_response_token(request, [credential])

    owned = await verifier.verify_credential_share_response_token(response, request, should_own=True)
    assert not owned.is_valid
    assert owned.errors

    not_owned = await verifier.verify_credential_share_response_token(response, request, should_own=False)
    assert not_owned.is_valid, not_owned.errors


async def test_tampered_credential_is_reported(issuer, holder, verifier):
    credential = issue(issuer, holder.did)
    credential["credentialSubject"]["data"]["email"] = "eve@example.com"
    request = await verifier.generate_credential_share_request_token(REQUIREMENTS)
    response = await holder.create_credential_share_response_token(request, [credential])
    result = await verifier.verify_credential_share_response_token(response, request)
    assert not result.is_valid
    assert any("invalid proof signature" in e for e in result.errors)


async def test_response_bound_to_request(issuer, holder, verifier):
    credential = issue(issuer, holder.did)
    request = await verifier.generate_credential_share_request_token(REQUIREMENTS)
    other_request = await verifier.generate_credential_share_request_token(REQUIREMENTS)
    response = await holder.create_credential_share_response_token(request, [credential])
    result = await verifier.verify_credential_share_response_token(response, other_request)
    assert not result.is_valid
    assert "nonce_mismatch" in result.errors


async def test_resolver_lookup(issuer, holder, verifier):
    credential = issue(issuer, holder.did)
    request = await verifier.generate_credential_share_request_token(REQUIREMENTS)
    requests = {verifier.from_jwt(request).nonce: request}
    response = await holder.create_credential_share_response_token(request, [credential])

    result = await verifier.verify_credential_share_response_token(response, requests.get)
    assert result.is_valid, result.errors

    async def lookup(nonce):
        return requests.get(nonce)

    result = await verifier.verify_credential_share_response_token(response, lookup)
    assert result.is_valid, result.errors


async def test_resolver_without_request_raises(issuer, holder, verifier):
    credential = issue(issuer, holder.did)
    request = await verifier.generate_credential_share_request_token(REQUIREMENTS)
    response = await holder.create_credential_share_response_token(request, [credential])

    with pytest.raises(ReplayProtectionError):
        await verifier.verify_credential_share_response_token(response, lambda nonce: None)
    with pytest.raises(ReplayProtectionError):
        await verifier.verify_credential_share_response_token(response, lambda nonce: "not-a-token")


async def test_forged_response_is_invalid_not_raised(holder, verifier):
    request = await verifier.generate_did_auth_request()
    decoded = verifier.from_jwt(request)
    impostor = make_service()
    forged = impostor.wallet.sign_jwt(
        {
            "interactionToken": {"suppliedCredentials": []},
            "typ": InteractionType.CREDENTIAL_RESPONSE.value,
            "jti": decoded.nonce,
            "aud": decoded.issuer,
        },
        holder.wallet.key_id,
    )
    result = await verifier.verify_did_auth_response(forged, request)
    assert not result.is_valid
    assert result.errors


async def test_undecodable_response_raises(verifier):
    with pytest.raises(DecodeError):
        await verifier.verify_credential_share_response_token("garbage")
