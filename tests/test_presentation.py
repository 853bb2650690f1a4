from datetime import datetime, timedelta, timezone

import pytest

from conftest import EMAIL_TYPE, PHONE_TYPE, issue, make_service
from vcwallet.errors import DecodeError, ValidationError
from vcwallet.token.types import JwtOptions

pytestmark = pytest.mark.asyncio

REQUIREMENTS = [{"type": EMAIL_TYPE}]


async def test_presentation_round_trip(issuer, holder, verifier):
    credential = issue(issuer, holder.did)
    challenge = await verifier.generate_presentation_challenge(REQUIREMENTS)
    decoded = verifier.from_jwt(challenge)
    assert decoded.issuer == verifier.did
    assert "kid" not in decoded.header

    vp = holder.create_presentation_from_challenge(challenge, [credential], "verifier.example")
    assert vp["holder"]["id"] == holder.did
    assert vp["proof"]["challenge"] == challenge
    assert vp["proof"]["domain"] == "verifier.example"

    result = await verifier.verify_presentation(vp)
    assert result.is_valid, result.errors
    assert result.did == holder.did
    assert result.challenge == challenge
    assert result.supplied_presentation["verifiableCredential"] == [credential]


async def test_unrequested_credentials_are_dropped(issuer, holder, verifier):
    email = issue(issuer, holder.did)
    phone = issue(issuer, holder.did, types=PHONE_TYPE)
    challenge = await verifier.generate_presentation_challenge(REQUIREMENTS)
    vp = holder.create_presentation_from_challenge(challenge, [email, phone], "verifier.example")
    assert vp["verifiableCredential"] == [email]


async def test_presentation_may_end_up_empty(issuer, holder, verifier):
    phone = issue(issuer, holder.did, types=PHONE_TYPE)
    challenge = await verifier.generate_presentation_challenge(REQUIREMENTS)
    vp = holder.create_presentation_from_challenge(challenge, [phone], "verifier.example")
    assert vp["verifiableCredential"] == []


async def test_challenge_from_another_verifier(issuer, holder, verifier):
    credential = issue(issuer, holder.did)
    other = make_service()
    challenge = await other.generate_presentation_challenge(REQUIREMENTS)
    vp = holder.create_presentation_from_challenge(challenge, [credential], "other.example")

    result = await verifier.verify_presentation(vp)
    assert not result.is_valid
    assert result.supplied_presentation == vp
    assert any("not issued by this verifier" in e for e in result.errors)

    assert (await other.verify_presentation(vp)).is_valid


async def test_expired_challenge(issuer, holder, verifier):
    credential = issue(issuer, holder.did)
    past = datetime.now(timezone.utc) - timedelta(minutes=1)
    challenge = await verifier.generate_presentation_challenge(REQUIREMENTS, options=JwtOptions(expires_at=past))
    vp = holder.create_presentation_from_challenge(challenge, [credential], "verifier.example")

    result = await verifier.verify_presentation(vp)
    assert not result.is_valid
    assert result.supplied_presentation == vp
    assert any("Presentation challenge is invalid" in e for e in result.errors)


async def test_tampered_presentation(issuer, holder, verifier):
    credential = issue(issuer, holder.did)
    challenge = await verifier.generate_presentation_challenge(REQUIREMENTS)
    vp = holder.create_presentation_from_challenge(challenge, [credential], "verifier.example")
    vp["holder"] = {"id": make_service().did}

    result = await verifier.verify_presentation(vp)
    assert not result.is_valid
    assert result.errors


async def test_structurally_invalid_presentation(verifier):
    result = await verifier.verify_presentation({"type": ["VerifiablePresentation"]})
    assert not result.is_valid
    assert "missing holder.id" in result.errors
    assert "missing proof" in result.errors


async def test_create_presentation_checks_input(holder):
    with pytest.raises(DecodeError):
        holder.create_presentation_from_challenge("garbage", [], "verifier.example")


async def test_create_presentation_rejects_malformed_credentials(holder, verifier):
    challenge = await verifier.generate_presentation_challenge(REQUIREMENTS)
    with pytest.raises(ValidationError):
        holder.create_presentation_from_challenge(challenge, [{"type": EMAIL_TYPE}], "verifier.example")


async def test_presentation_with_string_holder(issuer, holder, verifier):
    challenge = await verifier.generate_presentation_challenge(REQUIREMENTS)
    vp = {
        "type": ["VerifiablePresentation"],
        "holder": holder.did,
        "verifiableCredential": [],
        "proof": {"jws": "x", "challenge": challenge, "verificationMethod": holder.wallet.key_id},
    }
    result = await verifier.verify_presentation(vp)
    assert not result.is_valid
    assert "missing holder.id" in result.errors


@pytest.mark.parametrize("method", [None, 42, {"id": "did:key:zabc"}])
async def test_presentation_with_bad_verification_method(issuer, holder, verifier, method):
    credential = issue(issuer, holder.did)
    challenge = await verifier.generate_presentation_challenge(REQUIREMENTS)
    vp = holder.create_presentation_from_challenge(challenge, [credential], "verifier.example")
    vp["proof"]["verificationMethod"] = method

    result = await verifier.verify_presentation(vp)
    assert not result.is_valid
    assert "proof verificationMethod must be a string" in result.errors


async def test_presentation_with_malformed_credential_proof(issuer, holder, verifier):
    credential = issue(issuer, holder.did)
    challenge = await verifier.generate_presentation_challenge(REQUIREMENTS)
    vp = holder.create_presentation_from_challenge(challenge, [credential], "verifier.example")
    vp["verifiableCredential"][0]["proof"]["verificationMethod"] = ["did:key:zabc"]

    result = await verifier.verify_presentation(vp)
    assert not result.is_valid
    assert f"{credential['id']}: proof verificationMethod must be a string" in result.errors

    vp["type"] = 7
    result = await verifier.verify_presentation(vp)
    assert "type must include VerifiablePresentation" in result.errors
