from datetime import datetime, timedelta, timezone

from vcwallet.token.types import InteractionToken
from vcwallet.token.verification import verify_interaction_claims


def make_token(**overrides):
    now = datetime.now(timezone.utc)
    base = dict(
        iss="did:key:zissuer#zissuer",
        aud="did:key:zaudience",
        jti="nonce-1",
        typ="credentialResponse",
        iat=int((now - timedelta(minutes=1)).timestamp()),
        exp=int((now + timedelta(minutes=5)).timestamp()),
    )
    base.update(overrides)
    return InteractionToken(raw="", payload={k: v for k, v in base.items() if v is not None})


def test_verification_success():
    outcome = verify_interaction_claims(
        make_token(),
        expected_type="credentialResponse",
        expected_audience="did:key:zaudience",
        expected_nonce="nonce-1",
        expected_issuer="did:key:zissuer",
    )
    assert outcome.valid
    assert not outcome.errors


def test_expired():
    past = int((datetime.now(timezone.utc) - timedelta(minutes=10)).timestamp())
    outcome = verify_interaction_claims(make_token(exp=past))
    assert not outcome.valid
    assert "token_expired:credentialResponse" in outcome.errors


def test_expiry_within_clock_skew():
    past = int((datetime.now(timezone.utc) - timedelta(seconds=10)).timestamp())
    outcome = verify_interaction_claims(make_token(exp=past), clock_skew=timedelta(minutes=1))
    assert outcome.valid


def test_type_mismatch():
    outcome = verify_interaction_claims(make_token(), expected_type="credentialOfferResponse")
    assert not outcome.valid
    assert any(e.startswith("type_mismatch") for e in outcome.errors)


def test_audience_compared_at_did_level():
    token = make_token(aud="did:key:zaudience#primary")
    assert verify_interaction_claims(token, expected_audience="did:key:zaudience").valid
    outcome = verify_interaction_claims(token, expected_audience="did:key:zother")
    assert "audience_mismatch" in outcome.errors


def test_missing_audience_mismatches():
    outcome = verify_interaction_claims(make_token(aud=None), expected_audience="did:key:zaudience")
    assert "audience_mismatch" in outcome.errors


def test_nonce_and_issuer_mismatch():
    outcome = verify_interaction_claims(make_token(), expected_nonce="other", expected_issuer="did:key:zother")
    assert "nonce_mismatch" in outcome.errors
    assert "issuer_mismatch" in outcome.errors


def test_missing_jti_is_a_warning():
    outcome = verify_interaction_claims(make_token(jti=None))
    assert outcome.valid
    assert "missing_jti" in outcome.warnings
