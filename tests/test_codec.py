import jwt
import pytest

from vcwallet.errors import DecodeError
from vcwallet.keys.wallet import LocalWallet
from vcwallet.token.codec import decode_payload, from_jwt, get_did_from_token
from vcwallet.token.types import JwtOptions, OfferedCredential, key_id_to_did, specific_type_of


def test_from_jwt_preserves_payload():
    wallet = LocalWallet.generate()
    payload = {
        "interactionToken": {"offeredCredentials": [{"type": "EmailCredentialPersonV1"}]},
        "typ": "credentialOffer",
        "jti": "nonce-1",
        "exp": 4102444800,
    }
    token = wallet.sign_jwt(payload, wallet.key_id)
    decoded = from_jwt(token)
    for key, value in payload.items():
        assert decoded.payload[key] == value
    assert decoded.issuer == wallet.key_id
    assert decoded.issuer_did == wallet.did
    assert decoded.header["kid"] == wallet.key_id
    assert decoded.nonce == "nonce-1"
    assert decoded.token_type == "credentialOffer"
    assert decoded.interaction["offeredCredentials"][0]["type"] == "EmailCredentialPersonV1"
    assert not decoded.is_expired()


def test_from_jwt_does_not_check_signature_or_expiry():
    token = jwt.encode({"iss": "did:key:zabc", "exp": 1}, "secret", algorithm="HS256")
    decoded = from_jwt(token)
    assert decoded.is_expired()
    assert get_did_from_token(token) == "did:key:zabc"


@pytest.mark.parametrize("value", ["", "not-a-jwt", "a.b.c", None])
def test_from_jwt_rejects_malformed(value):
    with pytest.raises(DecodeError):
        from_jwt(value)


def test_get_did_from_token_requires_issuer():
    token = jwt.encode({"typ": "credentialOffer"}, "secret", algorithm="HS256")
    assert decode_payload(token)["typ"] == "credentialOffer"
    with pytest.raises(DecodeError):
        get_did_from_token(token)


def test_key_id_to_did():
    assert key_id_to_did("did:elem:abc#primary") == "did:elem:abc"
    assert key_id_to_did("did:elem:abc") == "did:elem:abc"
    assert key_id_to_did(None) is None


def test_specific_type_of():
    assert specific_type_of("EmailCredentialPersonV1") == "EmailCredentialPersonV1"
    assert specific_type_of(["Credential", "PhoneCredentialPersonV1"]) == "PhoneCredentialPersonV1"
    assert specific_type_of(["Credential"]) == "Credential"
    assert specific_type_of(None) is None
    assert OfferedCredential(type=["Credential", "X"]).specific_type == "X"


def test_jwt_options_params():
    options = JwtOptions(
        audience_did="did:key:zaud",
        expires_at="2100-01-01T00:00:00Z",
        nonce="n1",
        callback_url="https://example.com/cb",
    )
    params = options.to_params()
    assert params == {
        "audienceDid": "did:key:zaud",
        "expiresAt": 4102444800,
        "nonce": "n1",
        "callbackUrl": "https://example.com/cb",
    }
    assert JwtOptions().to_params() == {}
