import pytest

from vcwallet.errors import DecodeError, DidResolutionError, ValidationError
from vcwallet.keys.did import DidKeyResolver, DidResolver, is_did, key_id_for
from vcwallet.keys.verifier import DidVerifier
from vcwallet.keys.wallet import LocalWallet
from vcwallet.vc import build_vc_unsigned, build_vp_unsigned


@pytest.mark.asyncio
async def test_did_key_identity_resolves_to_wallet_key():
    wallet = LocalWallet.generate()
    assert wallet.did.startswith("did:key:z")
    assert wallet.key_id == key_id_for(wallet.did)
    assert is_did(wallet.key_id)

    resolver = DidKeyResolver()
    public_key = await resolver.resolve_public_key(wallet.key_id)
    assert public_key.public_bytes_raw() == wallet.public_key.public_bytes_raw()

    document = await resolver.resolve(wallet.did)
    assert document["id"] == wallet.did
    assert document["assertionMethod"] == [wallet.key_id]


@pytest.mark.asyncio
async def test_resolver_rejects_other_methods():
    with pytest.raises(DidResolutionError):
        await DidKeyResolver().resolve_public_key("did:elem:EiAbc")


def test_resolver_must_implement_document_resolution():
    class KeyOnlyResolver(DidResolver):
        async def resolve_public_key(self, did_or_key_id):
            return LocalWallet.generate().public_key

    with pytest.raises(TypeError):
        KeyOnlyResolver()


def test_same_seed_same_identity():
    seed = LocalWallet.generate_seed()
    assert LocalWallet(seed).did == LocalWallet(seed).did
    assert LocalWallet(seed).encryption_public_key == LocalWallet(seed).encryption_public_key


def test_seed_length_is_checked():
    with pytest.raises(ValidationError):
        LocalWallet(b"short")


def test_encrypted_seed_round_trip():
    seed = LocalWallet.generate_seed()
    encrypted = LocalWallet.encrypt_seed(seed, "correct horse")
    wallet = LocalWallet.from_encrypted_seed(encrypted, "correct horse")
    assert wallet.did == LocalWallet(seed).did


def test_wrong_password_is_rejected():
    encrypted = LocalWallet.encrypt_seed(LocalWallet.generate_seed(), "correct horse")
    with pytest.raises(ValidationError):
        LocalWallet.from_encrypted_seed(encrypted, "battery staple")
    with pytest.raises(ValidationError):
        LocalWallet.from_encrypted_seed("zz-not-hex", "correct horse")
    with pytest.raises(ValidationError):
        LocalWallet.from_encrypted_seed(encrypted, "")


def test_encrypt_for_recipient():
    alice = LocalWallet.generate()
    bob = LocalWallet.generate()
    ciphertext = alice.encrypt_for_recipient(bob.encryption_public_key, b"hello bob")
    assert bob.decrypt_own(ciphertext) == b"hello bob"
    with pytest.raises(DecodeError):
        alice.decrypt_own(ciphertext)


@pytest.mark.asyncio
async def test_signed_credential_verifies():
    issuer = LocalWallet.generate()
    holder = LocalWallet.generate()
    unsigned = build_vc_unsigned(
        credential_subject={"id": holder.did, "data": {"name": "Jane"}},
        holder_did=holder.did,
        types=["VerifiableCredential", "NameCredentialPersonV1"],
    )
    signed = issuer.sign_credential(unsigned)
    assert signed["issuer"] == issuer.did
    assert signed["proof"]["verificationMethod"] == issuer.key_id
    assert await DidVerifier().validate_credential(signed) == []

    tampered = dict(signed, credentialSubject={"id": holder.did, "data": {"name": "Eve"}})
    errors = await DidVerifier().validate_credential(tampered)
    assert any("invalid proof signature" in e for e in errors)


@pytest.mark.asyncio
async def test_credential_signed_by_someone_else_is_rejected():
    issuer = LocalWallet.generate()
    impostor = LocalWallet.generate()
    unsigned = build_vc_unsigned(
        credential_subject={"id": "did:key:zholder"},
        holder_did="did:key:zholder",
        types=["VerifiableCredential", "NameCredentialPersonV1"],
    )
    signed = impostor.sign_credential(dict(unsigned, issuer=issuer.did))
    errors = await DidVerifier().validate_credential(signed)
    assert any("is not the issuer" in e for e in errors)


@pytest.mark.asyncio
async def test_presentation_proof_is_bound_to_challenge():
    holder = LocalWallet.generate()
    unsigned = build_vp_unsigned(holder_did=holder.did, credentials=[])
    signed = holder.sign_presentation(unsigned, challenge="challenge-token", domain="example.com")
    check = await DidVerifier().validate_presentation(signed)
    assert check.result, check.error

    swapped = dict(signed, proof=dict(signed["proof"], challenge="other-token"))
    check = await DidVerifier().validate_presentation(swapped)
    assert not check.result
    assert "invalid presentation proof signature" in check.errors


@pytest.mark.asyncio
async def test_verify_jwt_rejects_forged_signature():
    wallet = LocalWallet.generate()
    other = LocalWallet.generate()
    forged = other.sign_jwt({"typ": "credentialOffer", "jti": "n"}, wallet.key_id)
    with pytest.raises(ValidationError):
        await DidVerifier().verify_jwt(forged)
