import pytest

from vcwallet.keys.verifier import DidVerifier
from vcwallet.keys.wallet import LocalWallet
from vcwallet.revocation.store import MemoryRevocationStore
from vcwallet.service import WalletService
from vcwallet.services.local import LocalIssuerApi, LocalVerifierApi
from vcwallet.vc import build_vc_unsigned

EMAIL_TYPE = ["VerifiableCredential", "EmailCredentialPersonV1"]
PHONE_TYPE = ["VerifiableCredential", "PhoneCredentialPersonV1"]


def make_service(wallet=None, store=None, check_revocation=False):
    wallet = wallet or LocalWallet.generate()
    return WalletService(
        wallet,
        issuer_api=LocalIssuerApi(DidVerifier()),
        verifier_api=LocalVerifierApi(),
        revocation_store=store or MemoryRevocationStore(list_size=16),
        check_revocation=check_revocation,
    )


def issue(issuer_service, holder_did, types=EMAIL_TYPE, subject=None, **kwargs):
    unsigned = build_vc_unsigned(
        credential_subject=dict(subject or {"data": {"email": "jane@example.com"}}, id=holder_did),
        holder_did=holder_did,
        types=types,
        **kwargs,
    )
    return issuer_service.wallet.sign_credential(unsigned)


@pytest.fixture
def store():
    return MemoryRevocationStore(list_size=16)


@pytest.fixture
def issuer(store):
    return make_service(store=store)


@pytest.fixture
def holder():
    return make_service()


@pytest.fixture
def verifier():
    return make_service()
