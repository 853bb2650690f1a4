"""
Keys module initialization
"""

from .base import WalletCapabilities
from .did import (
    DID_KEY_PREFIX,
    DidResolver,
    DidKeyResolver,
    did_from_public_key,
    is_did,
    key_id_for,
)
from .verifier import DidVerifier, PresentationCheck
from .wallet import LocalWallet

__all__ = [
    # Wallet
    "WalletCapabilities",
    "LocalWallet",

    # DID
    "DID_KEY_PREFIX",
    "DidResolver",
    "DidKeyResolver",
    "did_from_public_key",
    "is_did",
    "key_id_for",

    # Verification
    "DidVerifier",
    "PresentationCheck",
]
