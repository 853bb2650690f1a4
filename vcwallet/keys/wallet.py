"""
Local seed-backed wallet.

Implements ``WalletCapabilities`` on top of a 32-byte seed:

- Ed25519 signing key (the seed itself), exposed as a ``did:key`` identity
- X25519 encryption key derived from the seed with HKDF
- password-encrypted seed storage (scrypt + AES-GCM, hex encoded)
"""

import logging
import os
import time
from typing import Any, Dict, Optional

import jwt
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey, X25519PublicKey
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from ..errors import DecodeError, ValidationError
from ..vc import utc_now_iso
from .base import WalletCapabilities
from .did import did_from_public_key, key_id_for
from .proof import PROOF_TYPE, create_detached_jws

logger = logging.getLogger(__name__)

SEED_LENGTH = 32
_SALT_LENGTH = 16
_NONCE_LENGTH = 12
_X25519_INFO = b"vcwallet-x25519-encryption-key"
_ECIES_INFO = b"vcwallet-ecies-aes256gcm"


def _derive_password_key(password: str, salt: bytes) -> bytes:
    kdf = Scrypt(salt=salt, length=32, n=2**14, r=8, p=1)
    return kdf.derive(password.encode("utf-8"))


def _hkdf(material: bytes, info: bytes) -> bytes:
    return HKDF(algorithm=hashes.SHA256(), length=32, salt=None, info=info).derive(material)


class LocalWallet(WalletCapabilities):
    """Wallet holding its seed in process memory."""

    def __init__(self, seed: bytes):
        if not isinstance(seed, (bytes, bytearray)) or len(seed) != SEED_LENGTH:
            raise ValidationError(f"Seed must be {SEED_LENGTH} bytes")
        self._private_key = Ed25519PrivateKey.from_private_bytes(bytes(seed))
        self._encryption_key = X25519PrivateKey.from_private_bytes(_hkdf(bytes(seed), _X25519_INFO))
        self._did = did_from_public_key(self._private_key.public_key())
        self._key_id = key_id_for(self._did)

    # Seed management

    @staticmethod
    def generate_seed() -> bytes:
        return os.urandom(SEED_LENGTH)

    @staticmethod
    def encrypt_seed(seed: bytes, password: str) -> str:
        """Encrypt ``seed`` with ``password``; returns hex(salt | nonce | ciphertext)."""
        if not password:
            raise ValidationError("Password is required to encrypt a seed")
        salt = os.urandom(_SALT_LENGTH)
        nonce = os.urandom(_NONCE_LENGTH)
        ciphertext = AESGCM(_derive_password_key(password, salt)).encrypt(nonce, bytes(seed), None)
        return (salt + nonce + ciphertext).hex()

    @staticmethod
    def decrypt_seed(encrypted_seed: str, password: str) -> bytes:
        try:
            blob = bytes.fromhex(encrypted_seed)
        except (TypeError, ValueError) as e:
            raise ValidationError("Encrypted seed is not valid hex", cause=e) from e
        salt = blob[:_SALT_LENGTH]
        nonce = blob[_SALT_LENGTH:_SALT_LENGTH + _NONCE_LENGTH]
        ciphertext = blob[_SALT_LENGTH + _NONCE_LENGTH:]
        try:
            return AESGCM(_derive_password_key(password, salt)).decrypt(nonce, ciphertext, None)
        except (InvalidTag, ValueError) as e:
            raise ValidationError("Unable to decrypt seed: wrong password or corrupted seed", cause=e) from e

    @classmethod
    def generate(cls) -> "LocalWallet":
        return cls(cls.generate_seed())

    @classmethod
    def from_encrypted_seed(cls, encrypted_seed: str, password: str) -> "LocalWallet":
        if not password or not encrypted_seed:
            raise ValidationError("`password` and `encrypted_seed` must be provided")
        return cls(cls.decrypt_seed(encrypted_seed, password))

    # Identity

    @property
    def did(self) -> str:
        return self._did

    @property
    def key_id(self) -> str:
        return self._key_id

    @property
    def public_key(self) -> Ed25519PublicKey:
        return self._private_key.public_key()

    @property
    def encryption_public_key(self) -> bytes:
        """Raw X25519 public key other wallets encrypt to."""
        return self._encryption_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    # Signing

    def sign_jwt(self, payload: Dict[str, Any], key_id: Optional[str] = None) -> str:
        claims = dict(payload)
        claims["iss"] = key_id or self._did
        claims.setdefault("iat", int(time.time()))
        headers = {"kid": key_id} if key_id else None
        token = jwt.encode(claims, self._private_key, algorithm="EdDSA", headers=headers)
        logger.debug(f"Signed {claims.get('typ', 'jwt')} token jti={claims.get('jti')}")
        return token

    def sign_credential(self, unsigned_credential: Dict[str, Any]) -> Dict[str, Any]:
        document = {k: v for k, v in unsigned_credential.items() if k != "proof"}
        document.setdefault("issuer", self._did)
        proof = {
            "type": PROOF_TYPE,
            "created": utc_now_iso(),
            "verificationMethod": self._key_id,
            "proofPurpose": "assertionMethod",
        }
        proof["jws"] = create_detached_jws(self._private_key, document, proof)
        document["proof"] = proof
        return document

    def sign_presentation(
        self,
        unsigned_presentation: Dict[str, Any],
        *,
        challenge: str,
        domain: str,
    ) -> Dict[str, Any]:
        document = {k: v for k, v in unsigned_presentation.items() if k != "proof"}
        proof = {
            "type": PROOF_TYPE,
            "created": utc_now_iso(),
            "verificationMethod": self._key_id,
            "proofPurpose": "authentication",
            "challenge": challenge,
            "domain": domain,
        }
        proof["jws"] = create_detached_jws(self._private_key, document, proof)
        document["proof"] = proof
        return document

    # Encryption

    def encrypt_for_recipient(self, recipient_public_key: bytes, data: bytes) -> bytes:
        """ECIES: ephemeral X25519 | nonce | AES-GCM ciphertext."""
        ephemeral = X25519PrivateKey.generate()
        shared = ephemeral.exchange(X25519PublicKey.from_public_bytes(recipient_public_key))
        ephemeral_public = ephemeral.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        nonce = os.urandom(_NONCE_LENGTH)
        ciphertext = AESGCM(_hkdf(shared, _ECIES_INFO)).encrypt(nonce, data, ephemeral_public)
        return ephemeral_public + nonce + ciphertext

    def decrypt_own(self, data: bytes) -> bytes:
        ephemeral_public = data[:32]
        nonce = data[32:32 + _NONCE_LENGTH]
        ciphertext = data[32 + _NONCE_LENGTH:]
        try:
            shared = self._encryption_key.exchange(X25519PublicKey.from_public_bytes(ephemeral_public))
            return AESGCM(_hkdf(shared, _ECIES_INFO)).decrypt(nonce, ciphertext, ephemeral_public)
        except (InvalidTag, ValueError) as e:
            raise DecodeError("Unable to decrypt data for this wallet", cause=e) from e


__all__ = ["LocalWallet", "SEED_LENGTH"]
