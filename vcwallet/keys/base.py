"""Wallet capability interface consumed by the protocol layer."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class WalletCapabilities(ABC):
    """Signing and encryption capability set of a wallet identity.

    Concrete wallets (local seed, hardware, platform keystores) implement
    this interface and are injected into the exchange, presentation and
    revocation components, which never depend on how keys are stored.
    """

    @property
    @abstractmethod
    def did(self) -> str:
        """DID of the wallet identity."""

    @property
    @abstractmethod
    def key_id(self) -> str:
        """Key id (``did#fragment``) of the current signing key."""

    @abstractmethod
    def sign_jwt(self, payload: Dict[str, Any], key_id: Optional[str] = None) -> str:
        """Sign ``payload`` as a compact JWT.

        With ``key_id`` the token's ``iss`` is the key id and the header
        carries ``kid``; without it ``iss`` is the bare DID.
        """

    @abstractmethod
    def sign_credential(self, unsigned_credential: Dict[str, Any]) -> Dict[str, Any]:
        """Return a signed copy of ``unsigned_credential``."""

    @abstractmethod
    def sign_presentation(
        self,
        unsigned_presentation: Dict[str, Any],
        *,
        challenge: str,
        domain: str,
    ) -> Dict[str, Any]:
        """Return a signed copy of ``unsigned_presentation`` bound to ``challenge``/``domain``."""

    @abstractmethod
    def encrypt_for_recipient(self, recipient_public_key: bytes, data: bytes) -> bytes:
        """Encrypt ``data`` for the holder of ``recipient_public_key``."""

    @abstractmethod
    def decrypt_own(self, data: bytes) -> bytes:
        """Decrypt data encrypted for this wallet."""


__all__ = ["WalletCapabilities"]
