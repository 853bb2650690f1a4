"""
Session context and login control tokens.

A ``UserSession`` is passed explicitly to the components that call
authenticated backends; nothing is looked up from process-wide state.

Login control tokens (returned by a sign-up or sign-in start and handed back
on completion) are a tagged union serialized as base64url JSON, so any
username or password round-trips unchanged.
"""

import base64
import binascii
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Optional, Union

from .errors import DecodeError


@dataclass(frozen=True)
class UserSession:
    access_token: str
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.now(timezone.utc)) >= self.expires_at

    def authorization_header(self) -> Dict[str, str]:
        return {"Authorization": self.access_token}


@dataclass(frozen=True)
class PasswordSignupToken:
    kind: ClassVar[str] = "PasswordSignup"
    username: str
    password: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "username": self.username, "password": self.password}


@dataclass(frozen=True)
class ChallengeToken:
    kind: ClassVar[str] = "CognitoChallenge"
    session: str
    params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "session": self.session, "params": dict(self.params)}


LoginToken = Union[PasswordSignupToken, ChallengeToken]


def encode_login_token(token: LoginToken) -> str:
    raw = json.dumps(token.to_dict(), separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_login_token(value: str) -> LoginToken:
    """Parse a control token produced by ``encode_login_token``.

    Raises:
        DecodeError: if ``value`` is not a well-formed control token.
    """
    if not isinstance(value, str) or not value:
        raise DecodeError("Login token must be a non-empty string")
    padded = value + "=" * (-len(value) % 4)
    try:
        data = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise DecodeError("Login token is not base64url encoded JSON", cause=e) from e
    if not isinstance(data, dict):
        raise DecodeError("Login token payload is not an object")

    kind = data.get("kind")
    try:
        if kind == PasswordSignupToken.kind:
            return PasswordSignupToken(username=data["username"], password=data["password"])
        if kind == ChallengeToken.kind:
            return ChallengeToken(session=data["session"], params=dict(data.get("params") or {}))
    except KeyError as e:
        raise DecodeError(f"Login token of kind {kind} is missing {e.args[0]}", cause=e) from e
    raise DecodeError(f"Unknown login token kind: {kind}")


__all__ = [
    "UserSession",
    "PasswordSignupToken",
    "ChallengeToken",
    "LoginToken",
    "encode_login_token",
    "decode_login_token",
]
