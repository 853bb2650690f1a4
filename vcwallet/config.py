"""
SDK configuration.

``SdkOptions`` resolves the service endpoints for a deployment environment
and carries the tunables of the exchange and revocation layers. Values can
be read from ``VCWALLET_*`` environment variables with ``from_environment``.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Mapping, Optional, TypeVar

from .errors import ValidationError
from .revocation.types import DEFAULT_LIST_SIZE
from .services.base import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

ENVIRONMENTS = ("dev", "staging", "prod")
DEFAULT_ENV = "staging"
SERVICE_URL_TEMPLATE = "https://affinity-{service}.{env}.affinity-project.org"

T = TypeVar("T")


def service_url(service: str, env: str) -> str:
    return SERVICE_URL_TEMPLATE.format(service=service, env=env)


@dataclass
class SdkOptions:
    """Configuration for the wallet service."""
    env: str = DEFAULT_ENV
    issuer_url: Optional[str] = None
    verifier_url: Optional[str] = None
    revocation_url: Optional[str] = None
    access_api_key: Optional[str] = None
    request_timeout: float = DEFAULT_TIMEOUT
    token_ttl: timedelta = field(default_factory=lambda: timedelta(minutes=30))

    # Revocation
    revocation_list_size: int = DEFAULT_LIST_SIZE
    revocation_list_base_url: Optional[str] = None
    redis_url: Optional[str] = None

    def __post_init__(self):
        if self.env not in ENVIRONMENTS:
            raise ValidationError(f"Unknown environment {self.env!r}; expected one of {', '.join(ENVIRONMENTS)}")
        self.issuer_url = self.issuer_url or service_url("issuer", self.env)
        self.verifier_url = self.verifier_url or service_url("verifier", self.env)
        self.revocation_url = self.revocation_url or service_url("revocation", self.env)
        if self.revocation_list_size <= 0:
            raise ValidationError("`revocation_list_size` must be positive")

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "SdkOptions":
        """Build options from ``VCWALLET_*`` variables; keyword overrides win."""
        environ = os.environ if environ is None else environ

        def read(name: str, convert: Callable[[str], T]) -> Optional[T]:
            raw = environ.get(f"VCWALLET_{name}")
            if raw is None or raw == "":
                return None
            try:
                return convert(raw)
            except ValueError as e:
                raise ValidationError(f"Invalid value for VCWALLET_{name}: {raw!r}", cause=e) from e

        values = {
            "env": read("ENV", str),
            "issuer_url": read("ISSUER_URL", str),
            "verifier_url": read("VERIFIER_URL", str),
            "revocation_url": read("REVOCATION_URL", str),
            "access_api_key": read("API_KEY", str),
            "request_timeout": read("TIMEOUT", float),
            "token_ttl": read("TOKEN_TTL_SECONDS", lambda v: timedelta(seconds=int(v))),
            "revocation_list_size": read("REVOCATION_LIST_SIZE", int),
            "revocation_list_base_url": read("REVOCATION_LIST_BASE_URL", str),
            "redis_url": read("REDIS_URL", str),
        }
        values = {k: v for k, v in values.items() if v is not None}
        values.update(overrides)
        options = cls(**values)
        logger.debug(f"Loaded SDK options for environment {options.env}")
        return options


__all__ = [
    "ENVIRONMENTS",
    "DEFAULT_ENV",
    "SdkOptions",
    "service_url",
]
