"""
Services module initialization
"""

from .base import ApiService
from .issuer import IssuerApi, IssuerApiService
from .local import DEFAULT_TOKEN_TTL, LocalIssuerApi, LocalVerifierApi, build_interaction_payload
from .verifier import VerifierApi, VerifierApiService

__all__ = [
    # Interfaces
    "IssuerApi",
    "VerifierApi",

    # HTTP clients
    "ApiService",
    "IssuerApiService",
    "VerifierApiService",

    # In-process builders
    "DEFAULT_TOKEN_TTL",
    "LocalIssuerApi",
    "LocalVerifierApi",
    "build_interaction_payload",
]
