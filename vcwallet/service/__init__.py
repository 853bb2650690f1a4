"""
Service package for vcwallet.

Provides the main wallet service entry point.
"""

from .service import WalletService, create_service

__all__ = [
    "WalletService",
    "create_service",
]
