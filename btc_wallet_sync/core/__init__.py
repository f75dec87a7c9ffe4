"""
Stable facade: error types only. No providers, store or cli.
Do not add exports without updating __all__.
"""

from __future__ import annotations

from .errors import (
    ParseError,
    ProviderExhausted,
    ProviderResponseError,
    TransportError,
    ValidationError,
    WalletSyncError,
)

# Do not add exports without updating __all__.
__all__ = [
    "WalletSyncError",
    "TransportError",
    "ProviderResponseError",
    "ProviderExhausted",
    "ParseError",
    "ValidationError",
]
