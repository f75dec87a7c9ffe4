"""
Shared exception types for btc_wallet_sync.
Every failure the engine can observe maps to one of these; catch WalletSyncError for any of them.
"""

from __future__ import annotations

from typing import Optional, Sequence


class WalletSyncError(Exception):
    """Base exception for btc_wallet_sync; catch this for any package-raised error."""

    pass


class TransportError(WalletSyncError):
    """Network failure or non-2xx HTTP status. Retried locally by the fetcher."""

    def __init__(self, message: str, *, url: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ProviderResponseError(WalletSyncError):
    """Provider answered but the payload could not be normalized."""

    pass


class ProviderExhausted(WalletSyncError):
    """Every provider in a chain failed. Message carries each provider's reason, in order."""

    def __init__(self, kind: str, errors: Sequence[str]) -> None:
        self.kind = kind
        self.errors = list(errors)
        detail = "; ".join(self.errors) if self.errors else "no providers configured"
        super().__init__(f"All {kind} providers failed: {detail}")


class ParseError(WalletSyncError):
    """Malformed numeric input. Never surfaced to the user."""

    pass


class ValidationError(WalletSyncError):
    """Malformed user input (e.g. a BTC address). Blocks the action; never reaches the network."""

    pass


__all__ = [
    "WalletSyncError",
    "TransportError",
    "ProviderResponseError",
    "ProviderExhausted",
    "ParseError",
    "ValidationError",
]
