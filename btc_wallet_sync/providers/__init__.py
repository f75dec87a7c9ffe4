"""
Provider architecture for BTC price and wallet ledger data.

Price and ledger sources are registered via a config-driven priority chain
with sequential fallback. Every HTTP request goes through a fixed-delay
bounded retry.
"""

from __future__ import annotations

from .base import (
    Direction,
    LedgerProvider,
    PriceProvider,
    PriceSnapshot,
    Provenance,
    ProviderHealth,
    ProviderStatus,
    Transaction,
    WalletSnapshot,
)
from .chain import LedgerProviderChain, PriceProviderChain
from .registry import ProviderRegistry
from .resilience import BoundedRetryFetcher, RetryConfig, retry_call

__all__ = [
    "PriceSnapshot",
    "WalletSnapshot",
    "Transaction",
    "Direction",
    "Provenance",
    "PriceProvider",
    "LedgerProvider",
    "ProviderHealth",
    "ProviderStatus",
    "ProviderRegistry",
    "PriceProviderChain",
    "LedgerProviderChain",
    "BoundedRetryFetcher",
    "RetryConfig",
    "retry_call",
]
