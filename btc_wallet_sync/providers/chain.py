"""
Provider chains: ordered sequential fallback.

A chain tries providers in priority order and returns the first valid
result. Retries happen inside each provider's fetcher, so by the time a
provider raises here its budget is spent and the next one is tried at once.
Providers are never raced and partial results are never merged.

When every provider fails the chain raises ProviderExhausted carrying each
provider's message in order. Price and ledger chains share this policy.
"""
from __future__ import annotations

import logging
from typing import Dict, List

from ..core.errors import ProviderExhausted
from .base import (
    LedgerProvider,
    PriceProvider,
    PriceSnapshot,
    ProviderHealth,
    WalletSnapshot,
)

logger = logging.getLogger(__name__)


class PriceProviderChain:
    """
    Ordered chain of BTC price providers with sequential fallback.

    Health is tracked per provider for observability only; an unhealthy
    provider is still attempted on every cycle.
    """

    def __init__(self, providers: List[PriceProvider]) -> None:
        self._providers = list(providers)
        self._health: Dict[str, ProviderHealth] = {
            p.provider_name: ProviderHealth(provider_name=p.provider_name) for p in self._providers
        }

    @property
    def providers(self) -> List[PriceProvider]:
        return list(self._providers)

    def get_price(self) -> PriceSnapshot:
        errors: List[str] = []
        for provider in self._providers:
            name = provider.provider_name
            health = self._health[name]
            try:
                snapshot = provider.get_price()
            except Exception as exc:
                msg = f"{name}: {exc}"
                errors.append(msg)
                health.record_failure(str(exc))
                logger.warning("Price provider %s failed, trying next: %s", name, exc)
                continue
            if not snapshot.is_valid():
                msg = f"{name}: invalid quote (usd={snapshot.btc_price_usd}, eur={snapshot.btc_price_eur})"
                errors.append(msg)
                health.record_failure(msg)
                continue
            health.record_success()
            return snapshot

        logger.error("All price providers failed: %s", "; ".join(errors))
        raise ProviderExhausted("price", errors)

    def get_health(self) -> Dict[str, ProviderHealth]:
        """Return health status for all providers in the chain."""
        return dict(self._health)


class LedgerProviderChain:
    """
    Ordered chain of blockchain explorer providers with sequential fallback.
    """

    def __init__(self, providers: List[LedgerProvider]) -> None:
        self._providers = list(providers)
        self._health: Dict[str, ProviderHealth] = {
            p.provider_name: ProviderHealth(provider_name=p.provider_name) for p in self._providers
        }

    @property
    def providers(self) -> List[LedgerProvider]:
        return list(self._providers)

    def get_wallet(self, address: str) -> WalletSnapshot:
        errors: List[str] = []
        for provider in self._providers:
            name = provider.provider_name
            health = self._health[name]
            try:
                snapshot = provider.get_wallet(address)
            except Exception as exc:
                msg = f"{name}: {exc}"
                errors.append(msg)
                health.record_failure(str(exc))
                logger.warning("Ledger provider %s failed for %s, trying next: %s", name, address, exc)
                continue
            if not snapshot.is_valid():
                msg = f"{name}: invalid snapshot (balance={snapshot.balance_sats})"
                errors.append(msg)
                health.record_failure(msg)
                continue
            health.record_success()
            return snapshot

        logger.error("All ledger providers failed for %s: %s", address, "; ".join(errors))
        raise ProviderExhausted("ledger", errors)

    def get_health(self) -> Dict[str, ProviderHealth]:
        return dict(self._health)
