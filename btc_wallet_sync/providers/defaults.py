"""
Default provider registry configuration.

Registers built-in providers and builds chains from config.yaml settings.
To add a new provider, register it here and add it to the priority list.
"""
from __future__ import annotations

import logging
from typing import List, Optional

import requests

from .. import config
from .chain import LedgerProviderChain, PriceProviderChain
from .ledger.blockcypher import BlockCypherLedgerProvider
from .ledger.esplora import EsploraLedgerProvider
from .price.binance import BinancePriceProvider
from .price.coingecko import CoinGeckoPriceProvider
from .registry import ProviderRegistry
from .resilience import BoundedRetryFetcher, RetryConfig

logger = logging.getLogger(__name__)


def create_fetcher(session: Optional[requests.Session] = None) -> BoundedRetryFetcher:
    """Fetcher with the configured retry budget (3 attempts, 1s apart by default)."""
    return BoundedRetryFetcher(
        session=session,
        retry_config=RetryConfig(
            attempts=config.retry_attempts(),
            delay_s=config.retry_delay_seconds(),
        ),
        timeout_s=config.http_timeout_seconds(),
    )


def create_default_registry(fetcher: Optional[BoundedRetryFetcher] = None) -> ProviderRegistry:
    """Create a registry with all built-in providers sharing one fetcher."""
    f = fetcher or create_fetcher()
    max_txs = config.max_transactions()
    registry = ProviderRegistry()
    registry.register_price(
        "coingecko", lambda: CoinGeckoPriceProvider(f, base_url=config.provider_url("coingecko"))
    )
    registry.register_price(
        "binance", lambda: BinancePriceProvider(f, base_url=config.provider_url("binance"))
    )
    registry.register_ledger(
        "blockcypher",
        lambda: BlockCypherLedgerProvider(
            f, base_url=config.provider_url("blockcypher"), max_transactions=max_txs
        ),
    )
    for name in ("blockstream", "mempool"):
        registry.register_ledger(
            name,
            lambda name=name: EsploraLedgerProvider(
                name, config.provider_url(name), fetcher=f, max_transactions=max_txs
            ),
        )
    return registry


def _priority(key: str) -> List[str]:
    return list(config.get_config()["providers"][key])


def create_price_chain(
    registry: Optional[ProviderRegistry] = None,
    priority: Optional[List[str]] = None,
) -> PriceProviderChain:
    """Build the price chain (CoinGecko -> Binance by default)."""
    reg = registry or create_default_registry()
    order = priority or _priority("price_priority")
    return PriceProviderChain(reg.build_price_chain(order))


def create_ledger_chain(
    registry: Optional[ProviderRegistry] = None,
    priority: Optional[List[str]] = None,
) -> LedgerProviderChain:
    """Build the ledger chain (BlockCypher -> Blockstream -> mempool.space by default)."""
    reg = registry or create_default_registry()
    order = priority or _priority("ledger_priority")
    return LedgerProviderChain(reg.build_ledger_chain(order))
