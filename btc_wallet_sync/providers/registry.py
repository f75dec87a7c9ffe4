"""
Provider registry: central catalog of available providers.

Providers register here by name. A priority list from config.yaml decides
which providers are tried in what order for each kind (price, ledger).
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Union

from .base import LedgerProvider, PriceProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Registry mapping provider names to factories or instances.

    Usage:
        registry = ProviderRegistry()
        registry.register_price("coingecko", CoinGeckoPriceProvider)
        registry.register_price("binance", BinancePriceProvider)

        providers = registry.build_price_chain(["coingecko", "binance"])
    """

    def __init__(self) -> None:
        self._price_factories: Dict[str, Any] = {}
        self._ledger_factories: Dict[str, Any] = {}
        self._price_instances: Dict[str, PriceProvider] = {}
        self._ledger_instances: Dict[str, LedgerProvider] = {}

    def register_price(
        self,
        name: str,
        factory: Union[Callable[[], PriceProvider], PriceProvider],
    ) -> None:
        """Register a price provider by name (zero-arg factory or instance)."""
        self._price_factories[name] = factory
        self._price_instances.pop(name, None)
        logger.debug("Registered price provider: %s", name)

    def register_ledger(
        self,
        name: str,
        factory: Union[Callable[[], LedgerProvider], LedgerProvider],
    ) -> None:
        """Register a ledger provider by name (zero-arg factory or instance)."""
        self._ledger_factories[name] = factory
        self._ledger_instances.pop(name, None)
        logger.debug("Registered ledger provider: %s", name)

    @staticmethod
    def _instantiate(factory: Any) -> Any:
        # Classes and plain callables are factories; anything with a provider_name is an instance.
        if isinstance(factory, type) or not hasattr(factory, "provider_name"):
            return factory()
        return factory

    def get_price(self, name: str) -> PriceProvider:
        """Get or instantiate a price provider by name."""
        if name not in self._price_instances:
            factory = self._price_factories.get(name)
            if factory is None:
                raise KeyError(
                    f"Unknown price provider '{name}'. "
                    f"Available: {list(self._price_factories)}"
                )
            self._price_instances[name] = self._instantiate(factory)
        return self._price_instances[name]

    def get_ledger(self, name: str) -> LedgerProvider:
        """Get or instantiate a ledger provider by name."""
        if name not in self._ledger_instances:
            factory = self._ledger_factories.get(name)
            if factory is None:
                raise KeyError(
                    f"Unknown ledger provider '{name}'. "
                    f"Available: {list(self._ledger_factories)}"
                )
            self._ledger_instances[name] = self._instantiate(factory)
        return self._ledger_instances[name]

    @property
    def price_names(self) -> List[str]:
        return list(self._price_factories)

    @property
    def ledger_names(self) -> List[str]:
        return list(self._ledger_factories)

    def build_price_chain(self, priority: Optional[List[str]] = None) -> List[PriceProvider]:
        """Build an ordered list of price providers from a priority list."""
        names = priority or list(self._price_factories)
        unknown = [n for n in names if n not in self._price_factories]
        if unknown:
            logger.warning("Ignoring unknown price providers in priority list: %s", unknown)
        return [self.get_price(n) for n in names if n in self._price_factories]

    def build_ledger_chain(self, priority: Optional[List[str]] = None) -> List[LedgerProvider]:
        """Build an ordered list of ledger providers from a priority list."""
        names = priority or list(self._ledger_factories)
        unknown = [n for n in names if n not in self._ledger_factories]
        if unknown:
            logger.warning("Ignoring unknown ledger providers in priority list: %s", unknown)
        return [self.get_ledger(n) for n in names if n in self._ledger_factories]
