"""BTC price providers (USD + EUR quotes with 24h change)."""
from __future__ import annotations

from .binance import BinancePriceProvider
from .coingecko import CoinGeckoPriceProvider

__all__ = ["BinancePriceProvider", "CoinGeckoPriceProvider"]
