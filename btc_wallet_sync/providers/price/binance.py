"""
Binance price provider.

Uses the public Binance ticker API (no authentication required):
  GET https://api.binance.com/api/v3/ticker/24hr?symbol=BTCUSDT
  GET https://api.binance.com/api/v3/ticker/24hr?symbol=BTCEUR

Both legs are requested concurrently and both must succeed. The 24h change
comes from the USD leg only.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Any, Dict, Optional

from ...core.errors import ProviderResponseError
from ..base import PriceSnapshot, to_decimal, utc_now_iso
from ..resilience import BoundedRetryFetcher

logger = logging.getLogger(__name__)

BINANCE_BASE_URL = "https://api.binance.com/api/v3"
USD_SYMBOL = "BTCUSDT"
EUR_SYMBOL = "BTCEUR"


class BinancePriceProvider:
    """Fetch BTC quotes from two Binance 24h tickers (USD and EUR pairs)."""

    def __init__(self, fetcher: Optional[BoundedRetryFetcher] = None, base_url: str = BINANCE_BASE_URL) -> None:
        self._fetcher = fetcher or BoundedRetryFetcher()
        self._base_url = base_url.rstrip("/")

    @property
    def provider_name(self) -> str:
        return "binance"

    def _ticker(self, symbol: str) -> Dict[str, Any]:
        data = self._fetcher.fetch_json(f"{self._base_url}/ticker/24hr", params={"symbol": symbol})
        if not isinstance(data, dict):
            raise ProviderResponseError(f"Binance {symbol}: unexpected response type {type(data).__name__}")
        return data

    def get_price(self) -> PriceSnapshot:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="binance") as executor:
            legs = {
                USD_SYMBOL: executor.submit(self._ticker, USD_SYMBOL),
                EUR_SYMBOL: executor.submit(self._ticker, EUR_SYMBOL),
            }
            tickers: Dict[str, Dict[str, Any]] = {}
            errors = []
            for symbol, future in legs.items():
                try:
                    tickers[symbol] = future.result()
                except Exception as exc:
                    errors.append(f"{symbol}: {exc}")

        if errors:
            # One failed leg fails the whole provider.
            raise ProviderResponseError("Binance ticker failed: " + ", ".join(errors))

        usd = to_decimal(tickers[USD_SYMBOL].get("lastPrice"))
        eur = to_decimal(tickers[EUR_SYMBOL].get("lastPrice"))
        change = to_decimal(tickers[USD_SYMBOL].get("priceChangePercent"))
        if usd is None or eur is None:
            raise ProviderResponseError("Binance ticker missing lastPrice")

        return PriceSnapshot(
            btc_price_usd=usd,
            btc_price_eur=eur,
            price_change_percent_24h=change if change is not None else Decimal(0),
            provider_name=self.provider_name,
            fetched_at_utc=utc_now_iso(),
        )
