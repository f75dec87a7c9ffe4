"""
CoinGecko price provider.

Uses the public CoinGecko API (no authentication required):
  GET https://api.coingecko.com/api/v3/simple/price?ids=bitcoin&vs_currencies=usd,eur&include_24hr_change=true

One call returns USD, EUR and the USD 24h change.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ...core.errors import ProviderResponseError
from ..base import PriceSnapshot, to_decimal, utc_now_iso
from ..resilience import BoundedRetryFetcher

COINGECKO_BASE_URL = "https://api.coingecko.com/api/v3"
ASSET_ID = "bitcoin"


class CoinGeckoPriceProvider:
    """Fetch BTC quotes from the CoinGecko simple price endpoint."""

    def __init__(self, fetcher: Optional[BoundedRetryFetcher] = None, base_url: str = COINGECKO_BASE_URL) -> None:
        self._fetcher = fetcher or BoundedRetryFetcher()
        self._base_url = base_url.rstrip("/")

    @property
    def provider_name(self) -> str:
        return "coingecko"

    def get_price(self) -> PriceSnapshot:
        data = self._fetcher.fetch_json(
            f"{self._base_url}/simple/price",
            params={"ids": ASSET_ID, "vs_currencies": "usd,eur", "include_24hr_change": "true"},
        )
        quote = data.get(ASSET_ID) if isinstance(data, dict) else None
        if not isinstance(quote, dict):
            raise ProviderResponseError(f"CoinGecko response missing '{ASSET_ID}'")

        usd = to_decimal(quote.get("usd"))
        eur = to_decimal(quote.get("eur"))
        change = to_decimal(quote.get("usd_24h_change"))
        if usd is None or eur is None:
            raise ProviderResponseError("CoinGecko response missing usd/eur price")

        return PriceSnapshot(
            btc_price_usd=usd,
            btc_price_eur=eur,
            price_change_percent_24h=change if change is not None else Decimal(0),
            provider_name=self.provider_name,
            fetched_at_utc=utc_now_iso(),
        )
