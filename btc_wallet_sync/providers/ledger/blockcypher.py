"""
BlockCypher ledger provider.

Uses the public BlockCypher API (no authentication required):
  GET https://api.blockcypher.com/v1/btc/main/addrs/{address}

The response already has the canonical {balance, txrefs} shape.
"""
from __future__ import annotations

from typing import Optional

from ...core.errors import ProviderResponseError
from ..base import WalletSnapshot
from ..resilience import BoundedRetryFetcher
from .common import DEFAULT_MAX_TRANSACTIONS, build_wallet_snapshot

BLOCKCYPHER_BASE_URL = "https://api.blockcypher.com/v1/btc/main"


class BlockCypherLedgerProvider:
    """Fetch address balance and txrefs from BlockCypher."""

    def __init__(
        self,
        fetcher: Optional[BoundedRetryFetcher] = None,
        base_url: str = BLOCKCYPHER_BASE_URL,
        max_transactions: int = DEFAULT_MAX_TRANSACTIONS,
    ) -> None:
        self._fetcher = fetcher or BoundedRetryFetcher()
        self._base_url = base_url.rstrip("/")
        self._max_transactions = max_transactions

    @property
    def provider_name(self) -> str:
        return "blockcypher"

    def get_wallet(self, address: str) -> WalletSnapshot:
        data = self._fetcher.fetch_json(f"{self._base_url}/addrs/{address}")
        if not isinstance(data, dict):
            raise ProviderResponseError(f"BlockCypher: unexpected response type {type(data).__name__}")
        if data.get("error"):
            raise ProviderResponseError(f"BlockCypher error: {data['error']}")
        return build_wallet_snapshot(address, data, self.provider_name, self._max_transactions)
