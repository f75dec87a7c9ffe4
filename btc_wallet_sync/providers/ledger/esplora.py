"""
Esplora ledger provider (Blockstream and mempool.space run the same API).

  GET {base}/address/{address}       -> chain_stats.funded_txo_sum / spent_txo_sum
  GET {base}/address/{address}/txs   -> newest-first transactions with vin/vout

Each transaction is reduced to one txref relative to the address: if the
address funded any input it is outgoing (tx_input_n=0) with the net amount
that left; otherwise incoming (tx_input_n=-1) with the amount received.
Unconfirmed transactions are skipped to match BlockCypher's txrefs.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ...core.errors import ProviderResponseError
from ..base import INCOMING_INPUT_N, WalletSnapshot
from ..resilience import BoundedRetryFetcher
from .common import DEFAULT_MAX_TRANSACTIONS, build_wallet_snapshot

logger = logging.getLogger(__name__)

BLOCKSTREAM_BASE_URL = "https://blockstream.info/api"
MEMPOOL_BASE_URL = "https://mempool.space/api"


def _sum_to_address(entries: List[Dict[str, Any]], address: str) -> int:
    total = 0
    for e in entries:
        if isinstance(e, dict) and e.get("scriptpubkey_address") == address:
            total += int(e.get("value") or 0)
    return total


def tx_to_txref(tx: Dict[str, Any], address: str) -> Optional[Dict[str, Any]]:
    """Reduce one Esplora transaction to a txref dict, or None if unconfirmed."""
    status = tx.get("status") or {}
    if not status.get("confirmed"):
        return None
    prevouts = [vin.get("prevout") or {} for vin in tx.get("vin") or [] if isinstance(vin, dict)]
    spent = _sum_to_address(prevouts, address)
    received = _sum_to_address(tx.get("vout") or [], address)
    if spent > 0:
        return {
            "confirmed": status.get("block_time"),
            "tx_input_n": 0,
            "value": max(spent - received, 0),
            "tx_hash": tx.get("txid"),
        }
    return {
        "confirmed": status.get("block_time"),
        "tx_input_n": INCOMING_INPUT_N,
        "value": received,
        "tx_hash": tx.get("txid"),
    }


class EsploraLedgerProvider:
    """Fetch balance and recent transactions from an Esplora-compatible explorer."""

    def __init__(
        self,
        name: str,
        base_url: str,
        fetcher: Optional[BoundedRetryFetcher] = None,
        max_transactions: int = DEFAULT_MAX_TRANSACTIONS,
    ) -> None:
        self._name = name
        self._base_url = base_url.rstrip("/")
        self._fetcher = fetcher or BoundedRetryFetcher()
        self._max_transactions = max_transactions

    @property
    def provider_name(self) -> str:
        return self._name

    def get_wallet(self, address: str) -> WalletSnapshot:
        info = self._fetcher.fetch_json(f"{self._base_url}/address/{address}")
        if not isinstance(info, dict) or not isinstance(info.get("chain_stats"), dict):
            raise ProviderResponseError(f"{self._name}: response missing chain_stats")
        stats = info["chain_stats"]
        try:
            balance = int(stats["funded_txo_sum"]) - int(stats["spent_txo_sum"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderResponseError(f"{self._name}: bad chain_stats: {exc}") from exc

        txs = self._fetcher.fetch_json(f"{self._base_url}/address/{address}/txs")
        if not isinstance(txs, list):
            raise ProviderResponseError(f"{self._name}: txs is not a list")

        txrefs = []
        for tx in txs:
            if not isinstance(tx, dict):
                continue
            ref = tx_to_txref(tx, address)
            if ref is not None:
                txrefs.append(ref)
            if len(txrefs) >= self._max_transactions:
                break
        logger.debug("%s: %d txs -> %d txrefs for %s", self._name, len(txs), len(txrefs), address)

        return build_wallet_snapshot(
            address,
            {"balance": balance, "txrefs": txrefs},
            self.provider_name,
            self._max_transactions,
        )
