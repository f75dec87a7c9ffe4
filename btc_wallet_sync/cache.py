"""
Per-address freshness cache for wallet snapshots.

An entry is usable only while younger than the TTL and only if it was stored
fully initialized: a balance plus a price snapshot with both USD and EUR.
The cache sits in front of the ledger chain; prices are never served from it.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .providers.base import PriceSnapshot, WalletSnapshot

logger = logging.getLogger(__name__)

DEFAULT_TTL_S = 300.0


@dataclass(frozen=True)
class CacheEntry:
    address: str
    snapshot: WalletSnapshot
    price: Optional[PriceSnapshot]
    fetched_at: float

    def is_complete(self) -> bool:
        return (
            self.snapshot is not None
            and self.snapshot.balance_sats is not None
            and self.price is not None
            and self.price.btc_price_usd is not None
            and self.price.btc_price_eur is not None
        )


class FreshnessCache:
    """Thread-safe TTL cache of the last WalletSnapshot per address."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_s = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_s

    def get(self, address: str) -> Optional[CacheEntry]:
        """Return the entry if fresh and complete, else None (a miss)."""
        with self._lock:
            entry = self._entries.get(address)
        if entry is None:
            return None
        age = self._clock() - entry.fetched_at
        if age >= self._ttl_s:
            logger.debug("cache stale for %s (age %.1fs >= ttl %.1fs)", address, age, self._ttl_s)
            return None
        if not entry.is_complete():
            logger.debug("cache entry for %s incomplete, ignoring", address)
            return None
        return entry

    def put(self, address: str, snapshot: WalletSnapshot, price: Optional[PriceSnapshot]) -> CacheEntry:
        entry = CacheEntry(address=address, snapshot=snapshot, price=price, fetched_at=self._clock())
        with self._lock:
            self._entries[address] = entry
        return entry

    def invalidate(self, address: Optional[str] = None) -> None:
        """Drop one address, or everything when address is None."""
        with self._lock:
            if address is None:
                self._entries.clear()
            else:
                self._entries.pop(address, None)

    def __contains__(self, address: str) -> bool:
        return self.get(address) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
