"""
Provider interfaces and data contracts.

All providers implement one of two protocols:
- PriceProvider: BTC quote feeds in USD and EUR (CoinGecko, Binance).
- LedgerProvider: blockchain explorers returning balance + recent transactions
  (BlockCypher, Blockstream, mempool.space).

Data is returned via frozen dataclasses for immutability and type safety.
Amounts on the wire are integer satoshis; prices are Decimal.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Protocol, Tuple, runtime_checkable

SATS_PER_BTC = Decimal(100_000_000)

# tx_input_n sentinel used by explorers for "this address received funds".
INCOMING_INPUT_N = -1


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def to_decimal(x: Any) -> Optional[Decimal]:
    """Numeric JSON value (number or string) to Decimal; None if absent or not a number."""
    if x is None or isinstance(x, bool):
        return None
    try:
        return Decimal(str(x))
    except (InvalidOperation, ValueError):
        return None


class ProviderStatus(enum.Enum):
    """Health status of a data provider."""

    OK = "OK"
    DEGRADED = "DEGRADED"
    DOWN = "DOWN"


class Direction(enum.Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


class Provenance(enum.Enum):
    """Where the displayed wallet snapshot came from on the last cycle."""

    FRESH = "fresh"
    CACHED = "cached"


@dataclass(frozen=True)
class PriceSnapshot:
    """Immutable BTC quote. Always fully populated by exactly one provider."""

    btc_price_usd: Decimal
    btc_price_eur: Decimal
    price_change_percent_24h: Decimal
    provider_name: str = ""
    fetched_at_utc: str = ""

    def is_valid(self) -> bool:
        return (
            self.btc_price_usd is not None
            and self.btc_price_eur is not None
            and self.btc_price_usd > 0
            and self.btc_price_eur > 0
        )

    def price_for(self, currency: str) -> Decimal:
        return self.btc_price_eur if currency.upper() == "EUR" else self.btc_price_usd


@dataclass(frozen=True)
class Transaction:
    """One explorer transaction reference, normalized across providers."""

    confirmed_at: Optional[datetime]
    input_n: int
    value_sats: int
    tx_hash: Optional[str] = None

    @property
    def direction(self) -> Direction:
        return Direction.INCOMING if self.input_n == INCOMING_INPUT_N else Direction.OUTGOING

    @property
    def value_btc(self) -> Decimal:
        return Decimal(self.value_sats) / SATS_PER_BTC


@dataclass(frozen=True)
class WalletSnapshot:
    """
    Immutable balance + recent transactions for one address.

    Fiat values are not stored; they are derived at read time from the
    latest PriceSnapshot.
    """

    address: str
    balance_sats: int
    transactions: Tuple[Transaction, ...] = ()
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    provider_name: str = ""

    @property
    def balance_btc(self) -> Decimal:
        return Decimal(self.balance_sats) / SATS_PER_BTC

    def is_valid(self) -> bool:
        return self.balance_sats is not None and self.balance_sats >= 0


@dataclass
class ProviderHealth:
    """Mutable health state for a single provider instance."""

    provider_name: str
    status: ProviderStatus = ProviderStatus.OK
    last_ok_at: Optional[str] = None
    fail_count: int = 0
    last_error: Optional[str] = None

    def record_success(self) -> None:
        self.status = ProviderStatus.OK
        self.fail_count = 0
        self.last_ok_at = utc_now_iso()
        self.last_error = None

    def record_failure(self, error: str) -> None:
        self.fail_count += 1
        self.last_error = error[:500]
        if self.fail_count >= 5:
            self.status = ProviderStatus.DOWN
        elif self.fail_count >= 2:
            self.status = ProviderStatus.DEGRADED


@runtime_checkable
class PriceProvider(Protocol):
    """Protocol for BTC price providers."""

    @property
    def provider_name(self) -> str: ...

    def get_price(self) -> PriceSnapshot:
        """Fetch the current BTC price in USD and EUR plus the 24h change."""
        ...


@runtime_checkable
class LedgerProvider(Protocol):
    """Protocol for blockchain explorer providers."""

    @property
    def provider_name(self) -> str: ...

    def get_wallet(self, address: str) -> WalletSnapshot:
        """Fetch balance and most recent transactions for an address."""
        ...
