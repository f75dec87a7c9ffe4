"""
Fake price and ledger providers for tests: deterministic data, fail-N-then-succeed, always-fail.

No live network; used by chain, engine and scheduler tests.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, List, Optional

from btc_wallet_sync.core.errors import TransportError
from btc_wallet_sync.providers.base import PriceSnapshot, Transaction, WalletSnapshot

# Deterministic timestamps for reproducible tests.
FAKE_FETCHED_AT = "2026-01-01T00:00:00+00:00"
FAKE_CONFIRMED_AT = datetime(2026, 1, 1, tzinfo=timezone.utc)

TEST_ADDRESS = "bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq"


def make_price(usd="50000", eur="46000", change="1.5", provider="fake") -> PriceSnapshot:
    return PriceSnapshot(
        btc_price_usd=Decimal(usd),
        btc_price_eur=Decimal(eur),
        price_change_percent_24h=Decimal(change),
        provider_name=provider,
        fetched_at_utc=FAKE_FETCHED_AT,
    )


def make_wallet(address: str = TEST_ADDRESS, balance_sats: int = 150_000_000, provider: str = "fake") -> WalletSnapshot:
    return WalletSnapshot(
        address=address,
        balance_sats=balance_sats,
        transactions=(
            Transaction(confirmed_at=FAKE_CONFIRMED_AT, input_n=-1, value_sats=100_000, tx_hash="aa"),
            Transaction(confirmed_at=FAKE_CONFIRMED_AT, input_n=0, value_sats=25_000, tx_hash="bb"),
        ),
        last_updated=FAKE_CONFIRMED_AT,
        provider_name=provider,
    )


# ---------------------------------------------------------------------------
# Price
# ---------------------------------------------------------------------------


class FakePriceProvider:
    """Price provider returning a fixed (or swappable) quote. No network."""

    def __init__(self, name: str, price: Optional[PriceSnapshot] = None, *, on_call: Optional[Callable[[], None]] = None):
        self._name = name
        self.price = price or make_price(provider=name)
        self.fail = False
        self.call_count = 0
        self._on_call = on_call

    @property
    def provider_name(self) -> str:
        return self._name

    def get_price(self) -> PriceSnapshot:
        self.call_count += 1
        if self._on_call is not None:
            self._on_call()
        if self.fail:
            raise TransportError(f"{self._name} is down")
        return self.price


class FakePriceProviderFailNThenSucceed(FakePriceProvider):
    """Fails the first N calls, then returns the quote."""

    def __init__(self, name: str, fail_times: int, price: Optional[PriceSnapshot] = None):
        super().__init__(name, price)
        self._fail_times = fail_times

    def get_price(self) -> PriceSnapshot:
        self.call_count += 1
        if self.call_count <= self._fail_times:
            raise TransportError(f"{self._name} simulated failure #{self.call_count}")
        return self.price


class FakePriceProviderAlwaysFail:
    def __init__(self, name: str = "fake_fail", message: Optional[str] = None):
        self._name = name
        self._message = message or f"{name} always fails"
        self.call_count = 0

    @property
    def provider_name(self) -> str:
        return self._name

    def get_price(self) -> PriceSnapshot:
        self.call_count += 1
        raise TransportError(self._message)


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


class FakeLedgerProvider:
    """Ledger provider returning a deterministic snapshot per address. No network."""

    def __init__(self, name: str, balance_sats: int = 150_000_000):
        self._name = name
        self.balance_sats = balance_sats
        self.fail = False
        self.call_count = 0
        self.addresses: List[str] = []

    @property
    def provider_name(self) -> str:
        return self._name

    def get_wallet(self, address: str) -> WalletSnapshot:
        self.call_count += 1
        self.addresses.append(address)
        if self.fail:
            raise TransportError(f"{self._name} is down")
        return make_wallet(address, self.balance_sats, provider=self._name)


class FakeLedgerProviderAlwaysFail:
    def __init__(self, name: str = "fake_ledger_fail"):
        self._name = name
        self.call_count = 0

    @property
    def provider_name(self) -> str:
        return self._name

    def get_wallet(self, address: str) -> WalletSnapshot:
        self.call_count += 1
        raise TransportError(f"{self._name} always fails")
