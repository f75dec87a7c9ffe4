"""Fake providers, HTTP session and clock for tests (no live network, no wall clock)."""

from .clock import FakeClock, FakeTimer
from .http import FakeSession, make_response
from .providers import (
    TEST_ADDRESS,
    FakeLedgerProvider,
    FakeLedgerProviderAlwaysFail,
    FakePriceProvider,
    FakePriceProviderAlwaysFail,
    FakePriceProviderFailNThenSucceed,
    make_price,
    make_wallet,
)

__all__ = [
    "FakeClock",
    "FakeTimer",
    "FakeSession",
    "make_response",
    "TEST_ADDRESS",
    "FakeLedgerProvider",
    "FakeLedgerProviderAlwaysFail",
    "FakePriceProvider",
    "FakePriceProviderAlwaysFail",
    "FakePriceProviderFailNThenSucceed",
    "make_price",
    "make_wallet",
]
