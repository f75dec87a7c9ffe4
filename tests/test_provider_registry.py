"""ProviderRegistry and the default chains built from config."""
from __future__ import annotations

import pytest

from btc_wallet_sync.providers.defaults import create_default_registry, create_ledger_chain, create_price_chain
from btc_wallet_sync.providers.registry import ProviderRegistry
from btc_wallet_sync.providers.resilience import BoundedRetryFetcher
from tests.fakes import FakeLedgerProvider, FakePriceProvider, FakeSession


class TestProviderRegistry:
    def test_register_instance_and_factory(self):
        reg = ProviderRegistry()
        instance = FakePriceProvider("a")
        reg.register_price("a", instance)
        reg.register_price("b", lambda: FakePriceProvider("b"))

        assert reg.get_price("a") is instance
        assert reg.get_price("b").provider_name == "b"
        assert reg.get_price("b") is reg.get_price("b")
        assert reg.price_names == ["a", "b"]

    def test_unknown_name_raises(self):
        with pytest.raises(KeyError, match="nope"):
            ProviderRegistry().get_ledger("nope")

    def test_priority_order_and_unknown_skipped(self):
        reg = ProviderRegistry()
        reg.register_ledger("x", FakeLedgerProvider("x"))
        reg.register_ledger("y", FakeLedgerProvider("y"))

        chain = reg.build_ledger_chain(["y", "missing", "x"])

        assert [p.provider_name for p in chain] == ["y", "x"]


class TestDefaults:
    def test_default_chains_follow_config_priority(self):
        reg = create_default_registry(BoundedRetryFetcher(session=FakeSession()))

        price = create_price_chain(reg)
        ledger = create_ledger_chain(reg)

        assert [p.provider_name for p in price.providers] == ["coingecko", "binance"]
        assert [p.provider_name for p in ledger.providers] == ["blockcypher", "blockstream", "mempool"]

    def test_custom_priority(self):
        reg = create_default_registry(BoundedRetryFetcher(session=FakeSession()))
        chain = create_ledger_chain(reg, priority=["mempool"])
        assert [p.provider_name for p in chain.providers] == ["mempool"]
