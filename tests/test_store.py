"""LocalStateStore: SQLite key-value persistence that never fails the caller."""
from __future__ import annotations

import sqlite3

from btc_wallet_sync.store import SETTINGS_KEY, LocalStateStore, Settings
from tests.fakes import TEST_ADDRESS, make_price, make_wallet


def test_missing_file_reads_as_defaults(tmp_path):
    store = LocalStateStore(tmp_path / "nested" / "state.sqlite")

    assert store.load_settings() == Settings()
    assert store.load_price() is None
    assert store.load_wallet(TEST_ADDRESS) is None
    assert not store.path.exists()


def test_settings_round_trip_creates_parent_dir(tmp_path):
    store = LocalStateStore(tmp_path / "nested" / "state.sqlite")
    settings = Settings(address=TEST_ADDRESS, hide_values=True, currency="EUR", auto_refresh=False)

    assert store.save_settings(settings) is True
    assert store.load_settings() == settings
    assert store.path.exists()


def test_snapshots_persisted_per_address(tmp_path):
    store = LocalStateStore(tmp_path / "state.sqlite")
    price = make_price()
    wallet = make_wallet()

    store.save_price(price)
    store.save_wallet(wallet)

    assert store.load_price() == price
    loaded = store.load_wallet(TEST_ADDRESS)
    assert loaded == wallet
    assert store.load_wallet("1BoatSLRHtKNngkdXEeobR76b53LETtpyT") is None


def test_overwrite_keeps_latest(tmp_path):
    store = LocalStateStore(tmp_path / "state.sqlite")
    store.save_price(make_price(usd="1"))
    store.save_price(make_price(usd="2"))
    assert str(store.load_price().btc_price_usd) == "2"


def test_corrupt_database_is_tolerated(tmp_path):
    path = tmp_path / "state.sqlite"
    path.write_bytes(b"garbage" * 200)
    store = LocalStateStore(path)

    assert store.load_settings() == Settings()
    assert store.load_price() is None
    assert store.save_settings(Settings(address=TEST_ADDRESS)) is False


def test_corrupt_record_is_tolerated(tmp_path):
    store = LocalStateStore(tmp_path / "state.sqlite")
    store.save_settings(Settings(address=TEST_ADDRESS))
    with sqlite3.connect(str(store.path)) as conn:
        conn.execute("UPDATE kv SET value = ? WHERE key = ?", ("{not json", SETTINGS_KEY))
    store.put_json("price", {"btc_price_usd": "nope"})

    assert store.load_settings() == Settings()
    assert store.load_price() is None


def test_settings_from_dict_normalizes():
    s = Settings.from_dict({"address": None, "currency": "gbp", "hide_values": 1})
    assert s == Settings(address="", hide_values=True, currency="USD", auto_refresh=True)
    assert Settings.from_dict({"currency": "eur"}).currency == "EUR"
