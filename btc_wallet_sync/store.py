"""
Local state persistence: settings and last-known snapshots in a SQLite key-value table.

The store is best-effort. A missing file, a corrupt database or an
undecodable record all read back as "no prior data" with a warning, never
as an error the caller has to handle.
"""
from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Generator, Optional, Union

from .providers.base import PriceSnapshot, Transaction, WalletSnapshot
from .providers.ledger.common import parse_timestamp

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"
PRICE_KEY = "price"
WALLET_KEY_PREFIX = "wallet:"

CURRENCIES = ("USD", "EUR")


@dataclass(frozen=True)
class Settings:
    address: str = ""
    hide_values: bool = False
    currency: str = "USD"
    auto_refresh: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        currency = str(data.get("currency", "USD")).upper()
        return cls(
            address=str(data.get("address") or ""),
            hide_values=bool(data.get("hide_values", False)),
            currency=currency if currency in CURRENCIES else "USD",
            auto_refresh=bool(data.get("auto_refresh", True)),
        )

    def with_changes(self, **changes: Any) -> "Settings":
        return replace(self, **changes)


@contextmanager
def sqlite_conn(db_path: Union[str, Path]) -> Generator[sqlite3.Connection, None, None]:
    """Yield a SQLite connection that is always closed on exit."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    try:
        yield conn
    finally:
        conn.close()


def price_to_dict(price: PriceSnapshot) -> Dict[str, Any]:
    return {
        "btc_price_usd": str(price.btc_price_usd),
        "btc_price_eur": str(price.btc_price_eur),
        "price_change_percent_24h": str(price.price_change_percent_24h),
        "provider_name": price.provider_name,
        "fetched_at_utc": price.fetched_at_utc,
    }


def price_from_dict(data: Dict[str, Any]) -> PriceSnapshot:
    return PriceSnapshot(
        btc_price_usd=Decimal(str(data["btc_price_usd"])),
        btc_price_eur=Decimal(str(data["btc_price_eur"])),
        price_change_percent_24h=Decimal(str(data.get("price_change_percent_24h", "0"))),
        provider_name=str(data.get("provider_name", "")),
        fetched_at_utc=str(data.get("fetched_at_utc", "")),
    )


def wallet_to_dict(snapshot: WalletSnapshot) -> Dict[str, Any]:
    return {
        "address": snapshot.address,
        "balance_sats": snapshot.balance_sats,
        "transactions": [
            {
                "confirmed_at": tx.confirmed_at.isoformat() if tx.confirmed_at else None,
                "input_n": tx.input_n,
                "value_sats": tx.value_sats,
                "tx_hash": tx.tx_hash,
            }
            for tx in snapshot.transactions
        ],
        "last_updated": snapshot.last_updated.isoformat(),
        "provider_name": snapshot.provider_name,
    }


def wallet_from_dict(data: Dict[str, Any]) -> WalletSnapshot:
    txs = tuple(
        Transaction(
            confirmed_at=parse_timestamp(t.get("confirmed_at")),
            input_n=int(t["input_n"]),
            value_sats=int(t["value_sats"]),
            tx_hash=t.get("tx_hash"),
        )
        for t in data.get("transactions") or []
    )
    return WalletSnapshot(
        address=str(data["address"]),
        balance_sats=int(data["balance_sats"]),
        transactions=txs,
        last_updated=parse_timestamp(data.get("last_updated")) or datetime.fromtimestamp(0, tz=timezone.utc),
        provider_name=str(data.get("provider_name", "")),
    )


class LocalStateStore:
    """Read/write settings and snapshots as JSON values keyed by name."""

    def __init__(self, db_path: Union[str, Path]) -> None:
        self._db_path = Path(db_path)

    @property
    def path(self) -> Path:
        return self._db_path

    def _ensure_table(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )

    def get_json(self, key: str) -> Optional[Any]:
        """Return the decoded value, or None when absent or unreadable."""
        if not self._db_path.exists():
            return None
        try:
            with sqlite_conn(self._db_path) as conn:
                self._ensure_table(conn)
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.DatabaseError as exc:
            logger.warning("state store %s unreadable, treating as empty: %s", self._db_path, exc)
            return None
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except (TypeError, ValueError) as exc:
            logger.warning("state key %s is corrupt, ignoring: %s", key, exc)
            return None

    def put_json(self, key: str, value: Any) -> bool:
        """Upsert a value. Returns False (and logs) if the store cannot be written."""
        now = datetime.now(timezone.utc).isoformat(timespec="seconds")
        try:
            with sqlite_conn(self._db_path) as conn:
                self._ensure_table(conn)
                conn.execute(
                    """
                    INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at;
                    """,
                    (key, json.dumps(value), now),
                )
                conn.commit()
        except sqlite3.DatabaseError as exc:
            logger.warning("could not write state key %s to %s: %s", key, self._db_path, exc)
            return False
        return True

    def load_settings(self) -> Settings:
        data = self.get_json(SETTINGS_KEY)
        if not isinstance(data, dict):
            return Settings()
        return Settings.from_dict(data)

    def save_settings(self, settings: Settings) -> bool:
        return self.put_json(SETTINGS_KEY, asdict(settings))

    def load_price(self) -> Optional[PriceSnapshot]:
        data = self.get_json(PRICE_KEY)
        if not isinstance(data, dict):
            return None
        try:
            return price_from_dict(data)
        except (KeyError, TypeError, ValueError, InvalidOperation) as exc:
            logger.warning("stored price is corrupt, ignoring: %s", exc)
            return None

    def save_price(self, price: PriceSnapshot) -> bool:
        return self.put_json(PRICE_KEY, price_to_dict(price))

    def load_wallet(self, address: str) -> Optional[WalletSnapshot]:
        data = self.get_json(WALLET_KEY_PREFIX + address)
        if not isinstance(data, dict):
            return None
        try:
            return wallet_from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("stored wallet for %s is corrupt, ignoring: %s", address, exc)
            return None

    def save_wallet(self, snapshot: WalletSnapshot) -> bool:
        return self.put_json(WALLET_KEY_PREFIX + snapshot.address, wallet_to_dict(snapshot))
