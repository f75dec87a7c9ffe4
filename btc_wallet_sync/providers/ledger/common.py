"""
Normalization shared by every ledger provider.

Each explorer is first reduced to the BlockCypher-like shape
  {"balance": <sats>, "txrefs": [{"confirmed", "tx_input_n", "value", "tx_hash"}]}
and then turned into a WalletSnapshot here, so truncation and type checks
happen in exactly one place.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ...core.errors import ProviderResponseError
from ..base import Transaction, WalletSnapshot

DEFAULT_MAX_TRANSACTIONS = 5


def _to_int(x: Any) -> Optional[int]:
    if x is None or isinstance(x, bool):
        return None
    try:
        return int(x)
    except (TypeError, ValueError):
        return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO-8601 string (trailing Z allowed) or unix seconds -> aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        ts = datetime.fromisoformat(text)
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def normalize_txrefs(txrefs: Iterable[Dict[str, Any]], limit: int) -> List[Transaction]:
    """Keep provider order and take the first `limit` entries; no re-sorting."""
    out: List[Transaction] = []
    for ref in txrefs:
        if len(out) >= limit:
            break
        if not isinstance(ref, dict):
            continue
        value = _to_int(ref.get("value"))
        input_n = _to_int(ref.get("tx_input_n"))
        if value is None or input_n is None:
            continue
        out.append(
            Transaction(
                confirmed_at=parse_timestamp(ref.get("confirmed")),
                input_n=input_n,
                value_sats=value,
                tx_hash=ref.get("tx_hash"),
            )
        )
    return out


def build_wallet_snapshot(
    address: str,
    payload: Dict[str, Any],
    provider_name: str,
    max_transactions: int = DEFAULT_MAX_TRANSACTIONS,
) -> WalletSnapshot:
    balance = _to_int(payload.get("balance"))
    if balance is None:
        raise ProviderResponseError(f"{provider_name}: response missing integer balance")
    txrefs = payload.get("txrefs") or []
    if not isinstance(txrefs, list):
        raise ProviderResponseError(f"{provider_name}: txrefs is not a list")
    return WalletSnapshot(
        address=address,
        balance_sats=balance,
        transactions=tuple(normalize_txrefs(txrefs, max_transactions)),
        last_updated=datetime.now(timezone.utc),
        provider_name=provider_name,
    )
