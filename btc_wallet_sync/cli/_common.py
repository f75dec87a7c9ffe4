"""Shared CLI helpers: logging setup and display printing."""
from __future__ import annotations

import argparse
import logging
from typing import Any, Dict


def add_common_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--state", default=None, help="State DB path (default: from config.yaml)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def print_display(view: Dict[str, Any]) -> None:
    print(f"Price     {view['price']} ({view['price_change_24h']})")
    print(f"Balance   {view['balance']}")
    print(f"Value     {view['value'] or '--'}")
    if view["synced_at"]:
        print(f"Synced    {view['synced_at']} [{view['provenance'] or 'stored'}]")
    for tx in view["transactions"]:
        arrow = "IN " if tx["direction"] == "incoming" else "OUT"
        print(f"  {tx['date']:<10} {arrow} {tx['sats']:>20} {tx['value']:>14}")
    if view["error"]:
        print(f"ERROR: {view['error']}")
