"""
Convert a sats amount to USD and EUR at the current price.
Use: btc-wallet-sync convert 100,000
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from btc_wallet_sync.cli._common import add_common_args, setup_logging


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    ap = argparse.ArgumentParser(prog="btc-wallet-sync convert", description="Sats to fiat converter.")
    ap.add_argument("sats", help="Amount in sats; thousands separators allowed")
    add_common_args(ap)
    args = ap.parse_args(argv)
    setup_logging(args.verbose)

    from btc_wallet_sync.engine import create_engine

    with create_engine(args.state) as engine:
        engine.refresh_price()
        if engine.price is None:
            print(engine.error or "no price available", file=sys.stderr)
            return 1
        conv = engine.set_sats_input(args.sats)
    if conv.is_empty:
        print(f"not a valid sats amount: {args.sats!r}", file=sys.stderr)
        return 2
    print(f"${conv.usd}  /  €{conv.eur}")
    return 0
