"""
Run one sync cycle and print the result.
Use: btc-wallet-sync refresh [--address ADDR] [--state PATH]
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from btc_wallet_sync.cli._common import add_common_args, print_display, setup_logging


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    ap = argparse.ArgumentParser(prog="btc-wallet-sync refresh", description="Fetch price and wallet once.")
    ap.add_argument("--address", default=None, help="BTC address (default: saved settings)")
    add_common_args(ap)
    args = ap.parse_args(argv)
    setup_logging(args.verbose)

    from btc_wallet_sync.engine import create_engine

    engine = create_engine(args.state)
    with engine:
        if args.address and not engine.apply_settings(
            engine.settings.with_changes(address=args.address), trigger=False
        ):
            print(engine.error, file=sys.stderr)
            return 2
        engine.refresh_now()
        print_display(engine.display())
    return 1 if engine.error else 0
