"""
Keep syncing on the periodic timer until interrupted.
Use: btc-wallet-sync watch [--address ADDR] [--mode fast|slow | --interval SECONDS]
"""

from __future__ import annotations

import argparse
import sys
import threading
from typing import List, Optional

from btc_wallet_sync.cli._common import add_common_args, print_display, setup_logging
from btc_wallet_sync.config import REFRESH_MODES


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    ap = argparse.ArgumentParser(prog="btc-wallet-sync watch", description="Auto-refresh until Ctrl+C.")
    ap.add_argument("--address", default=None, help="BTC address (default: saved settings)")
    ap.add_argument("--mode", choices=sorted(REFRESH_MODES), default=None, help="Named refresh period")
    ap.add_argument("--interval", type=float, default=None, help="Refresh period in seconds")
    add_common_args(ap)
    args = ap.parse_args(argv)
    setup_logging(args.verbose)

    from btc_wallet_sync.engine import create_engine

    interval = args.interval or (REFRESH_MODES[args.mode] if args.mode else None)
    engine = create_engine(args.state, interval_s=interval)
    engine.on_error(lambda msg: print(f"ERROR: {msg}", file=sys.stderr))
    stop = threading.Event()
    try:
        with engine:
            if not (args.address or engine.settings.address):
                print("no address configured; pass --address or save one with `settings`", file=sys.stderr)
                return 2
            # watch always runs on the timer, whatever the saved auto_refresh flag says.
            if not engine.start(args.address, auto_refresh=True):
                return 2
            print_display(engine.display())
            print(f"watching every {engine.scheduler.interval_s:.0f}s (Ctrl+C to stop)")
            while not stop.wait(engine.scheduler.interval_s):
                print_display(engine.display())
    except KeyboardInterrupt:
        pass
    return 0
