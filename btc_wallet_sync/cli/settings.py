"""
Show or change saved settings. The address is validated before anything is saved.
Use: btc-wallet-sync settings [--address ADDR] [--currency USD|EUR] [--hide | --show] [--auto-refresh on|off]
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from btc_wallet_sync.cli._common import add_common_args, setup_logging
from btc_wallet_sync.store import CURRENCIES


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    ap = argparse.ArgumentParser(prog="btc-wallet-sync settings", description="Show or update settings.")
    ap.add_argument("--address", default=None)
    ap.add_argument("--currency", choices=CURRENCIES, default=None)
    vis = ap.add_mutually_exclusive_group()
    vis.add_argument("--hide", action="store_true", help="Mask balances in output")
    vis.add_argument("--show", action="store_true", help="Unmask balances")
    ap.add_argument("--auto-refresh", choices=("on", "off"), default=None)
    add_common_args(ap)
    args = ap.parse_args(argv)
    setup_logging(args.verbose)

    from btc_wallet_sync.engine import create_engine

    with create_engine(args.state) as engine:
        changes: Dict[str, Any] = {}
        if args.address is not None:
            changes["address"] = args.address
        if args.currency:
            changes["currency"] = args.currency
        if args.hide or args.show:
            changes["hide_values"] = bool(args.hide)
        if args.auto_refresh:
            changes["auto_refresh"] = args.auto_refresh == "on"
        if changes and not engine.apply_settings(engine.settings.with_changes(**changes), trigger=False):
            print(engine.error, file=sys.stderr)
            return 2
        for key, value in asdict(engine.settings).items():
            print(f"{key:<14}{value}")
    return 0
