"""
Top-level CLI dispatcher: btc-wallet-sync <command> [args...].
All commands dispatch to modules in btc_wallet_sync.cli.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

COMMANDS = ("refresh", "watch", "convert", "settings")


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = argparse.ArgumentParser(
        prog="btc-wallet-sync",
        description="Bitcoin wallet + price sync CLI",
    )
    subparsers = parser.add_subparsers(dest="command", help="command")
    for name in COMMANDS:
        subparsers.add_parser(name, help=f"Run {name}", add_help=False)

    args, rest = parser.parse_known_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    cmd = args.command
    if cmd == "refresh":
        from btc_wallet_sync.cli import refresh as mod

        return mod.main(rest)
    if cmd == "watch":
        from btc_wallet_sync.cli import watch as mod

        return mod.main(rest)
    if cmd == "convert":
        from btc_wallet_sync.cli import convert as mod

        return mod.main(rest)
    if cmd == "settings":
        from btc_wallet_sync.cli import settings as mod

        return mod.main(rest)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
