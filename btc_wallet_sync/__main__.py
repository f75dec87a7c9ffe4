"""Allow python -m btc_wallet_sync to run the CLI."""
from __future__ import annotations

from btc_wallet_sync.cli.main import main

if __name__ == "__main__":
    raise SystemExit(main())
