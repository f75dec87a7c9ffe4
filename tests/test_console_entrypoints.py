"""Verify CLI modules expose main() and btc-wallet-sync --help works."""

from __future__ import annotations

import subprocess
import sys
from importlib import import_module

import pytest

from btc_wallet_sync.store import LocalStateStore

_CLI_MODULES = [
    "btc_wallet_sync.cli.refresh",
    "btc_wallet_sync.cli.watch",
    "btc_wallet_sync.cli.convert",
    "btc_wallet_sync.cli.settings",
]


@pytest.mark.parametrize("module_name", _CLI_MODULES)
def test_cli_module_has_main(module_name):
    mod = import_module(module_name)
    assert hasattr(mod, "main"), f"{module_name} missing main()"
    assert callable(mod.main), f"{module_name}.main not callable"


def test_cli_main_help_exits_zero():
    """cli.main.main(["--help"]) exits with 0 (in-process)."""
    from btc_wallet_sync.cli.main import main

    with pytest.raises(SystemExit) as exc_info:
        main(["--help"])
    assert exc_info.value.code == 0


def test_cli_main_no_command_prints_help(capsys):
    from btc_wallet_sync.cli.main import main

    assert main([]) == 0
    assert "refresh" in capsys.readouterr().out


def test_settings_command_rejects_invalid_address(tmp_path, capsys):
    """Invalid address is reported and nothing is saved (no network involved)."""
    from btc_wallet_sync.cli.main import main

    state = tmp_path / "state.sqlite"
    rc = main(["settings", "--address", "not-an-address", "--state", str(state)])

    assert rc == 2
    assert "Invalid BTC address format" in capsys.readouterr().err
    assert LocalStateStore(state).load_settings().address == ""


def test_settings_command_saves(tmp_path, capsys):
    from btc_wallet_sync.cli.main import main

    state = tmp_path / "state.sqlite"
    rc = main(
        [
            "settings",
            "--address", "1BoatSLRHtKNngkdXEeobR76b53LETtpyT",
            "--currency", "EUR",
            "--hide",
            "--auto-refresh", "off",
            "--state", str(state),
        ]
    )

    assert rc == 0
    saved = LocalStateStore(state).load_settings()
    assert saved.address == "1BoatSLRHtKNngkdXEeobR76b53LETtpyT"
    assert saved.currency == "EUR"
    assert saved.hide_values is True
    assert saved.auto_refresh is False
    assert "1BoatSLRHtKNngkdXEeobR76b53LETtpyT" in capsys.readouterr().out


def test_btc_wallet_sync_help_exits_zero():
    """python -m btc_wallet_sync --help exits 0 and lists commands (subprocess)."""
    r = subprocess.run(
        [sys.executable, "-m", "btc_wallet_sync", "--help"],
        capture_output=True,
        text=True,
        timeout=10,
    )
    assert r.returncode == 0, (r.stdout or "") + (r.stderr or "")
    out = (r.stdout or "") + (r.stderr or "")
    assert "convert" in out, "Help output should list 'convert' command"


def test_watch_without_address_exits_2(tmp_path, monkeypatch, capsys):
    from btc_wallet_sync.cli.main import main

    monkeypatch.delenv("BTC_WALLET_SYNC_ADDRESS", raising=False)
    rc = main(["watch", "--state", str(tmp_path / "state.sqlite")])

    assert rc == 2
    assert "no address configured" in capsys.readouterr().err
