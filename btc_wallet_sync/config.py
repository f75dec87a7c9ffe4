"""
Load config from config.yaml with optional env overrides.
Single source of truth for refresh timing, retry budget, cache TTL, provider endpoints and state path.
"""
from __future__ import annotations

import os
from pathlib import Path

import yaml

# Periodic auto-refresh periods. "fast" matches the in-app toggle, "slow" the background mode.
REFRESH_INTERVAL_FAST_S = 60.0
REFRESH_INTERVAL_SLOW_S = 300.0
REFRESH_MODES = {"fast": REFRESH_INTERVAL_FAST_S, "slow": REFRESH_INTERVAL_SLOW_S}

# Defaults if no YAML or env
_DEFAULTS = {
    "state": {"path": "data/wallet_state.sqlite"},
    "refresh": {
        "mode": "fast",
        "interval_seconds": None,
        "degraded_retry_seconds": 30.0,
    },
    "retry": {"attempts": 3, "delay_seconds": 1.0},
    "cache": {"ttl_seconds": 300.0},
    "http": {"timeout_seconds": 15.0},
    "ledger": {"max_transactions": 5},
    "providers": {
        "price_priority": ["coingecko", "binance"],
        "ledger_priority": ["blockcypher", "blockstream", "mempool"],
        "urls": {
            "coingecko": "https://api.coingecko.com/api/v3",
            "binance": "https://api.binance.com/api/v3",
            "blockcypher": "https://api.blockcypher.com/v1/btc/main",
            "blockstream": "https://blockstream.info/api",
            "mempool": "https://mempool.space/api",
        },
    },
}


def _config_yaml_path() -> Path:
    """Config.yaml lives at repo root (parent of package dir)."""
    return Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml() -> dict:
    config_path = _config_yaml_path()
    if not config_path.exists():
        return {}
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _env_overrides() -> dict:
    overrides: dict = {}
    path = os.environ.get("BTC_WALLET_SYNC_STATE_PATH")
    if path:
        overrides.setdefault("state", {})["path"] = path
    mode = os.environ.get("BTC_WALLET_SYNC_REFRESH_MODE")
    if mode:
        overrides.setdefault("refresh", {})["mode"] = mode
    address = os.environ.get("BTC_WALLET_SYNC_ADDRESS")
    if address:
        overrides["address"] = address
    return overrides


def get_config() -> dict:
    """Return merged config: defaults <- config.yaml <- env."""
    merged = _deep_merge(_DEFAULTS, _load_yaml())
    merged = _deep_merge(merged, _env_overrides())
    return merged


# Convenience accessors
def state_path() -> str:
    return str(get_config()["state"]["path"])


def refresh_interval_seconds() -> float:
    """Explicit interval_seconds wins; otherwise the named mode picks fast (60s) or slow (300s)."""
    refresh = get_config()["refresh"]
    explicit = refresh.get("interval_seconds")
    if explicit:
        return float(explicit)
    mode = str(refresh.get("mode", "fast")).lower()
    if mode not in REFRESH_MODES:
        raise ValueError(f"Unknown refresh mode '{mode}'. Available: {sorted(REFRESH_MODES)}")
    return REFRESH_MODES[mode]


def degraded_retry_seconds() -> float:
    return float(get_config()["refresh"]["degraded_retry_seconds"])


def retry_attempts() -> int:
    return int(get_config()["retry"]["attempts"])


def retry_delay_seconds() -> float:
    return float(get_config()["retry"]["delay_seconds"])


def cache_ttl_seconds() -> float:
    return float(get_config()["cache"]["ttl_seconds"])


def http_timeout_seconds() -> float:
    return float(get_config()["http"]["timeout_seconds"])


def max_transactions() -> int:
    return int(get_config()["ledger"]["max_transactions"])


def provider_url(name: str) -> str:
    return str(get_config()["providers"]["urls"][name])


def default_address() -> str:
    return str(get_config().get("address", "") or "")
