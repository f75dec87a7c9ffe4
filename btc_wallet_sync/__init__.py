"""
Top-level public API surface. Stable facades only.
Canonical entrypoint: import btc_wallet_sync; use SyncEngine / create_engine, or the
lower-level pieces under btc_wallet_sync.providers. Does not import cli.
"""

from __future__ import annotations

from . import core, providers
from ._version import __version__
from .cache import CacheEntry, FreshnessCache
from .conversion import Conversion, convert_sats
from .engine import SyncEngine, create_engine
from .scheduler import RefreshScheduler, SchedulerState
from .store import LocalStateStore, Settings

# Do not add exports without updating __all__.
__all__ = [
    "__version__",
    "core",
    "providers",
    "CacheEntry",
    "FreshnessCache",
    "Conversion",
    "convert_sats",
    "SyncEngine",
    "create_engine",
    "RefreshScheduler",
    "SchedulerState",
    "LocalStateStore",
    "Settings",
]
