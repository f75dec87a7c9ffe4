"""
Wallet sync engine: the owned context tying chains, cache, scheduler and store together.

One refresh cycle fetches the price first, then the wallet (cache first), so
the snapshot on display is always valued at a price from the same cycle or
later. Fiat values are never stored; they are computed on read from the
current PriceSnapshot.

All failures stop here: they become an error message on ``engine.error``,
are pushed to ``on_error`` listeners, and leave the previous data in place.
"""
from __future__ import annotations

import logging
import threading
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from .cache import FreshnessCache
from .conversion import (
    EMPTY_CONVERSION,
    Conversion,
    convert_sats,
    format_btc,
    format_number,
    format_percentage,
    mask_value,
)
from .core.errors import ProviderExhausted, ValidationError
from .providers.base import PriceSnapshot, Provenance, ProviderHealth, Transaction, WalletSnapshot
from .providers.chain import LedgerProviderChain, PriceProviderChain
from .scheduler import CallLater, RefreshScheduler
from .store import LocalStateStore, Settings
from .validation import require_valid_address

logger = logging.getLogger(__name__)

PRICE_FAILED_MESSAGE = "Failed to fetch price data. Will retry automatically."
WALLET_FAILED_MESSAGE = "Failed to fetch wallet data. Please try again later."

ErrorListener = Callable[[str], None]


class SyncEngine:
    """
    Client-side sync of one BTC address and the BTC price.

    Lifecycle: ``start(address)`` restores persisted state, arms the periodic
    timer (when auto-refresh is on) and runs a first cycle; ``stop()`` cancels
    every timer. Usable as a context manager.
    """

    def __init__(
        self,
        price_chain: PriceProviderChain,
        ledger_chain: LedgerProviderChain,
        *,
        cache: Optional[FreshnessCache] = None,
        store: Optional[LocalStateStore] = None,
        settings: Optional[Settings] = None,
        interval_s: Optional[float] = None,
        degraded_retry_s: float = 30.0,
        call_later: Optional[CallLater] = None,
    ) -> None:
        self._price_chain = price_chain
        self._ledger_chain = ledger_chain
        self._cache = cache if cache is not None else FreshnessCache()
        self._store = store
        self._settings = settings or (store.load_settings() if store is not None else Settings())
        self._lock = threading.RLock()
        self._price: Optional[PriceSnapshot] = None
        self._wallet: Optional[WalletSnapshot] = None
        self._provenance: Optional[Provenance] = None
        self._error: Optional[str] = None
        self._sats_input = ""
        self._conversion: Conversion = EMPTY_CONVERSION
        self._listeners: List[ErrorListener] = []
        scheduler_kwargs: Dict[str, Any] = {"degraded_retry_s": degraded_retry_s, "call_later": call_later}
        if interval_s is not None:
            scheduler_kwargs["interval_s"] = interval_s
        self._scheduler = RefreshScheduler(self._run_cycle, self._run_price_only, **scheduler_kwargs)
        self._restore()

    # -- read accessors ----------------------------------------------------

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def scheduler(self) -> RefreshScheduler:
        return self._scheduler

    @property
    def cache(self) -> FreshnessCache:
        return self._cache

    @property
    def price(self) -> Optional[PriceSnapshot]:
        with self._lock:
            return self._price

    @property
    def wallet(self) -> Optional[WalletSnapshot]:
        with self._lock:
            return self._wallet

    @property
    def provenance(self) -> Optional[Provenance]:
        with self._lock:
            return self._provenance

    @property
    def error(self) -> Optional[str]:
        with self._lock:
            return self._error

    @property
    def conversion(self) -> Conversion:
        with self._lock:
            return self._conversion

    @property
    def is_refreshing(self) -> bool:
        return self._scheduler.is_refreshing

    def wallet_value(self, currency: Optional[str] = None) -> Optional[Decimal]:
        """Balance valued at the latest price; None until both are known."""
        with self._lock:
            wallet, price = self._wallet, self._price
        if wallet is None or price is None:
            return None
        return wallet.balance_btc * price.price_for(currency or self._settings.currency)

    def transaction_value(self, tx: Transaction, currency: Optional[str] = None) -> Optional[Decimal]:
        price = self.price
        if price is None:
            return None
        return tx.value_btc * price.price_for(currency or self._settings.currency)

    def provider_health(self) -> Dict[str, ProviderHealth]:
        health = dict(self._price_chain.get_health())
        health.update(self._ledger_chain.get_health())
        return health

    # -- error channel -----------------------------------------------------

    def on_error(self, listener: ErrorListener) -> None:
        self._listeners.append(listener)

    def _report_error(self, message: str) -> None:
        with self._lock:
            self._error = message
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception:
                logger.exception("error listener raised")

    # -- lifecycle ---------------------------------------------------------

    def start(
        self,
        address: Optional[str] = None,
        interval_s: Optional[float] = None,
        auto_refresh: Optional[bool] = None,
    ) -> bool:
        """
        Arm the periodic timer and run a first cycle.

        A new address is validated first; an invalid one is reported and
        nothing starts. ``auto_refresh`` overrides the saved setting for this
        run without persisting it. Returns whether the first cycle ran.
        """
        if address is not None and address != self._settings.address:
            if not self.apply_settings(self._settings.with_changes(address=address), trigger=False):
                return False
        enabled = self._auto_refresh_enabled() if auto_refresh is None else bool(auto_refresh and self._settings.address)
        self._scheduler.start(interval_s, auto_refresh=enabled)
        return self._scheduler.trigger("start")

    def stop(self) -> None:
        self._scheduler.stop()

    def __enter__(self) -> "SyncEngine":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.stop()

    def _auto_refresh_enabled(self) -> bool:
        return bool(self._settings.auto_refresh and self._settings.address)

    # -- commands ----------------------------------------------------------

    def refresh_now(self) -> bool:
        """Manual refresh. Ignored (returns False) while a cycle is in flight."""
        return self._scheduler.trigger("manual")

    def refresh_price(self) -> bool:
        return self._scheduler.trigger_price_only("manual-price")

    def apply_settings(self, settings: Settings, trigger: bool = True) -> bool:
        """
        Validate and apply new settings. The periodic timer is always torn
        down and recreated from the new values.
        """
        address = settings.address.strip()
        if address:
            try:
                address = require_valid_address(address)
            except ValidationError as exc:
                self._report_error(str(exc))
                return False
        new = settings.with_changes(address=address)
        with self._lock:
            old = self._settings
            self._settings = new
            self._error = None
        if self._store is not None:
            self._store.save_settings(new)

        address_changed = new.address != old.address
        if address_changed:
            with self._lock:
                self._wallet = self._store.load_wallet(new.address) if (self._store and new.address) else None
                self._provenance = None
        self._scheduler.start(auto_refresh=self._auto_refresh_enabled())
        if trigger and address_changed and new.address:
            self._scheduler.trigger("address-changed")
        return True

    def set_sats_input(self, text: str) -> Conversion:
        with self._lock:
            self._sats_input = text
        return self._recompute_conversion()

    def _recompute_conversion(self) -> Conversion:
        with self._lock:
            self._conversion = convert_sats(self._sats_input, self._price)
            return self._conversion

    # -- cycle work (run by the scheduler under its in-flight guard) --------

    def _run_cycle(self) -> bool:
        with self._lock:
            self._error = None
        price_ok = self._refresh_price()
        address = self._settings.address
        while address:
            self._refresh_wallet(address)
            # A settings change during the fetch had its own trigger dropped; serve the new address now.
            current = self._settings.address
            if current == address:
                break
            logger.info("address changed mid-cycle, fetching %s", current)
            address = current
        return price_ok

    def _run_price_only(self) -> bool:
        return self._refresh_price()

    def _refresh_price(self) -> bool:
        try:
            price = self._price_chain.get_price()
        except ProviderExhausted as exc:
            logger.warning("price refresh failed: %s", exc)
            self._report_error(f"{PRICE_FAILED_MESSAGE} ({exc})")
            return False
        with self._lock:
            self._price = price
        self._recompute_conversion()
        if self._store is not None:
            self._store.save_price(price)
        logger.info(
            "price %s USD / %s EUR (%s%%) via %s",
            price.btc_price_usd, price.btc_price_eur,
            format_percentage(price.price_change_percent_24h), price.provider_name,
        )
        return True

    def _refresh_wallet(self, address: str) -> None:
        entry = self._cache.get(address)
        if entry is not None:
            self._commit_wallet(address, entry.snapshot, Provenance.CACHED)
            logger.info("wallet %s served from cache", address)
            return
        try:
            snapshot = self._ledger_chain.get_wallet(address)
        except ProviderExhausted as exc:
            logger.warning("wallet refresh failed for %s: %s", address, exc)
            self._report_error(f"{WALLET_FAILED_MESSAGE} ({exc})")
            return
        self._commit_wallet(address, snapshot, Provenance.FRESH)
        self._cache.put(address, snapshot, self.price)
        if self._store is not None:
            self._store.save_wallet(snapshot)
        logger.info(
            "wallet %s balance %s BTC, %d txs via %s",
            address, format_btc(snapshot.balance_btc), len(snapshot.transactions), snapshot.provider_name,
        )

    def _commit_wallet(self, address: str, snapshot: WalletSnapshot, provenance: Provenance) -> None:
        # Drop results for an address the user has since moved away from.
        with self._lock:
            if self._settings.address != address:
                logger.debug("discarding wallet for %s: address changed", address)
                return
            self._wallet = snapshot
            self._provenance = provenance

    def _restore(self) -> None:
        """Load last-known price and wallet. Missing or corrupt state means no prior data."""
        if self._store is None:
            return
        price = self._store.load_price()
        wallet = self._store.load_wallet(self._settings.address) if self._settings.address else None
        with self._lock:
            self._price = price
            self._wallet = wallet

    # -- display -----------------------------------------------------------

    def display(self) -> Dict[str, Any]:
        """Display-ready strings for UI collaborators, honoring hide_values and currency."""
        settings = self._settings
        hide = settings.hide_values
        symbol = "€" if settings.currency == "EUR" else "$"
        with self._lock:
            price, wallet, provenance = self._price, self._wallet, self._provenance
            conversion, error = self._conversion, self._error

        def money(value: Optional[Decimal]) -> str:
            if value is None:
                return ""
            return f"{symbol}{mask_value(format_number(value), hide)}"

        out: Dict[str, Any] = {
            "address": settings.address,
            "currency": settings.currency,
            "price": money(price.price_for(settings.currency)) if price else "",
            "price_change_24h": f"{format_percentage(price.price_change_percent_24h)}%" if price else "",
            "balance": "--",
            "value": "--",
            "synced_at": "",
            "provenance": provenance.value if provenance else "",
            "converted": conversion.eur if settings.currency == "EUR" else conversion.usd,
            "transactions": [],
            "error": error or "",
        }
        if settings.address and wallet is not None and wallet.address == settings.address:
            out["balance"] = f"{mask_value(format_btc(wallet.balance_btc), hide)} BTC"
            out["value"] = money(self.wallet_value(settings.currency))
            out["synced_at"] = wallet.last_updated.isoformat(timespec="seconds")
            for tx in wallet.transactions:
                out["transactions"].append(
                    {
                        "date": tx.confirmed_at.date().isoformat() if tx.confirmed_at else "",
                        "direction": tx.direction.value,
                        "sats": mask_value(f"{format_number(tx.value_sats, 0)} sats", hide),
                        "value": money(self.transaction_value(tx, settings.currency)),
                    }
                )
        return out


def create_engine(
    state_path: Optional[str] = None,
    *,
    interval_s: Optional[float] = None,
    call_later: Optional[CallLater] = None,
) -> SyncEngine:
    """Build an engine from config.yaml: default provider chains, TTL cache and SQLite state."""
    from . import config
    from .providers.defaults import create_default_registry, create_ledger_chain, create_price_chain

    registry = create_default_registry()
    store = LocalStateStore(state_path or config.state_path())
    settings = store.load_settings()
    if not settings.address and config.default_address():
        settings = settings.with_changes(address=config.default_address())
    return SyncEngine(
        create_price_chain(registry),
        create_ledger_chain(registry),
        cache=FreshnessCache(ttl_seconds=config.cache_ttl_seconds()),
        store=store,
        settings=settings,
        interval_s=interval_s if interval_s is not None else config.refresh_interval_seconds(),
        degraded_retry_s=config.degraded_retry_seconds(),
        call_later=call_later,
    )
