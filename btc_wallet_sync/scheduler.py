"""
Refresh scheduling: periodic timer, manual trigger, degraded-mode price retry.

States:
- IDLE: nothing in flight, no degraded retry pending.
- REFRESHING: a cycle is running. Further triggers are ignored, not queued.
- DEGRADED_WAITING: the last price fetch exhausted every provider and a
  one-shot price-only retry is armed. Any new cycle cancels it first.

Timers come from an injectable ``call_later(delay_s, fn) -> handle`` so tests
can drive the scheduler with a fake clock. The default runs threading.Timer
daemons, so the in-flight flag and timer handles are guarded by a lock.
"""
from __future__ import annotations

import enum
import logging
import threading
from typing import Callable, Optional, Protocol

from .config import REFRESH_INTERVAL_FAST_S

logger = logging.getLogger(__name__)

DEGRADED_RETRY_S = 30.0


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


CallLater = Callable[[float, Callable[[], None]], TimerHandle]


def threading_call_later(delay_s: float, fn: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay_s, fn)
    timer.daemon = True
    timer.start()
    return timer


class SchedulerState(enum.Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"
    DEGRADED_WAITING = "degraded_waiting"


class RefreshScheduler:
    """
    Owns the refresh timers and the in-flight guard.

    run_cycle and run_price_only do the actual work and return True when the
    price fetch succeeded; False arms the degraded retry. An exception arms
    nothing and propagates to the caller (timer callbacks log it).
    """

    def __init__(
        self,
        run_cycle: Callable[[], bool],
        run_price_only: Callable[[], bool],
        interval_s: float = REFRESH_INTERVAL_FAST_S,
        degraded_retry_s: float = DEGRADED_RETRY_S,
        call_later: Optional[CallLater] = None,
    ) -> None:
        self._run_cycle = run_cycle
        self._run_price_only = run_price_only
        self._interval_s = interval_s
        self._degraded_retry_s = degraded_retry_s
        self._call_later = call_later or threading_call_later
        self._lock = threading.Lock()
        self._in_flight = False
        self._interval_handle: Optional[TimerHandle] = None
        self._degraded_handle: Optional[TimerHandle] = None
        # Bumped on every (re)arm so a tick from a canceled timer is ignored.
        self._interval_generation = 0

    @property
    def interval_s(self) -> float:
        return self._interval_s

    @property
    def is_refreshing(self) -> bool:
        return self._in_flight

    @property
    def auto_refresh_active(self) -> bool:
        return self._interval_handle is not None

    @property
    def degraded_retry_pending(self) -> bool:
        return self._degraded_handle is not None

    @property
    def state(self) -> SchedulerState:
        with self._lock:
            if self._in_flight:
                return SchedulerState.REFRESHING
            if self._degraded_handle is not None:
                return SchedulerState.DEGRADED_WAITING
            return SchedulerState.IDLE

    # -- lifecycle ---------------------------------------------------------

    def start(self, interval_s: Optional[float] = None, auto_refresh: bool = True) -> None:
        """(Re)create the periodic timer. Always tears the old one down first."""
        if interval_s is not None:
            if interval_s <= 0:
                raise ValueError(f"interval_s must be > 0, got {interval_s}")
            self._interval_s = interval_s
        with self._lock:
            self._cancel_interval_locked()
            if auto_refresh:
                self._arm_interval_locked()
        logger.debug("scheduler started: auto_refresh=%s interval=%.0fs", auto_refresh, self._interval_s)

    def stop(self) -> None:
        """Cancel both timers. An in-flight cycle is not interrupted."""
        with self._lock:
            self._cancel_interval_locked()
            self._cancel_degraded_locked()
        logger.debug("scheduler stopped")

    def set_auto_refresh(self, enabled: bool) -> None:
        self.start(auto_refresh=enabled)

    # -- triggers ----------------------------------------------------------

    def trigger(self, reason: str = "manual") -> bool:
        """Run a full cycle unless one is already in flight. Returns True if it ran."""
        return self._run_guarded(self._run_cycle, reason)

    def trigger_price_only(self, reason: str = "price") -> bool:
        return self._run_guarded(self._run_price_only, reason)

    def _run_guarded(self, work: Callable[[], bool], reason: str) -> bool:
        with self._lock:
            if self._in_flight:
                logger.debug("refresh (%s) ignored: cycle already in flight", reason)
                return False
            self._in_flight = True
            self._cancel_degraded_locked()
        logger.debug("refresh started (%s)", reason)
        # None means work raised before reporting; only an explicit price failure degrades.
        price_ok: Optional[bool] = None
        try:
            price_ok = work()
        finally:
            with self._lock:
                self._in_flight = False
                if price_ok is False:
                    self._arm_degraded_locked()
        return True

    # -- timer callbacks ---------------------------------------------------

    def _on_interval(self, generation: int) -> None:
        with self._lock:
            if generation != self._interval_generation or self._interval_handle is None:
                return
            self._arm_interval_locked()
        try:
            self.trigger("interval")
        except Exception:
            logger.exception("periodic refresh failed")

    def _on_degraded(self, handle_box: list) -> None:
        with self._lock:
            if self._degraded_handle is None or self._degraded_handle is not handle_box[0]:
                return
            self._degraded_handle = None
        logger.info("degraded retry: refetching price")
        try:
            self.trigger_price_only("degraded-retry")
        except Exception:
            logger.exception("degraded price retry failed")

    # -- helpers (caller holds self._lock) ---------------------------------

    def _arm_interval_locked(self) -> None:
        self._interval_generation += 1
        generation = self._interval_generation
        self._interval_handle = self._call_later(self._interval_s, lambda: self._on_interval(generation))

    def _cancel_interval_locked(self) -> None:
        self._interval_generation += 1
        if self._interval_handle is not None:
            self._interval_handle.cancel()
            self._interval_handle = None

    def _arm_degraded_locked(self) -> None:
        self._cancel_degraded_locked()
        box: list = [None]
        box[0] = self._call_later(self._degraded_retry_s, lambda: self._on_degraded(box))
        self._degraded_handle = box[0]
        logger.info("price unavailable: retrying in %.0fs", self._degraded_retry_s)

    def _cancel_degraded_locked(self) -> None:
        if self._degraded_handle is not None:
            self._degraded_handle.cancel()
            self._degraded_handle = None
