"""Debounced delivery of collection pulses to a cleanup hook."""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Callable, Optional, Union

from ..config import DEFAULT_CYCLES, DEFAULT_TICKS
from ..errors import InvalidArgumentError
from ..errors.handler import ErrorSeverity, get_error_handler
from .signal import PulseHub

if TYPE_CHECKING:
    from ..settings.policy import ExpiryPolicy

LOGGER = logging.getLogger(__name__)

Duration = Union[int, float, timedelta]
TraceSink = Callable[["CyclePulseListener"], None]


@dataclass(frozen=True)
class PulseStats:
    """Immutable snapshot of a listener's pulse counters."""

    pulses: int = 0
    cleanups: int = 0
    skipped: int = 0
    failures: int = 0


def _default_trace(listener: "CyclePulseListener") -> None:
    LOGGER.debug("Cleanup %s#%x at pulse %d", type(listener).__name__, id(listener), listener.current_pulse_count)


class CyclePulseListener(ABC):
    """Base class for objects cleaned up after garbage collections.

    Every collection the :class:`PulseHub` observes is a raw pulse.  A raw
    pulse becomes a *qualifying* pulse, and :meth:`on_cleanup` runs, when

    * ``cycles > 0`` and at least ``cycles`` pulses arrived since the last
      cleanup fired on the cycle criterion, or
    * ``ticks > 0`` and at least ``ticks`` seconds passed since the last
      cleanup fired on the time criterion, or
    * neither threshold is configured.

    The cycle criterion is checked first and wins when both are met.

    Pulses take the listener's lock without blocking.  If a foreground
    operation holds it (possibly on the same thread, when an allocation in
    that operation triggered the collection) the pulse is dropped and the
    next one gets another chance.  Subclasses must therefore guard their
    state with :attr:`_lock` and must never call their own locking public
    methods while already holding it.

    Parameters
    ----------
    cycles:
        Pulse-count threshold; ``0`` fires on every pulse.
    ticks:
        Elapsed-time threshold in seconds (or a :class:`~datetime.timedelta`);
        ``0`` ignores time.
    policy:
        An :class:`~softrefs.settings.ExpiryPolicy` applied after
        ``cycles``/``ticks``.
    trace:
        Observational sink called at cleanup entry.  Defaults to a DEBUG
        log line; pass ``False`` to disable.
    hub:
        Pulse source; the shared :meth:`PulseHub.instance` by default.
    """

    def __init__(
        self,
        cycles: int = DEFAULT_CYCLES,
        ticks: Duration = DEFAULT_TICKS,
        *,
        policy: Optional["ExpiryPolicy"] = None,
        trace: Union[TraceSink, None, bool] = None,
        hub: Optional[PulseHub] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._pulses = 0
        self._cycles = 0
        self._ticks = 0.0
        self._last_cycle = 0
        self._last_tick = time.monotonic()
        self._cleanups = 0
        self._skipped = 0
        self._failures = 0
        self.configure_cycles(cycles)
        self.configure_ticks(ticks)
        if policy is not None:
            policy.apply(self)
        if trace is False:
            self._trace: Optional[TraceSink] = None
        else:
            self._trace = trace or _default_trace
        self._hub = hub or PulseHub.instance()
        self._signal = self._hub.arm(self)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configure_cycles(self, cycles: int) -> None:
        if cycles is None or cycles < 0:
            raise InvalidArgumentError(f"cycles {cycles!r} must be zero or greater")
        self._cycles = int(cycles)

    def configure_ticks(self, ticks: Duration) -> None:
        if isinstance(ticks, timedelta):
            ticks = ticks.total_seconds()
        if ticks is None or ticks < 0:
            raise InvalidArgumentError(f"ticks {ticks!r} must be zero or greater")
        self._ticks = float(ticks)

    @property
    def cycles(self) -> int:
        return self._cycles

    @property
    def ticks(self) -> float:
        return self._ticks

    @property
    def hub(self) -> PulseHub:
        return self._hub

    @property
    def current_pulse_count(self) -> int:
        """Raw pulses observed so far; never decreases."""
        return self._pulses

    @property
    def stats(self) -> PulseStats:
        return PulseStats(
            pulses=self._pulses,
            cleanups=self._cleanups,
            skipped=self._skipped,
            failures=self._failures,
        )

    def _listener_kwargs(self) -> dict:
        """Keyword arguments that give a child listener this one's schedule."""
        return {"cycles": self._cycles, "ticks": self._ticks, "trace": self._trace or False, "hub": self._hub}

    # ------------------------------------------------------------------
    # Pulse path
    # ------------------------------------------------------------------

    @abstractmethod
    def on_cleanup(self) -> None:
        """Prune state after a qualifying pulse.

        Runs from the collector's callback with :attr:`_lock` held, possibly
        very often.  Implementations must only touch state this listener
        owns and must not keep references to reclaimed targets.
        """

    def _on_raw_pulse(self) -> None:
        self._pulses += 1
        if not self._lock.acquire(blocking=False):
            self._skipped += 1
            return
        try:
            criteria = False
            if self._cycles > 0:
                if self._pulses - self._last_cycle >= self._cycles:
                    self._fire()
                    self._last_cycle = self._pulses
                    return
                criteria = True

            if self._ticks > 0:
                now = time.monotonic()
                if now - self._last_tick >= self._ticks:
                    self._fire()
                    self._last_tick = now
                    return
                criteria = True

            if not criteria:
                self._fire()
        finally:
            self._lock.release()

    def _fire(self) -> None:
        try:
            if self._trace is not None:
                self._trace(self)
            self.on_cleanup()
        except Exception as exc:
            self._failures += 1
            get_error_handler().handle(
                exc,
                ErrorSeverity.ERROR,
                {"listener": type(self).__name__, "pulse": self._pulses},
            )
        else:
            self._cleanups += 1


__all__ = ["CyclePulseListener", "Duration", "PulseStats", "TraceSink"]
