"""Collection-cycle detection.

CPython exposes the end of every collection through :data:`gc.callbacks`, so
there is no need for a finalizer that resurrects itself to notice cycles.
:class:`PulseHub` installs a single callback and fans each qualifying
collection out to the armed :class:`CycleSignal` objects, one per live
listener.  A signal refers to its owner weakly: it never keeps a container
alive, and it disarms itself as soon as the owner is reclaimed.
"""

from __future__ import annotations

import gc
import itertools
import logging
import threading
import weakref
from typing import TYPE_CHECKING, Any, Optional

from ..config import DEFAULT_PULSE_GENERATION, MAX_PULSE_GENERATION
from ..errors import InvalidArgumentError

if TYPE_CHECKING:
    from ..settings.policy import ExpiryPolicy
    from .listener import CyclePulseListener

LOGGER = logging.getLogger(__name__)

_tokens = itertools.count(1)


class CycleSignal:
    """One armed pulse subscription for a single listener."""

    __slots__ = ("token", "_owner")

    def __init__(self, hub: "PulseHub", owner: "CyclePulseListener") -> None:
        token = next(_tokens)
        self.token = token
        self._owner = weakref.ref(owner, lambda _ref: hub.disarm(token))

    @property
    def armed(self) -> bool:
        return self._owner() is not None

    def fire(self) -> bool:
        """Deliver one pulse; return ``False`` when the owner is gone."""
        owner = self._owner()
        if owner is None:
            return False
        owner._on_raw_pulse()
        return True


class PulseHub:
    """Process-wide bridge between :data:`gc.callbacks` and listeners."""

    _instance: Optional["PulseHub"] = None
    _instance_lock = threading.Lock()

    def __init__(self, min_generation: int = DEFAULT_PULSE_GENERATION) -> None:
        # Mutated from foreground threads and from weakref callbacks that
        # can run in the middle of a dispatch; single dict operations are
        # atomic, and dispatch iterates over a copy.
        self._signals: dict[int, CycleSignal] = {}
        self._min_generation = DEFAULT_PULSE_GENERATION
        self._installed = False
        self._pulses = 0
        self.configure(min_generation=min_generation)

    @classmethod
    def instance(cls) -> "PulseHub":
        """Return the shared hub, installing it on first use."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    hub = cls()
                    hub.install()
                    cls._instance = hub
        return cls._instance

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configure(self, min_generation: int) -> None:
        if not 0 <= min_generation <= MAX_PULSE_GENERATION:
            raise InvalidArgumentError(
                f"pulse generation {min_generation!r} must be between 0 and {MAX_PULSE_GENERATION}"
            )
        self._min_generation = min_generation

    def configure_from(self, policy: "ExpiryPolicy") -> None:
        self.configure(min_generation=policy.pulse_generation)

    @property
    def min_generation(self) -> int:
        return self._min_generation

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> None:
        if self._installed:
            return
        gc.callbacks.append(self._on_collection)
        self._installed = True
        LOGGER.debug("Pulse hub installed (min generation %d)", self._min_generation)

    def uninstall(self) -> None:
        if not self._installed:
            return
        try:
            gc.callbacks.remove(self._on_collection)
        except ValueError:
            pass
        self._installed = False
        LOGGER.debug("Pulse hub uninstalled after %d pulses", self._pulses)

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------

    def arm(self, owner: "CyclePulseListener") -> CycleSignal:
        signal = CycleSignal(self, owner)
        self._signals[signal.token] = signal
        return signal

    def disarm(self, token: int) -> None:
        self._signals.pop(token, None)

    @property
    def armed_count(self) -> int:
        return len(self._signals)

    @property
    def pulse_count(self) -> int:
        return self._pulses

    def pulse(self) -> None:
        """Deliver one raw pulse to every armed signal."""
        self._pulses += 1
        for signal in list(self._signals.values()):
            try:
                alive = signal.fire()
            except Exception:
                # Listeners report their own failures; this only guards the
                # loop so one bad signal cannot starve the rest.
                LOGGER.exception("Pulse delivery failed")
                continue
            if not alive:
                self.disarm(signal.token)

    def _on_collection(self, phase: str, info: dict[str, Any]) -> None:
        if phase != "stop":
            return
        if info.get("generation", MAX_PULSE_GENERATION) < self._min_generation:
            return
        self.pulse()


__all__ = ["CycleSignal", "PulseHub"]
