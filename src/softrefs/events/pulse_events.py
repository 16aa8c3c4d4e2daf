"""Events describing pulse-driven cleanup activity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from .bus import Event, EventBus

if TYPE_CHECKING:
    from ..pulse.listener import CyclePulseListener


@dataclass(kw_only=True)
class CleanupEvent(Event):
    """Published when a listener's cleanup hook is about to run."""

    listener_type: str
    pulse_count: int
    listener_repr: str = ""


TraceSink = Callable[["CyclePulseListener"], None]


def bus_trace(bus: EventBus, with_repr: bool = False) -> TraceSink:
    """Return a trace sink that publishes a :class:`CleanupEvent` on *bus*.

    ``with_repr`` adds the listener's ``repr`` to each event.  Container
    ``repr`` takes the listener's own lock-free counters only, so it is safe
    from the collector's context, but it is not free on large containers.
    """

    def _trace(listener: "CyclePulseListener") -> None:
        bus.publish(
            CleanupEvent(
                listener_type=type(listener).__name__,
                pulse_count=listener.current_pulse_count,
                listener_repr=repr(listener) if with_repr else "",
            )
        )

    return _trace


__all__ = ["CleanupEvent", "TraceSink", "bus_trace"]
