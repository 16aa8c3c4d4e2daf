from .bus import Event, EventBus, Subscription
from .pulse_events import CleanupEvent, TraceSink, bus_trace

__all__ = ["CleanupEvent", "Event", "EventBus", "Subscription", "TraceSink", "bus_trace"]
