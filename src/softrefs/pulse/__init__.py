from .listener import CyclePulseListener, Duration, PulseStats, TraceSink
from .signal import CycleSignal, PulseHub

__all__ = ["CyclePulseListener", "CycleSignal", "Duration", "PulseHub", "PulseStats", "TraceSink"]
