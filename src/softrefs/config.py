"""Default configuration values for softrefs."""

from __future__ import annotations

from typing import Final

# ``0`` disables the cycle-count debounce: the cleanup hook runs on every
# collection the listener observes.
DEFAULT_CYCLES: Final[int] = 0

# Elapsed-time debounce in seconds.  ``0`` means time is ignored.
DEFAULT_TICKS: Final[float] = 0.0

# Lowest collector generation whose completion counts as a pulse.  Generation
# 0 collections are by far the most frequent; raising this to 2 restricts
# pulses to full collections (including every explicit ``gc.collect()``).
DEFAULT_PULSE_GENERATION: Final[int] = 0
MAX_PULSE_GENERATION: Final[int] = 2

POLICY_SCHEMA_ID: Final[str] = "softrefs/policy.schema.json"
POLICY_SCHEMA_VERSION: Final[str] = "softrefs/policy@1"
