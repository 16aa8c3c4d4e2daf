"""Self-expiring containers backed by weak references.

Containers hold their entries weakly, protect each entry for one cleanup
after it is stored or read, and prune reclaimed entries on a schedule driven
by the garbage collector's own cycles.
"""

from .containers import (
    StrongSlot,
    ValueBucket,
    WeakBucketMap,
    WeakHandle,
    WeakKeyBucketMap,
    WeakKeyMap,
    WeakList,
    WeakMap,
    WeakSlot,
    WeakValueBucketMap,
    WeakValueMap,
)
from .errors import (
    DuplicateKeyError,
    EntryNotFoundError,
    InvalidArgumentError,
    PolicyError,
    PolicyValidationError,
    SoftRefError,
)
from .pulse import CyclePulseListener, CycleSignal, PulseHub, PulseStats
from .settings import ExpiryPolicy
from .utils.comparer import DEFAULT_COMPARER, IDENTITY_COMPARER, Comparer

__version__ = "0.1.0"

__all__ = [
    "Comparer",
    "CyclePulseListener",
    "CycleSignal",
    "DEFAULT_COMPARER",
    "DuplicateKeyError",
    "EntryNotFoundError",
    "ExpiryPolicy",
    "IDENTITY_COMPARER",
    "InvalidArgumentError",
    "PolicyError",
    "PolicyValidationError",
    "PulseHub",
    "PulseStats",
    "SoftRefError",
    "StrongSlot",
    "ValueBucket",
    "WeakBucketMap",
    "WeakHandle",
    "WeakKeyBucketMap",
    "WeakKeyMap",
    "WeakList",
    "WeakMap",
    "WeakSlot",
    "WeakValueBucketMap",
    "WeakValueMap",
]
