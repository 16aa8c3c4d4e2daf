"""Dictionaries whose keys, values, or both are held weakly."""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple

from ..errors import DuplicateKeyError, EntryNotFoundError, require
from ..utils.comparer import DEFAULT_COMPARER, Comparer
from .hashed import HashedStore, SlotLike


@dataclass(slots=True)
class _Entry:
    hash_code: int
    key: SlotLike
    value: SlotLike

    def is_alive(self) -> bool:
        return self.key.is_alive() and self.value.is_alive()

    def resolve(self) -> Optional[Tuple[Any, Any]]:
        """Re-read both sides; ``None`` if either was reclaimed meanwhile."""
        key = self.key.read()
        if key is None:
            return None
        value = self.value.read()
        if value is None:
            return None
        return key, value

    def release(self) -> None:
        self.key.release()
        self.value.release()


class _EntryMap(HashedStore, MutableMapping):
    """Shared implementation; subclasses choose which sides are weak.

    An entry is visible only while every weak side is alive *and* re-reading
    it yields the target.  Reads go through the slots, so a key or value
    returned by any lookup or enumeration is protected through the next
    cleanup.  Dead entries are invisible at once and purged by the cleanup
    hook.

    ``keys()``, ``values()`` and ``items()`` return snapshot lists rather
    than live views.
    """

    _weak_values = False

    def __init__(
        self,
        keys_comparer: Comparer = DEFAULT_COMPARER,
        values_comparer: Comparer = DEFAULT_COMPARER,
        **kwargs: Any,
    ) -> None:
        require(values_comparer, "values_comparer")
        self._values_comparer = values_comparer
        super().__init__(keys_comparer, **kwargs)

    @property
    def values_comparer(self) -> Comparer:
        return self._values_comparer

    def _make_entry(self, key: Any, value: Any) -> _Entry:
        require(key, "key")
        require(value, "value")
        return _Entry(
            hash_code=self._keys_comparer.hash_code(key),
            key=self._key_slot(key),
            value=self._slot(value, self._weak_values),
        )

    def on_cleanup(self) -> None:
        self._prune(lambda entry: not entry.is_alive())
        self._release_all()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, key: Any, value: Any) -> None:
        """Insert a new pair; raise :class:`DuplicateKeyError` if *key* is live.

        An entry for an equal key whose weak side was reclaimed is replaced
        silently.
        """
        entry = self._make_entry(key, value)
        with self._lock:
            existing = self._lookup(key)
            if existing is not None and existing.resolve() is not None:
                raise DuplicateKeyError(f"duplicate key {key!r}")
            self._drop(key)
            self._insert(entry)

    def __setitem__(self, key: Any, value: Any) -> None:
        entry = self._make_entry(key, value)
        with self._lock:
            self._drop(key)
            self._insert(entry)

    def remove(self, key: Any) -> bool:
        """Remove the entry for *key*, live or not; return whether one existed."""
        require(key, "key")
        with self._lock:
            return self._drop(key)

    def __delitem__(self, key: Any) -> None:
        if not self.remove(key):
            raise EntryNotFoundError(f"key {key!r} not found")

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _find(self, key: Any) -> Optional[Tuple[Any, Any]]:
        require(key, "key")
        with self._lock:
            entry = self._lookup(key)
            return entry.resolve() if entry is not None else None

    def __getitem__(self, key: Any) -> Any:
        pair = self._find(key)
        if pair is None:
            raise EntryNotFoundError(f"key {key!r} not found")
        return pair[1]

    def get(self, key: Any, default: Any = None) -> Any:
        pair = self._find(key)
        return default if pair is None else pair[1]

    def __contains__(self, key: object) -> bool:
        if key is None:
            return False
        return self._find(key) is not None

    def contains_key(self, key: Any) -> bool:
        return key in self

    def contains_value(self, value: Any) -> bool:
        require(value, "value")
        equals = self._values_comparer.equals
        with self._lock:
            for entry in self._entries():
                if not entry.is_alive():
                    continue
                if entry.key.peek_weak() is None:
                    continue
                candidate = entry.value.peek_weak()
                if candidate is None or not equals(value, candidate):
                    continue
                if entry.resolve() is not None:
                    return True
            return False

    def contains(self, key: Any, value: Any) -> bool:
        """Whether *key* is live and maps to a value equal to *value*."""
        require(key, "key")
        require(value, "value")
        with self._lock:
            entry = self._lookup(key)
            if entry is None:
                return False
            candidate = entry.value.peek_weak()
            if candidate is None or not self._values_comparer.equals(value, candidate):
                return False
            return entry.resolve() is not None

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def items(self) -> List[Tuple[Any, Any]]:
        with self._lock:
            pairs = []
            for entry in self._entries():
                if not entry.is_alive():
                    continue
                pair = entry.resolve()
                if pair is not None:
                    pairs.append(pair)
            return pairs

    def keys(self) -> List[Any]:
        return [key for key, _ in self.items()]

    def values(self) -> List[Any]:
        return [value for _, value in self.items()]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.keys())

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for entry in self._entries() if entry.is_alive())

    def __repr__(self) -> str:
        entries = self._snapshot()
        live = sum(1 for entry in entries if entry.is_alive())
        return f"<{type(self).__name__} count={live} raw={len(entries)}>"


class WeakValueMap(_EntryMap):
    """Map with strongly-held keys and weakly-held values.

    Keys may be any object the key comparer can hash; values must support
    weak references.
    """

    _weak_values = True


class WeakKeyMap(_EntryMap):
    """Map with weakly-held keys and strongly-held values.

    The value of an entry stays reachable through this map until the key is
    reclaimed and the entry purged.
    """

    _weak_keys = True


class WeakMap(_EntryMap):
    """Map whose keys and values are both weakly held."""

    _weak_keys = True
    _weak_values = True


__all__ = ["WeakKeyMap", "WeakMap", "WeakValueMap"]
