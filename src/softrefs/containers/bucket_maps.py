"""One-to-many maps: each key owns a bucket of values."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple, Union

from ..errors import require
from ..utils.comparer import DEFAULT_COMPARER, Comparer
from .hashed import HashedStore, SlotLike
from .weak_list import WeakList


class ValueBucket:
    """Strongly-held, de-duplicated bucket used by :class:`WeakKeyBucketMap`."""

    def __init__(self, comparer: Comparer) -> None:
        self._comparer = comparer
        self._items: List[Any] = []
        self._lock = threading.Lock()

    def add_unique(self, item: Any) -> bool:
        with self._lock:
            if any(self._comparer.equals(item, existing) for existing in self._items):
                return False
            self._items.append(item)
            return True

    def remove(self, item: Any) -> bool:
        with self._lock:
            for pos, existing in enumerate(self._items):
                if self._comparer.equals(item, existing):
                    del self._items[pos]
                    return True
            return False

    def remove_all(self, item: Any) -> int:
        with self._lock:
            kept = [existing for existing in self._items if not self._comparer.equals(item, existing)]
            removed = len(self._items) - len(kept)
            self._items[:] = kept
            return removed

    def to_list(self) -> List[Any]:
        with self._lock:
            return list(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.to_list())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    @property
    def raw_count(self) -> int:
        return len(self)

    def __repr__(self) -> str:
        return f"<ValueBucket count={len(self._items)}>"


Bucket = Union[WeakList, ValueBucket]


@dataclass(slots=True)
class _BucketEntry:
    hash_code: int
    key: SlotLike
    values: Bucket

    def is_alive(self) -> bool:
        return self.key.is_alive()

    def release(self) -> None:
        self.key.release()


class _BucketMap(HashedStore):
    """Shared implementation of the bucket maps.

    A key is visible while it is alive and its bucket holds at least one
    live value.  Foreground operations lock this map, then the bucket.
    Cleanup hooks never wait for a bucket's lock.
    """

    _weak_values = True

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

    def _new_bucket(self) -> Bucket:
        if self._weak_values:
            return WeakList(comparer=self._values_comparer, **self._listener_kwargs())
        return ValueBucket(self._values_comparer)

    def _bucket_expired(self, entry: _BucketEntry) -> bool:
        return not entry.is_alive()

    def on_cleanup(self) -> None:
        self._prune(self._bucket_expired)
        self._release_all()

    def _visible(self) -> Iterator[Tuple[Any, Bucket]]:
        """Yield ``(key, bucket)`` for live keys; caller holds the lock."""
        for entry in self._entries():
            if not entry.is_alive():
                continue
            key = entry.key.read()
            if key is not None:
                yield key, entry.values

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, key: Any, value: Any) -> bool:
        """Add *value* to *key*'s bucket; return ``False`` if already present."""
        require(key, "key")
        require(value, "value")
        with self._lock:
            entry = self._lookup(key)
            if entry is None or entry.key.read() is None:
                entry = _BucketEntry(
                    hash_code=self._keys_comparer.hash_code(key),
                    key=self._key_slot(key),
                    values=self._new_bucket(),
                )
                self._drop(key)
                self._insert(entry)
            return entry.values.add_unique(value)

    def remove(self, key: Any, value: Any) -> bool:
        """Remove *value* from *key*'s bucket; return whether it was there."""
        require(key, "key")
        require(value, "value")
        with self._lock:
            entry = self._lookup(key)
            if entry is None or entry.key.read() is None:
                return False
            return entry.values.remove(value)

    def remove_all(self, value: Any) -> int:
        """Remove *value* from every live bucket; return how many were removed."""
        require(value, "value")
        with self._lock:
            return sum(bucket.remove_all(value) for _, bucket in self._visible())

    def discard_key(self, key: Any) -> bool:
        """Drop *key*'s bucket outright; return whether one existed."""
        require(key, "key")
        with self._lock:
            return self._drop(key)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_bucket(self, key: Any) -> Optional[Bucket]:
        """Return *key*'s bucket, or ``None`` if the key is dead or the bucket empty."""
        require(key, "key")
        with self._lock:
            entry = self._lookup(key)
            if entry is None or entry.key.read() is None:
                return None
            if len(entry.values) == 0:
                return None
            return entry.values

    def __contains__(self, key: object) -> bool:
        if key is None:
            return False
        return self.find_bucket(key) is not None

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def buckets(self) -> List[Tuple[Any, List[Any]]]:
        """Snapshot of ``(key, values)`` for every visible key."""
        with self._lock:
            result = []
            for key, bucket in self._visible():
                values = bucket.to_list()
                if values:
                    result.append((key, values))
            return result

    items = buckets

    def keys(self) -> List[Any]:
        return [key for key, _ in self.buckets()]

    def values(self) -> List[Any]:
        return [value for _, values in self.buckets() for value in values]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.keys())

    @property
    def key_count(self) -> int:
        with self._lock:
            return sum(1 for _, bucket in self._visible() if len(bucket) > 0)

    @property
    def value_count(self) -> int:
        with self._lock:
            return sum(len(bucket) for _, bucket in self._visible())

    def __len__(self) -> int:
        return self.key_count

    @property
    def raw_key_count(self) -> int:
        return self.raw_count

    def __repr__(self) -> str:
        entries = self._snapshot()
        live = sum(1 for entry in entries if entry.is_alive())
        return f"<{type(self).__name__} keys={live} raw_keys={len(entries)}>"


class WeakBucketMap(_BucketMap):
    """Weak keys mapped to weak lists of values.

    A bucket is purged when its key is reclaimed.  A bucket that merely runs
    empty while its key is alive stays in place so the key can be
    re-populated; it is just not visible until it holds a value again.
    This deliberately differs from purging a bucket once it runs empty,
    which is what :class:`WeakValueBucketMap` does.
    """

    _weak_keys = True


class WeakKeyBucketMap(_BucketMap):
    """Weak keys mapped to strongly-held, de-duplicated value lists.

    A key's values stay reachable until the key is reclaimed and its bucket
    purged.  :meth:`find_bucket` returns the :class:`ValueBucket` itself.
    """

    _weak_keys = True
    _weak_values = False


class WeakValueBucketMap(_BucketMap):
    """Strong keys mapped to weak lists of values.

    A bucket is purged once a cleanup observes it empty; the key itself
    is never the reason.
    """

    def _bucket_expired(self, entry: _BucketEntry) -> bool:
        return entry.values._observed_empty()


__all__ = ["Bucket", "ValueBucket", "WeakBucketMap", "WeakKeyBucketMap", "WeakValueBucketMap"]
