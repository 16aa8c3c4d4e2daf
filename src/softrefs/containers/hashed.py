"""Hash-chained entry store shared by the map containers.

Entries are indexed by the hash their key had when the entry was created,
so an entry stays addressable after a weakly-held key is reclaimed.  Chains
are tuples and are replaced, never mutated, which lets ``repr`` and other
lock-free readers take a consistent snapshot.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List, Optional, Protocol, Tuple

from ..errors import require
from ..pulse.listener import CyclePulseListener
from ..utils.comparer import DEFAULT_COMPARER, Comparer
from .slot import StrongSlot, WeakHandle


class SlotLike(Protocol):
    def read(self) -> Any: ...

    def is_alive(self) -> bool: ...

    def peek_weak(self) -> Any: ...

    def release(self) -> None: ...


class KeyedEntry(Protocol):
    hash_code: int
    key: SlotLike

    def is_alive(self) -> bool: ...

    def release(self) -> None: ...


class HashedStore(CyclePulseListener):
    """Listener owning a ``hash -> chain of entries`` index."""

    _weak_keys = False

    def __init__(self, keys_comparer: Comparer = DEFAULT_COMPARER, **kwargs: Any) -> None:
        require(keys_comparer, "keys_comparer")
        # State first: the hub may pulse as soon as the listener is armed.
        self._keys_comparer = keys_comparer
        self._store: Dict[int, Tuple[KeyedEntry, ...]] = {}
        super().__init__(**kwargs)

    @property
    def keys_comparer(self) -> Comparer:
        return self._keys_comparer

    def _slot(self, target: Any, weak: bool) -> SlotLike:
        if weak:
            return WeakHandle(target)
        return StrongSlot(target)

    def _key_slot(self, key: Any) -> SlotLike:
        return self._slot(key, self._weak_keys)

    # The helpers below expect the caller to hold ``self._lock``.

    def _lookup(self, key: Any) -> Optional[KeyedEntry]:
        """Return the live entry whose key equals *key*, if any."""
        equals = self._keys_comparer.equals
        for entry in self._store.get(self._keys_comparer.hash_code(key), ()):
            if not entry.is_alive():
                continue
            candidate = entry.key.peek_weak()
            if candidate is not None and equals(key, candidate):
                return entry
        return None

    def _drop(self, key: Any) -> bool:
        """Remove every entry in *key*'s chain that is dead or has an equal key.

        Dead entries share the chain's hash, which is all that is left to
        match a reclaimed key against; they are dropped as well.  Returns
        whether anything was removed.
        """
        hash_code = self._keys_comparer.hash_code(key)
        chain = self._store.get(hash_code)
        if not chain:
            return False
        equals = self._keys_comparer.equals
        kept = []
        for entry in chain:
            candidate = entry.key.peek_weak()
            if candidate is None or not entry.is_alive() or equals(key, candidate):
                continue
            kept.append(entry)
        self._replace(hash_code, kept)
        return len(kept) != len(chain)

    def _insert(self, entry: KeyedEntry) -> None:
        self._store[entry.hash_code] = self._store.get(entry.hash_code, ()) + (entry,)

    def _replace(self, hash_code: int, chain: List[KeyedEntry]) -> None:
        if chain:
            self._store[hash_code] = tuple(chain)
        else:
            self._store.pop(hash_code, None)

    def _entries(self) -> Iterator[KeyedEntry]:
        for chain in self._store.values():
            yield from chain

    def _prune(self, expired: Callable[[Any], bool]) -> int:
        removed = 0
        for hash_code, chain in list(self._store.items()):
            kept = [entry for entry in chain if not expired(entry)]
            if len(kept) != len(chain):
                removed += len(chain) - len(kept)
                self._replace(hash_code, kept)
        return removed

    def _release_all(self) -> None:
        """Release the transient strong handles of every remaining entry."""
        for entry in self._snapshot():
            entry.release()

    def _snapshot(self) -> List[KeyedEntry]:
        """Entries as of now, without taking the lock."""
        return [entry for chain in list(self._store.values()) for entry in chain]

    @property
    def raw_count(self) -> int:
        with self._lock:
            return sum(len(chain) for chain in self._store.values())

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


__all__ = ["HashedStore", "KeyedEntry", "SlotLike"]
