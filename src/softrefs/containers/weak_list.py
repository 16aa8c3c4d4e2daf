"""Ordered sequence of weakly-held items."""

from __future__ import annotations

from typing import Any, Callable, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar

from ..errors import InvalidArgumentError, require
from ..pulse.listener import CyclePulseListener
from ..utils.comparer import DEFAULT_COMPARER, Comparer
from .slot import WeakHandle

T = TypeVar("T")
Predicate = Callable[[T], bool]


class WeakList(CyclePulseListener, Generic[T]):
    """List whose items are held through :class:`WeakHandle` objects.

    Each item is protected until the list's next cleanup, and again after
    every read.  Once an item is reclaimed it disappears from iteration,
    lookups and ``len()`` immediately; its slot is purged from the backing
    store by this list's own cleanup hook.  :attr:`raw_count` includes
    slots that are dead but not yet purged.

    Integer indices address live items only: ``lst[0]`` is the first item
    that is still alive.

    The handles are not listeners: the list's own cleanup purges dead
    handles and then releases the survivors, so one registration with the
    hub serves the whole list however long it grows.
    """

    def __init__(
        self,
        iterable: Optional[Iterable[T]] = None,
        comparer: Comparer = DEFAULT_COMPARER,
        **kwargs: Any,
    ) -> None:
        require(comparer, "comparer")
        self._comparer = comparer
        self._slots: List[WeakHandle] = []
        super().__init__(**kwargs)
        if iterable is not None:
            self.extend(iterable)

    @property
    def comparer(self) -> Comparer:
        return self._comparer

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def on_cleanup(self) -> None:
        survivors = [slot for slot in self._slots if slot.is_alive()]
        self._slots[:] = survivors
        for slot in survivors:
            slot.release()

    def _observed_empty(self) -> bool:
        """Report emptiness without ever waiting for the lock.

        Used from other listeners' cleanup hooks; a contended lock counts as
        "not empty" so the caller simply retries on a later pulse.
        """
        if not self._lock.acquire(blocking=False):
            return False
        try:
            return not any(slot.is_alive() for slot in self._slots)
        finally:
            self._lock.release()

    # ------------------------------------------------------------------
    # Counts and enumeration
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for slot in self._slots if slot.is_alive())

    @property
    def raw_count(self) -> int:
        with self._lock:
            return len(self._slots)

    def __iter__(self) -> Iterator[T]:
        return iter(self.to_list())

    def to_list(self) -> List[T]:
        """Return the live items, protecting each through the next cleanup."""
        with self._lock:
            items = []
            for slot in self._slots:
                if not slot.is_alive():
                    continue
                target = slot.read()
                if target is not None:
                    items.append(target)
            return items

    def __repr__(self) -> str:
        slots = list(self._slots)
        live = sum(1 for slot in slots if slot.is_alive())
        return f"<WeakList count={live} raw={len(slots)}>"

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _matches(self, predicate: Predicate) -> Iterator[Tuple[int, T]]:
        """Yield ``(live_index, item)`` for items satisfying *predicate*.

        The predicate sees the weakly-peeked item; a match is re-read through
        the slot before it is reported.  Callers must hold the lock.
        """
        index = 0
        for slot in self._slots:
            weak = slot.peek_weak()
            if weak is None:
                continue
            if predicate(weak):
                target = slot.read()
                if target is not None:
                    yield index, target
            index += 1

    def find(self, predicate: Predicate) -> Optional[T]:
        require(predicate, "predicate")
        with self._lock:
            for _, target in self._matches(predicate):
                return target
            return None

    def find_last(self, predicate: Predicate) -> Optional[T]:
        require(predicate, "predicate")
        last = None
        with self._lock:
            for _, target in self._matches(predicate):
                last = target
            return last

    def find_all(self, predicate: Predicate) -> List[T]:
        require(predicate, "predicate")
        with self._lock:
            return [target for _, target in self._matches(predicate)]

    def _equal_to(self, item: T) -> Predicate:
        equals = self._comparer.equals
        return lambda candidate: equals(item, candidate)

    def __contains__(self, item: object) -> bool:
        if item is None:
            return False
        return self.find(self._equal_to(item)) is not None

    def index_of(self, item: T) -> int:
        """Live index of the first item equal to *item*, or ``-1``."""
        require(item, "item")
        with self._lock:
            for index, _ in self._matches(self._equal_to(item)):
                return index
            return -1

    def last_index_of(self, item: T) -> int:
        require(item, "item")
        last = -1
        with self._lock:
            for index, _ in self._matches(self._equal_to(item)):
                last = index
            return last

    def count_of(self, item: T) -> int:
        require(item, "item")
        with self._lock:
            return sum(1 for _ in self._matches(self._equal_to(item)))

    # ------------------------------------------------------------------
    # Indexed access
    # ------------------------------------------------------------------

    def _live_positions(self) -> List[int]:
        return [pos for pos, slot in enumerate(self._slots) if slot.is_alive()]

    def _position(self, index: int) -> int:
        positions = self._live_positions()
        try:
            return positions[index]
        except IndexError:
            raise IndexError(f"WeakList index {index} out of range") from None

    def __getitem__(self, index):
        if isinstance(index, slice):
            return self.to_list()[index]
        with self._lock:
            target = self._slots[self._position(index)].read()
        if target is None:
            raise IndexError(f"WeakList item {index} was reclaimed")
        return target

    def __setitem__(self, index: int, item: T) -> None:
        slot = self._new_slot(item)
        with self._lock:
            self._slots[self._position(index)] = slot

    def __delitem__(self, index: int) -> None:
        with self._lock:
            del self._slots[self._position(index)]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _new_slot(self, item: T) -> WeakHandle:
        require(item, "item")
        return WeakHandle(item)

    def append(self, item: T) -> None:
        slot = self._new_slot(item)
        with self._lock:
            self._slots.append(slot)

    def add_unique(self, item: T) -> bool:
        """Append *item* unless an equal live item is present."""
        slot = self._new_slot(item)
        with self._lock:
            for _ in self._matches(self._equal_to(item)):
                return False
            self._slots.append(slot)
            return True

    def insert(self, index: int, item: T) -> None:
        """Insert before the live item at *index*, with ``list.insert`` clamping."""
        slot = self._new_slot(item)
        with self._lock:
            positions = self._live_positions()
            count = len(positions)
            if index < 0:
                index = max(index + count, 0)
            if index >= count:
                self._slots.append(slot)
            else:
                self._slots.insert(positions[index], slot)

    def extend(self, items: Iterable[T]) -> None:
        require(items, "items")
        slots = []
        for i, item in enumerate(items):
            if item is None:
                raise InvalidArgumentError(f"item #{i} is None")
            slots.append(self._new_slot(item))
        with self._lock:
            self._slots.extend(slots)

    def remove(self, item: T) -> bool:
        """Remove the first live item equal to *item*; return whether one was."""
        require(item, "item")
        equals = self._comparer.equals
        with self._lock:
            for pos, slot in enumerate(self._slots):
                weak = slot.peek_weak()
                if weak is not None and equals(item, weak):
                    del self._slots[pos]
                    return True
            return False

    def remove_all(self, item: T) -> int:
        """Remove every live item equal to *item*; return how many were."""
        require(item, "item")
        equals = self._comparer.equals
        with self._lock:
            kept = []
            for slot in self._slots:
                weak = slot.peek_weak()
                if weak is not None and equals(item, weak):
                    continue
                kept.append(slot)
            removed = len(self._slots) - len(kept)
            self._slots[:] = kept
            return removed

    def reverse(self) -> None:
        with self._lock:
            self._slots.reverse()

    def clear(self) -> None:
        with self._lock:
            self._slots.clear()


__all__ = ["Predicate", "WeakList"]
