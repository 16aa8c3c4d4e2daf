"""Single weak handle with pulse-bounded protection."""

from __future__ import annotations

import weakref
from typing import Any, Optional

from ..errors import require
from ..pulse.listener import CyclePulseListener


class WeakHandle:
    """Weak reference to *target* plus a transient strong handle.

    The handle holds *target* strongly from construction until its first
    :meth:`release`.  :meth:`read` re-establishes the strong handle and marks
    the handle as used; a release that finds it used only clears the mark,
    so a target read between two releases survives the second one too and
    is dropped on the following one if it is not read again.  CPython
    reclaims an object the moment its last strong reference goes, which is
    why one release of grace is needed for "read every interval" to keep a
    target alive.

    A handle is not a listener.  Containers own their handles, guard them
    with their own lock and release them from their own cleanup hook.

    Raises :class:`TypeError` if *target* does not support weak references
    (e.g. ``int``, ``str``, ``tuple``).
    """

    __slots__ = ("_ref", "_strong", "_used")

    def __init__(self, target: Any) -> None:
        require(target, "target")
        self._ref = weakref.ref(target)
        self._strong: Optional[Any] = target
        self._used = False

    def read(self) -> Optional[Any]:
        target = self._ref()
        self._strong = target
        self._used = target is not None
        return target

    def is_alive(self) -> bool:
        return self._ref() is not None

    def peek_weak(self) -> Optional[Any]:
        return self._ref()

    @property
    def protected(self) -> bool:
        return self._strong is not None

    def release(self) -> None:
        if self._used:
            self._used = False
            return
        self._strong = None

    def describe(self) -> str:
        target = self._ref()
        if target is None:
            return "dead None"
        state = "strong" if self._strong is not None else "weak"
        return f"{state} {target!r}"

    def __repr__(self) -> str:
        return f"<WeakHandle {self.describe()}>"


class WeakSlot(CyclePulseListener):
    """Standalone :class:`WeakHandle` released by its own cleanup hook.

    :meth:`is_alive` and :meth:`peek_weak` never touch the strong handle.
    """

    def __init__(self, target: Any, **kwargs: Any) -> None:
        self._handle = WeakHandle(target)
        super().__init__(**kwargs)

    def read(self) -> Optional[Any]:
        """Return the target, protecting it through the next cleanup."""
        with self._lock:
            return self._handle.read()

    def is_alive(self) -> bool:
        return self._handle.is_alive()

    def peek_weak(self) -> Optional[Any]:
        """Return the target without extending its lifetime."""
        return self._handle.peek_weak()

    @property
    def protected(self) -> bool:
        """Whether a strong handle is currently held."""
        return self._handle.protected

    def on_cleanup(self) -> None:
        self._handle.release()

    def __repr__(self) -> str:
        return f"<WeakSlot {self._handle.describe()}>"


class StrongSlot:
    """Slot-shaped holder for the strongly-held side of a map entry."""

    __slots__ = ("_target",)

    def __init__(self, target: Any) -> None:
        self._target = target

    def read(self) -> Any:
        return self._target

    def is_alive(self) -> bool:
        return True

    def peek_weak(self) -> Any:
        return self._target

    def release(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"<StrongSlot {self._target!r}>"


__all__ = ["StrongSlot", "WeakHandle", "WeakSlot"]
