"""Equality strategy injected into every container."""

from __future__ import annotations

import operator
from typing import Any, Callable, Optional

EqualsFn = Callable[[Any, Any], bool]
HashFn = Callable[[Any], int]


class Comparer:
    """Pair of ``equals``/``hash_code`` callables.

    Without overrides this is plain Python equality, which for classes that
    do not define ``__eq__`` is identity.
    """

    __slots__ = ("_equals", "_hash_code")

    def __init__(self, equals: Optional[EqualsFn] = None, hash_code: Optional[HashFn] = None) -> None:
        self._equals = equals or operator.eq
        self._hash_code = hash_code or hash

    def equals(self, a: Any, b: Any) -> bool:
        return bool(self._equals(a, b))

    def hash_code(self, obj: Any) -> int:
        return self._hash_code(obj)

    def __repr__(self) -> str:
        return f"Comparer(equals={self._equals!r}, hash_code={self._hash_code!r})"


DEFAULT_COMPARER = Comparer()
IDENTITY_COMPARER = Comparer(operator.is_, id)

__all__ = ["DEFAULT_COMPARER", "IDENTITY_COMPARER", "Comparer", "EqualsFn", "HashFn"]
