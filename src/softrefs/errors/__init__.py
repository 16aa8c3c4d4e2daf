"""Custom exception hierarchy for softrefs."""

from __future__ import annotations


class SoftRefError(Exception):
    """Base class for all custom errors raised by softrefs."""


class InvalidArgumentError(SoftRefError, ValueError):
    """Raised when a required argument is ``None`` or out of range."""


class DuplicateKeyError(SoftRefError, ValueError):
    """Raised by ``add`` when a live entry with an equal key already exists."""


class EntryNotFoundError(SoftRefError, KeyError):
    """Raised when a lookup that requires presence finds no live entry."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead.
        return Exception.__str__(self)


class PolicyError(SoftRefError):
    """Base class for expiry policy failures."""


class PolicyValidationError(PolicyError, InvalidArgumentError):
    """Raised when policy data fails schema validation."""


def require(value: object, name: str) -> None:
    """Raise :class:`InvalidArgumentError` when *value* is ``None``."""
    if value is None:
        raise InvalidArgumentError(f"{name} cannot be None")


__all__ = [
    "DuplicateKeyError",
    "EntryNotFoundError",
    "InvalidArgumentError",
    "PolicyError",
    "PolicyValidationError",
    "SoftRefError",
    "require",
]
