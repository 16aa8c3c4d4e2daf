"""Expiry policy shared by a container and the slots it creates."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Mapping

from jsonschema import ValidationError

from ..config import DEFAULT_CYCLES, DEFAULT_PULSE_GENERATION, DEFAULT_TICKS, POLICY_SCHEMA_VERSION
from ..errors import PolicyValidationError
from .schema import merge_with_defaults

if TYPE_CHECKING:
    from ..pulse.listener import CyclePulseListener


@dataclass(frozen=True)
class ExpiryPolicy:
    """Debounce thresholds for pulse-driven cleanup.

    ``cycles`` and ``ticks`` are copied onto each listener the policy is
    applied to.  ``pulse_generation`` is hub-wide and is only read by
    :meth:`softrefs.pulse.PulseHub.configure_from`.
    """

    cycles: int = DEFAULT_CYCLES
    ticks: float = DEFAULT_TICKS
    pulse_generation: int = DEFAULT_PULSE_GENERATION

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "ExpiryPolicy":
        """Build a policy from plain data, filling in defaults.

        Raises :class:`PolicyValidationError` when the merged data does not
        satisfy the policy schema.
        """
        payload = dict(data) if data else {}
        payload.setdefault("schema", POLICY_SCHEMA_VERSION)
        try:
            merged = merge_with_defaults(payload)
        except ValidationError as exc:
            raise PolicyValidationError(exc.message) from exc
        return cls(
            cycles=int(merged["cycles"]),
            ticks=float(merged["ticks"]),
            pulse_generation=int(merged["pulse_generation"]),
        )

    def to_mapping(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["schema"] = POLICY_SCHEMA_VERSION
        return payload

    def apply(self, listener: "CyclePulseListener") -> None:
        listener.configure_cycles(self.cycles)
        listener.configure_ticks(self.ticks)


__all__ = ["ExpiryPolicy"]
