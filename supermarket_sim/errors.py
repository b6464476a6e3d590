"""Shared exceptions and the error envelope.

Configuration problems, broken invariants and bad control transitions each get
their own exception type. The MQTT service turns them into `ErrorResponse`
messages so remote callers see consistent errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class ConfigError(ValueError):
    """Invalid simulation configuration (rejected before a run starts)."""


class InvariantViolation(RuntimeError):
    """The event/clock protocol was broken. Always a programming defect."""


class SimulationStateError(RuntimeError):
    """A control command is not valid in the engine's current state."""


@dataclass(frozen=True)
class ErrorResponse:
    code: str
    message: str

    def to_message(self, *, corr_id: str | None = None) -> dict[str, Any]:
        msg: dict[str, Any] = {"type": "error", "code": self.code, "message": self.message}
        if corr_id is not None:
            msg["corr_id"] = corr_id
        return msg
