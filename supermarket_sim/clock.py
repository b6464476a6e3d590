from __future__ import annotations

# Simulation clock.
#
# One clock per engine. The engine's worker thread is the only writer; service
# points, the arrival process and the remaining-time estimator only read it.

from .errors import InvariantViolation


class Clock:
    """Current simulated time. Starts at 0 and never moves backwards."""

    def __init__(self) -> None:
        self._time: float = 0.0

    def now(self) -> float:
        return self._time

    def advance_to(self, time: float) -> None:
        if time < self._time:
            raise InvariantViolation(f"clock cannot move backwards ({self._time} -> {time})")
        self._time = float(time)

    def reset(self) -> None:
        self._time = 0.0

    def __repr__(self) -> str:
        return f"Clock(now={self._time})"
