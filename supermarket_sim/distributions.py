from __future__ import annotations

"""Random duration models.

Every configurable duration (inter-arrival times, service times) is described
by a distribution *family* and a single shape parameter `param`:

- exponential: mean `param` (a Poisson arrival stream when used for
  inter-arrival times). `negexp` is accepted as an alias.
- normal: mean `param`, standard deviation `param / 3`. Samples are clamped at
  0 because a negative duration would schedule an event in the past.
- uniform: anywhere in `[0.5 * param, 1.5 * param]`.
- constant: always `param`. Handy for deterministic runs and tests.
"""

import random
from dataclasses import dataclass
from typing import Callable

from .errors import ConfigError

FAMILIES = ("exponential", "normal", "uniform", "constant")

_ALIASES = {"negexp": "exponential"}

Sampler = Callable[[], float]


def normalize_family(name: str) -> str:
    """Return the canonical family name or raise `ConfigError`."""
    key = str(name).strip().lower()
    key = _ALIASES.get(key, key)
    if key not in FAMILIES:
        raise ConfigError(f"unknown distribution {name!r} (expected one of {', '.join(FAMILIES)})")
    return key


@dataclass(frozen=True)
class Distribution:
    family: str
    param: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "family", normalize_family(self.family))
        if not self.param > 0:
            raise ConfigError(f"{self.family} parameter must be > 0, got {self.param}")

    def sample(self, rng: random.Random | None = None) -> float:
        """Draw one non-negative duration.

        Args:
            rng: optional RNG (pass a seeded `random.Random` for reproducible runs).
        """
        r = rng or random
        p = float(self.param)
        if self.family == "exponential":
            # expovariate takes the rate, i.e. 1 / mean.
            return float(r.expovariate(1.0 / p))
        if self.family == "normal":
            return max(0.0, float(r.gauss(p, p / 3.0)))
        if self.family == "uniform":
            return float(r.uniform(0.5 * p, 1.5 * p))
        return p

    def sampler(self, rng: random.Random | None = None) -> Sampler:
        """Bind this distribution to an RNG as a zero-argument callable."""
        return lambda: self.sample(rng)

    def scaled(self, factor: float) -> Distribution:
        return Distribution(self.family, self.param * factor)
