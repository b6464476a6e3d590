"""Simulation configuration.

`SimulationConfig` is an immutable value object: the controller validates it
once in `configure()` and the engine reads it for the whole run. Configurations
can be stored as JSON files (`save_config` / `load_config`) so a scenario can
be replayed from the command line.
"""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .distributions import Distribution, normalize_family
from .errors import ConfigError


@dataclass(frozen=True)
class SimulationConfig:
    # Arrivals
    arrival_distribution: str = "exponential"
    arrival_param: float = 5.0

    # Entrance (short, fixed-family service)
    entrance_distribution: str = "exponential"
    entrance_param: float = 1.0

    # Shopping area and checkouts share one family; multipliers scale its param.
    service_distribution: str = "normal"
    service_param: float = 8.0
    shopping_multiplier: float = 1.0
    regular_multiplier: float = 1.0
    express_multiplier: float = 0.7
    self_checkout_multiplier: float = 1.2

    # Customers
    express_customer_percentage: float = 20.0
    min_regular_items: int = 10
    max_regular_items: int = 30
    min_express_items: int = 1
    max_express_items: int = 10
    express_item_threshold: int = 10

    # Shopping time = base + per_item * items
    shopping_base_time: float = 10.0
    shopping_time_per_item: float = 2.0

    # Run control
    simulation_time: float = 1000.0
    delay_ms: int = 0
    seed: int | None = None

    def validate(self) -> SimulationConfig:
        """Raise `ConfigError` on the first invalid field; return self otherwise."""
        for name in _INT_FIELDS:
            if not _is_int(getattr(self, name)):
                raise ConfigError(f"{name} must be an integer")
        if self.seed is not None and not _is_int(self.seed):
            raise ConfigError("seed must be an integer")

        for family in (self.arrival_distribution, self.entrance_distribution, self.service_distribution):
            normalize_family(family)

        for name in (
            "arrival_param",
            "entrance_param",
            "service_param",
            "shopping_multiplier",
            "regular_multiplier",
            "express_multiplier",
            "self_checkout_multiplier",
            "simulation_time",
        ):
            if not getattr(self, name) > 0:
                raise ConfigError(f"{name} must be > 0")

        if not 0 <= self.express_customer_percentage <= 100:
            raise ConfigError("express_customer_percentage must be within [0, 100]")

        for kind in ("regular", "express"):
            lo = getattr(self, f"min_{kind}_items")
            hi = getattr(self, f"max_{kind}_items")
            if lo < 1:
                raise ConfigError(f"min_{kind}_items must be >= 1")
            if hi < lo:
                raise ConfigError(f"max_{kind}_items must be >= min_{kind}_items")

        if self.express_item_threshold < 0:
            raise ConfigError("express_item_threshold must be >= 0")
        if self.shopping_base_time < 0 or self.shopping_time_per_item < 0:
            raise ConfigError("shopping times must be >= 0")
        if self.delay_ms < 0:
            raise ConfigError("delay_ms must be >= 0")
        return self

    # -------------------- derived distributions --------------------

    def arrival(self) -> Distribution:
        return Distribution(self.arrival_distribution, self.arrival_param)

    def entrance(self) -> Distribution:
        return Distribution(self.entrance_distribution, self.entrance_param)

    def service(self, multiplier: float = 1.0) -> Distribution:
        return Distribution(self.service_distribution, self.service_param * multiplier)

    @property
    def regular_items(self) -> tuple[int, int]:
        return self.min_regular_items, self.max_regular_items

    @property
    def express_items(self) -> tuple[int, int]:
        return self.min_express_items, self.max_express_items

    # -------------------- (de)serialization --------------------

    def with_overrides(self, **changes: Any) -> SimulationConfig:
        """Copy with the given fields replaced. `None` values are ignored."""
        changes = {k: v for k, v in changes.items() if v is not None}
        unknown = set(changes) - _field_names()
        if unknown:
            raise ConfigError(f"unknown config keys: {', '.join(sorted(unknown))}")
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SimulationConfig:
        if not isinstance(data, dict):
            raise ConfigError("config must be a JSON object")
        unknown = set(data) - _field_names()
        if unknown:
            raise ConfigError(f"unknown config keys: {', '.join(sorted(unknown))}")
        try:
            return cls(**data).validate()
        except TypeError as e:
            raise ConfigError(str(e)) from e


_INT_FIELDS = (
    "min_regular_items",
    "max_regular_items",
    "min_express_items",
    "max_express_items",
    "express_item_threshold",
    "delay_ms",
)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _field_names() -> set[str]:
    return {f.name for f in dataclasses.fields(SimulationConfig)}


def load_config(path: str | Path) -> SimulationConfig:
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"configuration file not found: {p}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON in {p}: {e}") from e
    return SimulationConfig.from_dict(data)


def save_config(config: SimulationConfig, path: str | Path) -> Path:
    p = Path(path)
    if p.parent and not p.parent.exists():
        p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(config.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
    return p


# -------------------- named configurations --------------------

DEFAULT_CONFIG_DIR = Path("configs")


def config_path(name: str, directory: str | Path = DEFAULT_CONFIG_DIR) -> Path:
    """Path of the named configuration `<directory>/<name>.json`."""
    if not name or Path(name).name != name:
        raise ConfigError(f"invalid configuration name {name!r}")
    return Path(directory) / f"{name}.json"


def list_configs(directory: str | Path = DEFAULT_CONFIG_DIR) -> list[str]:
    """Names of the saved configurations, sorted. Empty if the directory is missing."""
    d = Path(directory)
    if not d.is_dir():
        return []
    return sorted(p.stem for p in d.glob("*.json") if p.is_file())


def delete_config(name: str, directory: str | Path = DEFAULT_CONFIG_DIR) -> bool:
    """Remove a saved configuration. Returns False if it did not exist."""
    p = config_path(name, directory)
    try:
        p.unlink()
    except FileNotFoundError:
        return False
    return True
