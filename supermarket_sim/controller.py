from __future__ import annotations

# The controller is the control surface of the simulator.
#
# Every front end (CLI, Tkinter dashboard, MQTT service) talks to a
# `SimulationController`:
#   configure(config) -> start() -> pause()/resume()/set_pacing_delay() -> reset()
# plus `status()` for a JSON-friendly snapshot.
#
# A new `StoreModel` is built on each start, from the configuration that was
# in effect at that moment, so a configuration never changes mid-run.

import logging
import threading
from pathlib import Path
from typing import Any

from .config import SimulationConfig
from .engine import EngineState
from .errors import SimulationStateError
from .model import StoreModel
from .notifier import Notifier
from .report import CustomerReport

logger = logging.getLogger(__name__)


class SimulationController:
    def __init__(
        self,
        *,
        config: SimulationConfig | None = None,
        notifier: Notifier | None = None,
        report_csv: str | Path | None = None,
        estimate_interval: float = 1.0,
    ) -> None:
        self._lock = threading.Lock()
        self.config = (config or SimulationConfig()).validate()
        self.notifier = notifier or Notifier()
        self.report_csv = report_csv
        self.estimate_interval = estimate_interval
        self.model: StoreModel | None = None

    @property
    def state(self) -> EngineState:
        model = self.model
        return model.state if model is not None else EngineState.STOPPED

    # -------------------- control surface --------------------

    def configure(self, config: SimulationConfig) -> None:
        """Replace the configuration used by the next `start()`."""
        config.validate()
        with self._lock:
            if self.state is not EngineState.STOPPED:
                raise SimulationStateError("cannot configure while a simulation is running")
            self.config = config
        logger.info("configuration updated")

    def start(self) -> StoreModel:
        with self._lock:
            if self.state is not EngineState.STOPPED:
                raise SimulationStateError(f"cannot start: simulation is {self.state.value}")
            model = StoreModel(
                self.config,
                notifier=self.notifier,
                report=CustomerReport(self.report_csv),
                estimate_interval=self.estimate_interval,
            )
            self.model = model
        model.start()
        return model

    def pause(self) -> None:
        self._require_model().pause()

    def resume(self) -> None:
        self._require_model().resume()

    def set_pacing_delay(self, delay_ms: int) -> None:
        """Change real-time pacing. Applies to the running model and to later runs."""
        with self._lock:
            self.config = self.config.with_overrides(delay_ms=int(delay_ms)).validate()
            model = self.model
        if model is not None:
            model.set_pacing_delay(delay_ms)

    def reset(self) -> None:
        model = self.model
        if model is not None:
            model.reset()

    def join(self, timeout: float | None = None) -> bool:
        model = self.model
        return model.join(timeout) if model is not None else True

    def _require_model(self) -> StoreModel:
        model = self.model
        if model is None:
            raise SimulationStateError("no simulation has been started")
        return model

    # -------------------- observation --------------------

    def status(self) -> dict[str, Any]:
        """Return a JSON-friendly snapshot of the current run."""
        model = self.model
        cfg = self.config
        if model is None:
            return {
                "type": "status",
                "state": EngineState.STOPPED.value,
                "clock": 0.0,
                "simulation_time": cfg.simulation_time,
                "delay_ms": cfg.delay_ms,
                "time_left": None,
                "customers_in_store": 0,
                "report": CustomerReport().summary(),
                "service_points": {},
            }

        now = model.clock.now()
        return {
            "type": "status",
            "state": model.state.value,
            "clock": now,
            "simulation_time": model.simulation_time,
            "delay_ms": model.delay_ms,
            "time_left": model.estimate_time_remaining(),
            "customers_in_store": len(model.customers),
            "report": model.report.summary(),
            "service_points": {
                point_type.value: {
                    "queue_len": point.queue_length,
                    "busy": point.is_busy(),
                    "served": point.served_count,
                    "mean_service_time": point.mean_service_time(),
                    "utilization": point.utilization(now),
                    "max_queue_len": point.max_queue_length,
                }
                for point_type, point in model.points.items()
            },
        }
