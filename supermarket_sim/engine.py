"""Three-phase discrete-event engine.

`Engine` owns the clock, the event list and the service points and runs the
classic loop:

    while now < simulation_time:
        wait while paused
        sleep the pacing delay (real time only)
        A: advance the clock to the next event time
        B: run every event due at that time
        C: start service at every idle service point with a queue

Subclasses supply the model through three hooks: `initialization()`,
`run_event(event)` and `results()`.

Threading: `start()` runs the loop on a daemon worker thread, `run()` runs it
in the caller's thread. Only the worker mutates simulation state. Pause is a
cooperative wait on a `threading.Event` at the top of each iteration, so an
event that has been popped always runs to completion. `reset()` stops and
joins the worker before it clears anything.

A second daemon thread reports the estimated real time left once per
`estimate_interval` seconds while the engine is running.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum

from .clock import Clock
from .errors import ConfigError, SimulationStateError
from .events import Event, EventList
from .notifier import Notifier
from .service_point import ServicePoint

logger = logging.getLogger(__name__)


class EngineState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


def _check_delay(delay_ms: int) -> int:
    if delay_ms < 0:
        raise ConfigError("delay_ms must be >= 0")
    return int(delay_ms)


class Engine(ABC):
    def __init__(
        self,
        *,
        simulation_time: float,
        delay_ms: int = 0,
        notifier: Notifier | None = None,
        estimate_interval: float = 1.0,
    ) -> None:
        if not simulation_time > 0:
            raise ConfigError("simulation_time must be > 0")
        self.simulation_time = float(simulation_time)
        self.delay_ms = _check_delay(delay_ms)
        self.notifier = notifier or Notifier()
        self.estimate_interval = estimate_interval

        self.clock = Clock()
        self.event_list = EventList()
        self.service_points: list[ServicePoint] = []

        self.state = EngineState.STOPPED
        # Set when the worker thread died on an exception.
        self.error: BaseException | None = None

        self._lock = threading.Lock()
        self._resume = threading.Event()
        self._resume.set()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._estimator_stop: threading.Event | None = None

    # -------------------- model hooks --------------------

    @abstractmethod
    def initialization(self) -> None:
        """Schedule the first events of a run."""

    @abstractmethod
    def run_event(self, event: Event) -> None:
        """Handle one B-phase event."""

    @abstractmethod
    def results(self) -> None:
        """Called once when the clock reaches the simulation time."""

    def on_reset(self) -> None:
        """Clear model state. Called before every run and on `reset()`."""

    # -------------------- control --------------------

    def start(self) -> None:
        """Begin a fresh run on a background thread."""
        self._begin()
        self._thread = threading.Thread(
            target=self._run_loop,
            name=f"{type(self).__name__}-worker",
            daemon=True,
        )
        self._thread.start()

    def run(self) -> None:
        """Begin a fresh run and block until it finishes.

        Exceptions raised by the model propagate to the caller.
        """
        self._begin()
        self._run_loop(reraise=True)

    def pause(self) -> None:
        with self._lock:
            if self.state is not EngineState.RUNNING:
                raise SimulationStateError(f"cannot pause: engine is {self.state.value}")
            self.state = EngineState.PAUSED
            self._resume.clear()
        self._cancel_estimator()
        logger.info("paused at t=%.3f", self.clock.now())

    def resume(self) -> None:
        with self._lock:
            if self.state is not EngineState.PAUSED:
                raise SimulationStateError(f"cannot resume: engine is {self.state.value}")
            self.state = EngineState.RUNNING
            self._resume.set()
        self._start_estimator()
        logger.info("resumed at t=%.3f", self.clock.now())

    def set_pacing_delay(self, delay_ms: int) -> None:
        self.delay_ms = _check_delay(delay_ms)

    def reset(self) -> None:
        """Stop any run and return to a clean STOPPED state."""
        worker = self._thread
        self._stop.set()
        self._resume.set()
        if worker is not None and worker is not threading.current_thread():
            worker.join()
        self._cancel_estimator()
        with self._lock:
            self._thread = None
            self.error = None
            self._clear()
            self.state = EngineState.STOPPED
        logger.info("engine reset")

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the worker thread. Returns True once it has finished."""
        worker = self._thread
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()

    def estimate_time_remaining(self) -> int | None:
        """Real seconds left at the current pacing delay, or None if not running."""
        if self.state is not EngineState.RUNNING:
            return None
        left = max(0.0, self.simulation_time - self.clock.now())
        return int(left * self.delay_ms / 1000)

    # -------------------- main loop --------------------

    def _begin(self) -> None:
        with self._lock:
            if self.state is not EngineState.STOPPED:
                raise SimulationStateError(f"cannot start: engine is {self.state.value}")
            self._clear()
            self._stop.clear()
            self._resume.set()
            self.error = None
            self.state = EngineState.RUNNING

    def _clear(self) -> None:
        self.event_list.clear()
        self.clock.reset()
        for point in self.service_points:
            point.reset()
        self.on_reset()

    def _run_loop(self, reraise: bool = False) -> None:
        logger.info("simulation started (simulation_time=%s, delay=%dms)", self.simulation_time, self.delay_ms)
        self._start_estimator()
        try:
            self.initialization()
            while self.clock.now() < self.simulation_time:
                self._resume.wait()
                if self._stop.is_set():
                    logger.info("simulation interrupted at t=%.3f", self.clock.now())
                    return
                self._pace()
                if self._stop.is_set():
                    logger.info("simulation interrupted at t=%.3f", self.clock.now())
                    return
                if not self._resume.is_set():
                    # Paused during the pacing delay: block before touching the clock.
                    continue

                self.clock.advance_to(self.event_list.peek_time())
                self._run_b_events()
                self._try_c_events()
        except Exception as e:
            self.error = e
            with self._lock:
                self.state = EngineState.STOPPED
            if reraise:
                raise
            logger.exception("simulation aborted at t=%.3f", self.clock.now())
            return
        finally:
            self._cancel_estimator()

        with self._lock:
            self.state = EngineState.STOPPED
        logger.info("simulation finished at t=%.3f", self.clock.now())
        self.results()

    def _pace(self) -> None:
        if self.delay_ms > 0:
            self._stop.wait(self.delay_ms / 1000)

    def _run_b_events(self) -> None:
        now = self.clock.now()
        while self.event_list and self.event_list.peek_time() == now:
            event = self.event_list.pop()
            logger.debug("t=%.3f %s", now, event.type.value)
            self.run_event(event)

    def _try_c_events(self) -> None:
        for point in self.service_points:
            if not point.is_busy() and point.has_waiting():
                point.begin_service()

    # -------------------- remaining-time estimator --------------------

    def _start_estimator(self) -> None:
        self._cancel_estimator()
        stop = threading.Event()
        self._estimator_stop = stop
        threading.Thread(
            target=self._estimator_loop,
            args=(stop,),
            name=f"{type(self).__name__}-estimator",
            daemon=True,
        ).start()

    def _cancel_estimator(self) -> None:
        stop = self._estimator_stop
        self._estimator_stop = None
        if stop is not None:
            stop.set()

    def _estimator_loop(self, stop: threading.Event) -> None:
        while not stop.wait(self.estimate_interval):
            try:
                self.notifier.on_time_remaining_estimate(self.estimate_time_remaining())
            except Exception:
                # Estimates are informational only.
                logger.debug("time-remaining estimate failed", exc_info=True)
