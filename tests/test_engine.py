import time

import pytest

from supermarket_sim.engine import Engine, EngineState
from supermarket_sim.errors import ConfigError, SimulationStateError
from supermarket_sim.events import Event, EventType
from supermarket_sim.notifier import Notifier


class TickEngine(Engine):
    """One ARRIVAL per time unit, plus any extra events queued at t=0."""

    def __init__(self, *, extra=(), fail_at=None, **kwargs):
        super().__init__(**kwargs)
        self.extra = list(extra)
        self.fail_at = fail_at
        self.handled = []
        self.results_calls = 0

    def on_reset(self):
        self.handled = []

    def initialization(self):
        self.event_list.push(Event(EventType.ARRIVAL, 0.0))
        for event_type in self.extra:
            self.event_list.push(Event(event_type, 0.0))

    def run_event(self, event):
        if self.fail_at is not None and event.time >= self.fail_at:
            raise RuntimeError("boom")
        self.handled.append((event.time, event.type))
        if event.type is EventType.ARRIVAL:
            self.event_list.push(Event(EventType.ARRIVAL, event.time + 1.0))

    def results(self):
        self.results_calls += 1


class Estimates(Notifier):
    def __init__(self):
        self.seen = []

    def on_time_remaining_estimate(self, seconds_left):
        self.seen.append(seconds_left)


def arrival_times(engine):
    return [t for t, kind in engine.handled if kind is EventType.ARRIVAL]


def test_run_until_simulation_time():
    engine = TickEngine(simulation_time=10.0)
    engine.run()

    assert engine.state is EngineState.STOPPED
    assert engine.clock.now() == 10.0
    assert arrival_times(engine) == [float(t) for t in range(11)]
    assert engine.results_calls == 1


def test_simultaneous_events_run_in_scheduling_order():
    extra = [EventType.SELF_CHECKOUT_DONE, EventType.ENTRANCE_DONE, EventType.SHOPPING_DONE]
    engine = TickEngine(simulation_time=1.0, extra=extra)
    engine.run()

    at_zero = [kind for t, kind in engine.handled if t == 0.0]
    assert at_zero == [EventType.ARRIVAL, *extra]


def test_second_run_starts_fresh():
    engine = TickEngine(simulation_time=5.0)
    engine.run()
    first = list(engine.handled)
    engine.run()
    assert engine.handled == first
    assert engine.results_calls == 2


def test_model_error_propagates_and_stops_engine():
    engine = TickEngine(simulation_time=10.0, fail_at=3.0)
    with pytest.raises(RuntimeError, match="boom"):
        engine.run()
    assert engine.state is EngineState.STOPPED
    assert isinstance(engine.error, RuntimeError)
    assert engine.results_calls == 0


def test_background_error_is_recorded():
    engine = TickEngine(simulation_time=10.0, fail_at=3.0)
    engine.start()
    assert engine.join(timeout=5)
    assert engine.state is EngineState.STOPPED
    assert isinstance(engine.error, RuntimeError)


def test_pause_freezes_clock_and_resume_continues():
    engine = TickEngine(simulation_time=1e9, delay_ms=5)
    engine.start()
    time.sleep(0.1)

    engine.pause()
    assert engine.state is EngineState.PAUSED
    time.sleep(0.05)
    frozen = engine.clock.now()
    time.sleep(0.1)
    assert engine.clock.now() == frozen

    engine.resume()
    time.sleep(0.1)
    engine.pause()
    time.sleep(0.05)
    assert engine.clock.now() > frozen

    times = arrival_times(engine)
    engine.reset()
    assert times == [float(t) for t in range(len(times))]


def test_reset_while_paused_stops_worker():
    engine = TickEngine(simulation_time=1e9, delay_ms=5)
    engine.start()
    time.sleep(0.05)
    engine.pause()

    engine.reset()

    assert engine.join(timeout=0)
    assert engine.state is EngineState.STOPPED
    assert engine.clock.now() == 0.0
    assert len(engine.event_list) == 0
    assert engine.results_calls == 0


def test_invalid_transitions():
    engine = TickEngine(simulation_time=1e9, delay_ms=50)
    with pytest.raises(SimulationStateError):
        engine.pause()
    with pytest.raises(SimulationStateError):
        engine.resume()

    engine.start()
    try:
        with pytest.raises(SimulationStateError):
            engine.start()
        with pytest.raises(SimulationStateError):
            engine.resume()
    finally:
        engine.reset()


def test_rejects_bad_settings():
    with pytest.raises(ConfigError):
        TickEngine(simulation_time=0)
    with pytest.raises(ConfigError):
        TickEngine(simulation_time=10.0, delay_ms=-1)
    engine = TickEngine(simulation_time=10.0)
    with pytest.raises(ConfigError):
        engine.set_pacing_delay(-5)
    engine.set_pacing_delay(20)
    assert engine.delay_ms == 20


def test_estimate_time_remaining():
    engine = TickEngine(simulation_time=100.0, delay_ms=1000)
    assert engine.estimate_time_remaining() is None

    engine.start()
    try:
        assert engine.estimate_time_remaining() == 100
    finally:
        engine.reset()
    assert engine.estimate_time_remaining() is None


def test_estimator_reports_while_running():
    estimates = Estimates()
    engine = TickEngine(simulation_time=100.0, delay_ms=1000, notifier=estimates, estimate_interval=0.01)
    engine.start()
    time.sleep(0.1)
    engine.reset()

    assert 100 in estimates.seen


def test_estimator_stops_while_paused():
    estimates = Estimates()
    engine = TickEngine(simulation_time=1e9, delay_ms=5, notifier=estimates, estimate_interval=0.01)
    engine.start()
    try:
        time.sleep(0.05)
        engine.pause()
        time.sleep(0.03)
        seen = len(estimates.seen)
        time.sleep(0.1)
        assert len(estimates.seen) == seen

        engine.resume()
        time.sleep(0.1)
        assert len(estimates.seen) > seen
    finally:
        engine.reset()


def test_estimator_stops_after_completion_and_reset():
    estimates = Estimates()
    engine = TickEngine(simulation_time=20.0, delay_ms=5, notifier=estimates, estimate_interval=0.01)
    engine.start()
    assert engine.join(timeout=5)
    time.sleep(0.03)
    seen = len(estimates.seen)
    time.sleep(0.1)
    assert len(estimates.seen) == seen

    engine.start()
    time.sleep(0.05)
    engine.reset()
    time.sleep(0.03)
    seen = len(estimates.seen)
    time.sleep(0.1)
    assert len(estimates.seen) == seen
