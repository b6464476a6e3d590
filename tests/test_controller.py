import time

import pytest

from supermarket_sim.config import SimulationConfig
from supermarket_sim.controller import SimulationController
from supermarket_sim.engine import EngineState
from supermarket_sim.errors import ConfigError, SimulationStateError


def test_status_before_start():
    controller = SimulationController()
    status = controller.status()
    assert status["type"] == "status"
    assert status["state"] == "stopped"
    assert status["time_left"] is None
    assert status["service_points"] == {}
    assert status["report"]["completed"] == 0


def test_control_before_start_is_rejected():
    controller = SimulationController()
    with pytest.raises(SimulationStateError):
        controller.pause()
    with pytest.raises(SimulationStateError):
        controller.resume()
    assert controller.join(timeout=0)


def test_configure_validates():
    controller = SimulationController()
    with pytest.raises(ConfigError):
        controller.configure(SimulationConfig(arrival_param=-1.0))
    controller.configure(SimulationConfig(seed=4))
    assert controller.config.seed == 4


def test_run_to_completion(tmp_path):
    report = tmp_path / "customers.csv"
    controller = SimulationController(
        config=SimulationConfig(simulation_time=500.0, seed=1),
        report_csv=report,
    )
    controller.start()
    assert controller.join(timeout=10)

    status = controller.status()
    assert status["state"] == "stopped"
    assert status["clock"] >= 500.0
    assert status["report"]["completed"] > 0
    assert set(status["service_points"]) == {
        "entrance",
        "shopping",
        "regular_checkout",
        "express_checkout",
        "self_checkout",
    }
    assert status["service_points"]["entrance"]["served"] > 0
    assert report.exists()


def test_paced_run_can_be_paused_and_reconfigured_only_when_stopped():
    controller = SimulationController(config=SimulationConfig(simulation_time=1e6, delay_ms=5, seed=2))
    controller.start()
    try:
        with pytest.raises(SimulationStateError):
            controller.start()
        with pytest.raises(SimulationStateError):
            controller.configure(SimulationConfig())

        time.sleep(0.05)
        controller.pause()
        assert controller.state is EngineState.PAUSED

        controller.set_pacing_delay(25)
        assert controller.config.delay_ms == 25
        assert controller.model.delay_ms == 25

        controller.resume()
        assert controller.state is EngineState.RUNNING
    finally:
        controller.reset()

    assert controller.state is EngineState.STOPPED
    controller.configure(SimulationConfig(seed=9))


def test_negative_delay_is_rejected():
    controller = SimulationController()
    with pytest.raises(ConfigError):
        controller.set_pacing_delay(-10)
    assert controller.config.delay_ms == 0
