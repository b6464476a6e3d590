import json

import pytest

from supermarket_sim.config import SimulationConfig, config_path, delete_config, list_configs, load_config, save_config
from supermarket_sim.distributions import Distribution
from supermarket_sim.errors import ConfigError


def test_defaults_are_valid():
    cfg = SimulationConfig()
    assert cfg.validate() is cfg
    assert cfg.arrival() == Distribution("exponential", 5.0)
    assert cfg.service(0.5) == Distribution("normal", 4.0)
    assert cfg.regular_items == (10, 30)
    assert cfg.express_items == (1, 10)


@pytest.mark.parametrize(
    "changes",
    [
        {"arrival_distribution": "gamma"},
        {"arrival_param": 0},
        {"service_param": -2.0},
        {"simulation_time": 0},
        {"express_customer_percentage": 101},
        {"express_customer_percentage": -1},
        {"min_regular_items": 0},
        {"min_express_items": 5, "max_express_items": 4},
        {"delay_ms": -1},
        {"shopping_time_per_item": -0.5},
        {"min_regular_items": 10.5},
        {"max_express_items": 9.0},
        {"express_item_threshold": True},
        {"delay_ms": 2.5},
        {"seed": 1.5},
    ],
)
def test_validate_rejects(changes):
    with pytest.raises(ConfigError):
        SimulationConfig(**changes).validate()


def test_with_overrides_ignores_none():
    cfg = SimulationConfig().with_overrides(seed=3, arrival_param=None)
    assert cfg.seed == 3
    assert cfg.arrival_param == 5.0


def test_with_overrides_rejects_unknown_keys():
    with pytest.raises(ConfigError):
        SimulationConfig().with_overrides(checkout_count=4)


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ConfigError, match="bogus"):
        SimulationConfig.from_dict({"bogus": 1})


def test_from_dict_validates():
    with pytest.raises(ConfigError):
        SimulationConfig.from_dict({"arrival_param": -1})


def test_save_and_load(tmp_path):
    cfg = SimulationConfig(arrival_distribution="uniform", arrival_param=3.5, seed=11)
    path = save_config(cfg, tmp_path / "nested" / "scenario.json")

    assert json.loads(path.read_text())["arrival_param"] == 3.5
    assert load_config(path) == cfg


def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.json")


def test_load_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError):
        load_config(path)


def test_fractional_item_count_is_rejected_before_a_run():
    data = SimulationConfig().to_dict()
    data["min_regular_items"] = 10.5
    with pytest.raises(ConfigError, match="min_regular_items must be an integer"):
        SimulationConfig.from_dict(data)


def test_named_configurations(tmp_path):
    assert list_configs(tmp_path / "none") == []

    save_config(SimulationConfig(seed=1), config_path("peak", tmp_path))
    save_config(SimulationConfig(seed=2), config_path("calm", tmp_path))
    (tmp_path / "notes.txt").write_text("ignored")

    assert list_configs(tmp_path) == ["calm", "peak"]
    assert load_config(config_path("peak", tmp_path)).seed == 1

    assert delete_config("peak", tmp_path)
    assert not delete_config("peak", tmp_path)
    assert list_configs(tmp_path) == ["calm"]


@pytest.mark.parametrize("name", ["", "../escape", "a/b"])
def test_config_names_stay_inside_directory(name, tmp_path):
    with pytest.raises(ConfigError):
        config_path(name, tmp_path)
