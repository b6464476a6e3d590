import random
import statistics

import pytest

from supermarket_sim.distributions import Distribution, normalize_family
from supermarket_sim.errors import ConfigError


def test_family_names_are_normalized():
    assert normalize_family("Normal") == "normal"
    assert normalize_family("Negexp") == "exponential"
    assert Distribution("UNIFORM", 1.0).family == "uniform"


def test_unknown_family_rejected():
    with pytest.raises(ConfigError):
        Distribution("poisson", 1.0)


@pytest.mark.parametrize("param", [0, -1.0])
def test_param_must_be_positive(param):
    with pytest.raises(ConfigError):
        Distribution("exponential", param)


def test_constant():
    assert Distribution("constant", 10).sample() == 10.0


def test_uniform_stays_within_half_to_one_and_a_half():
    rng = random.Random(1)
    d = Distribution("uniform", 8.0)
    samples = [d.sample(rng) for _ in range(2000)]
    assert min(samples) >= 4.0
    assert max(samples) <= 12.0


def test_normal_never_negative():
    rng = random.Random(2)
    d = Distribution("normal", 1.0)
    assert all(d.sample(rng) >= 0.0 for _ in range(5000))


def test_exponential_mean_is_param():
    rng = random.Random(3)
    d = Distribution("exponential", 5.0)
    mean = statistics.fmean(d.sample(rng) for _ in range(20000))
    assert mean == pytest.approx(5.0, rel=0.05)


def test_sampler_deterministic_with_seeded_rng():
    a = Distribution("normal", 8.0).sampler(random.Random(123))
    b = Distribution("normal", 8.0).sampler(random.Random(123))
    assert [a() for _ in range(5)] == [b() for _ in range(5)]


def test_scaled():
    assert Distribution("normal", 8.0).scaled(0.5) == Distribution("normal", 4.0)
