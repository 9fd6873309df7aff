"""
Tests for configuration dataclasses.
"""

from sklearn.covariance import LedoitWolf

from ppca_engine.config import (
    FitConfig,
    BenchmarkConfig,
    get_default_config,
    get_quick_benchmark_config,
)


def test_default_fit_config():
    config = get_default_config()
    assert config.method == "ml"
    assert config.maxoutdim is None
    assert config.max_iter == 1000
    assert config.tol == 1e-6
    assert config.covariance_estimator is None


def test_fit_config_round_trip():
    config = FitConfig(method="bayes", maxoutdim=3, tol=1e-5,
                       covariance_estimator=LedoitWolf())
    d = config.to_dict()

    assert "covariance_estimator" not in d
    restored = FitConfig.from_dict(d)
    assert restored.method == "bayes"
    assert restored.maxoutdim == 3
    assert restored.tol == 1e-5


def test_benchmark_config_round_trip():
    config = get_quick_benchmark_config()
    restored = BenchmarkConfig.from_dict(config.to_dict())
    assert restored == config
    assert restored.methods == ["ml", "em", "bayes"]
