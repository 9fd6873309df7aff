"""
Tests for datasets and the method benchmark.
"""

import numpy as np

from ppca_engine.benchmark import (
    run_benchmark,
    results_to_dict,
    format_results_table,
)
from ppca_engine.config import get_quick_benchmark_config
from ppca_engine.datasets import (
    generate_low_rank_data,
    decaying_spectrum,
    load_dataset,
    load_digits,
)


class TestDatasets:

    def test_low_rank_data_covariance(self):
        spectrum = [2.0, 1.0, 0.1]
        mean = np.array([1.0, -1.0, 0.5])
        X, R = generate_low_rank_data(spectrum, 50000, mean=mean, seed=0)

        assert X.shape == (3, 50000)
        np.testing.assert_allclose(R @ R.T, np.cov(X), atol=0.05)
        np.testing.assert_allclose(np.sort(np.linalg.eigvalsh(R @ R.T))[::-1], spectrum)
        np.testing.assert_allclose(X.mean(axis=1), mean, atol=0.05)

    def test_seed_is_reproducible(self):
        X1, _ = generate_low_rank_data([1.0, 0.5], 10, seed=3)
        X2, _ = generate_low_rank_data([1.0, 0.5], 10, seed=3)
        assert np.array_equal(X1, X2)

    def test_decaying_spectrum(self):
        lambdas = decaying_spectrum(6, 2, noise_std=0.1)
        np.testing.assert_allclose(lambdas[2:], 0.01)
        assert lambdas[0] > lambdas[1] > lambdas[2]

    def test_load_dataset_shapes(self):
        assert load_dataset("synthetic", n=30, d=6).shape == (6, 30)
        assert load_dataset("random", n=30, d=4).shape == (4, 30)

    def test_digits_samples_are_columns(self):
        X, y = load_digits()
        assert X.shape == (64, 1797)
        assert y.shape == (1797,)


class TestBenchmark:

    def test_one_result_per_method(self):
        config = get_quick_benchmark_config()
        results = run_benchmark(config)

        assert [r.method for r in results] == ["ml", "em", "bayes"]
        for r in results:
            assert r.converged
            assert r.k == config.rank
            assert r.subspace_error < 0.1
            assert np.isfinite(r.reconstruction_error)
            assert r.noise_variance > 0

    def test_convergence_failure_is_recorded(self):
        config = get_quick_benchmark_config()
        config.methods = ["em"]
        config.max_iter = 1
        results = run_benchmark(config)

        assert len(results) == 1
        assert not results[0].converged
        assert "no convergence" in results[0].error
        assert np.isnan(results[0].subspace_error)

    def test_reporting(self):
        config = get_quick_benchmark_config()
        config.methods = ["ml"]
        results = run_benchmark(config)

        rows = results_to_dict(results)
        assert rows[0]["method"] == "ml"
        table = format_results_table(results)
        assert "Method" in table
        assert "ml" in table
