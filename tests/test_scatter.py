"""
Tests for the scatter matrix estimator.
"""

import numpy as np
from sklearn.covariance import EmpiricalCovariance, LedoitWolf

from ppca_engine.scatter import scatter_matrix


def test_default_is_gram_matrix(rng):
    Z = rng.standard_normal((4, 50))
    S = scatter_matrix(Z)

    np.testing.assert_allclose(S, Z @ Z.T, rtol=1e-10)
    assert np.array_equal(S, S.T)


def test_uses_zero_mean_even_for_uncentered_data(rng):
    X = rng.standard_normal((3, 40)) + 5.0
    np.testing.assert_allclose(scatter_matrix(X), X @ X.T, rtol=1e-10)


def test_estimator_is_not_modified(rng):
    Z = rng.standard_normal((3, 30))
    est = EmpiricalCovariance()

    scatter_matrix(Z, est)

    assert est.get_params()["assume_centered"] is False
    assert not hasattr(est, "covariance_")


def test_shrinkage_estimator(rng):
    Z = rng.standard_normal((5, 20))
    S_plain = scatter_matrix(Z)
    S_shrunk = scatter_matrix(Z, LedoitWolf())

    assert S_shrunk.shape == (5, 5)
    assert np.array_equal(S_shrunk, S_shrunk.T)
    # shrinkage keeps the trace and pulls the spectrum together
    np.testing.assert_allclose(np.trace(S_shrunk), np.trace(S_plain), rtol=1e-8)
    assert np.ptp(np.linalg.eigvalsh(S_shrunk)) < np.ptp(np.linalg.eigvalsh(S_plain))


def test_integer_data_is_not_truncated():
    Z = np.array([[1, -1, 0], [0, 1, 2]])
    S = scatter_matrix(Z)

    assert S.dtype == np.float64
    np.testing.assert_allclose(S, [[2.0, -1.0], [-1.0, 5.0]])


def test_single_precision_is_kept(rng):
    Z = rng.standard_normal((3, 20)).astype(np.float32)
    assert scatter_matrix(Z).dtype == np.float32
