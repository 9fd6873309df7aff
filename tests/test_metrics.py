"""
Tests for evaluation metrics and the SVD reference.
"""

import numpy as np
import pytest

from ppca_engine.fitting import fit
from ppca_engine.metrics import (
    principal_angles,
    subspace_distance,
    reconstruction_error,
    explained_variance_ratio,
    batch_pca_reference,
    pca_reconstruct,
)


class TestSubspaceDistance:

    def test_identical_subspaces(self, rng):
        W = rng.standard_normal((6, 2))
        # same span, different basis
        W2 = W @ np.array([[2.0, 1.0], [0.0, 3.0]])
        for method in ("sin", "sin_max", "grassmann", "projection"):
            assert subspace_distance(W, W2, method=method) == pytest.approx(0.0, abs=1e-7)

    def test_orthogonal_subspaces(self):
        E = np.eye(4)
        assert subspace_distance(E[:, :2], E[:, 2:]) == pytest.approx(1.0)
        np.testing.assert_allclose(principal_angles(E[:, :2], E[:, 2:]), [np.pi / 2] * 2)

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            subspace_distance(np.eye(3)[:, :1], np.eye(3)[:, :1], method="cosine")


def test_batch_reference_is_orthonormal(train_data):
    X, mval, _ = train_data
    mean, P = batch_pca_reference(X, 3)

    np.testing.assert_allclose(mean, mval)
    np.testing.assert_allclose(P.T @ P, np.eye(3), atol=1e-12)


def test_fitted_model_recovers_reference_subspace(train_data):
    X, _, _ = train_data
    _, P = batch_pca_reference(X, 3)
    M = fit(X, maxoutdim=3)
    assert subspace_distance(M.loadings, P) < 1e-6


def test_reconstruction_error_matches_pca(train_data):
    X, mval, _ = train_data
    M = fit(X, maxoutdim=3)
    mean, P = batch_pca_reference(X, 3)
    expected = np.mean(np.sum((X - pca_reconstruct(X, mean, P)) ** 2, axis=0))

    assert reconstruction_error(M, X) == pytest.approx(expected, rel=1e-6)


def test_explained_variance_ratio_grows_with_q(train_data):
    X, _, _ = train_data
    ratios = [explained_variance_ratio(fit(X, maxoutdim=q), X) for q in (1, 2, 3, 4)]

    assert all(0 < r <= 1 for r in ratios)
    assert ratios == sorted(ratios)
    # first direction carries 0.5 of 1.0 total variance
    assert ratios[0] == pytest.approx(0.5, abs=0.05)
