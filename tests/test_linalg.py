"""
Tests for the dense matrix helpers.
"""

import numpy as np
import pytest

from ppca_engine.errors import InvalidArgument
from ppca_engine.linalg import (
    symmetrize,
    add_diagonal,
    regularize_symmetric,
    column_dot,
    normalize_columns_under_metric,
    pairwise_l2_distance,
    top_eigenpairs,
    orthonormal_basis,
)


class TestSymmetrize:

    def test_result_is_exactly_symmetric(self, rng):
        A = rng.standard_normal((6, 6))
        original = A.copy()
        out = symmetrize(A)

        assert out is A
        assert np.array_equal(A, A.T)
        np.testing.assert_allclose(A, (original + original.T) / 2)

    def test_diagonal_unchanged(self, rng):
        A = rng.standard_normal((4, 4))
        diag = np.diag(A).copy()
        symmetrize(A)
        assert np.array_equal(np.diag(A), diag)

    def test_rejects_non_square(self):
        with pytest.raises(InvalidArgument):
            symmetrize(np.zeros((3, 4)))


class TestAddDiagonal:

    def test_adds_to_diagonal_only(self):
        A = np.ones((3, 3))
        add_diagonal(A, 2.0)
        expected = np.ones((3, 3)) + 2.0 * np.eye(3)
        assert np.array_equal(A, expected)

    def test_zero_is_noop(self):
        A = np.arange(9.0).reshape(3, 3)
        before = A.copy()
        add_diagonal(A, 0)
        assert np.array_equal(A, before)


class TestRegularizeSymmetric:

    def test_scaled_by_largest_eigenvalue(self):
        A = np.diag([4.0, 1.0, 0.0])
        regularize_symmetric(A, 0.1)
        np.testing.assert_allclose(np.diag(A), [4.4, 1.4, 0.4])

    def test_non_positive_lambda_is_noop(self):
        A = np.diag([4.0, 1.0])
        regularize_symmetric(A, 0.0)
        regularize_symmetric(A, -1.0)
        assert np.array_equal(A, np.diag([4.0, 1.0]))

    def test_makes_singular_matrix_positive_definite(self, rng):
        B = rng.standard_normal((5, 2))
        A = B @ B.T
        regularize_symmetric(A, 1e-3)
        assert np.all(np.linalg.eigvalsh(A) > 0)


class TestColumnDot:

    def test_matches_per_column_dot(self, rng):
        X = rng.standard_normal((4, 3))
        Y = rng.standard_normal((4, 3))
        expected = [X[:, j] @ Y[:, j] for j in range(3)]
        np.testing.assert_allclose(column_dot(X, Y), expected)

    def test_shape_mismatch(self):
        with pytest.raises(InvalidArgument):
            column_dot(np.zeros((3, 2)), np.zeros((2, 3)))


def test_normalize_columns_under_metric(rng):
    B = rng.standard_normal((4, 4))
    C = B @ B.T + 4 * np.eye(4)
    X = rng.standard_normal((4, 3))

    out = normalize_columns_under_metric(X, C)

    assert out is X
    np.testing.assert_allclose(column_dot(X, C @ X), np.ones(3))


class TestPairwiseL2Distance:

    def test_symmetric_with_zero_diagonal(self, rng):
        X = rng.standard_normal((3, 7))
        D = pairwise_l2_distance(X)

        assert D.shape == (7, 7)
        assert np.array_equal(D, D.T)
        assert np.all(np.diag(D) == 0)

    def test_values(self):
        X = np.array([[0.0, 3.0, 0.0],
                      [0.0, 4.0, 1.0]])
        D = pairwise_l2_distance(X)
        np.testing.assert_allclose(D[0, 1], 5.0)
        np.testing.assert_allclose(D[0, 2], 1.0)
        np.testing.assert_allclose(D[1, 2], np.sqrt(18.0))

    def test_keeps_single_precision(self, rng):
        X = rng.standard_normal((3, 4)).astype(np.float32)
        assert pairwise_l2_distance(X).dtype == np.float32

    def test_single_column(self):
        assert np.array_equal(pairwise_l2_distance(np.ones((3, 1))), np.zeros((1, 1)))


class TestTopEigenpairs:

    def test_sorted_descending(self, rng):
        Q, _ = np.linalg.qr(rng.standard_normal((4, 4)))
        A = Q @ np.diag([0.5, 3.0, 1.0, 2.0]) @ Q.T
        values, vectors = top_eigenpairs(symmetrize(A), 2)

        np.testing.assert_allclose(values, [3.0, 2.0])
        assert vectors.shape == (4, 2)
        np.testing.assert_allclose(A @ vectors, vectors * values, atol=1e-12)

    def test_rejects_out_of_range_k(self):
        with pytest.raises(InvalidArgument):
            top_eigenpairs(np.eye(3), 4)


def test_orthonormal_basis_spans_columns(rng):
    W = rng.standard_normal((6, 3))
    P = orthonormal_basis(W)

    np.testing.assert_allclose(P.T @ P, np.eye(3), atol=1e-12)
    # W lies in span(P)
    np.testing.assert_allclose(P @ (P.T @ W), W, atol=1e-12)
