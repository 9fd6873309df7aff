# Author: Emrullah Erce Dutkan
"""
Dense matrix helpers shared by the PPCA fitting algorithms.

Most functions operate in place on their first argument and return it,
so they can be chained:

    S = symmetrize(Z @ Z.T)
    regularize_symmetric(S, 1e-6)

All inputs are expected to be dense numpy arrays.
"""

from typing import Tuple
import numpy as np
from scipy import linalg as sla
from scipy.spatial.distance import pdist, squareform

from .errors import InvalidArgument


def _check_square(A: np.ndarray) -> int:
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise InvalidArgument(f"Expected a square matrix, got shape {A.shape}")
    return A.shape[0]


def symmetrize(A: np.ndarray) -> np.ndarray:
    """
    Make A exactly symmetric in place.

    Both triangles are replaced by the average of the two, which repairs
    the rounding asymmetry left by products such as W^T W or Z Z^T.
    The diagonal is unchanged.

    Args:
        A: Square matrix, modified in place.

    Returns:
        A, for chaining.
    """
    _check_square(A)
    A[...] = (A + A.T) / 2
    return A


def add_diagonal(A: np.ndarray, v: float) -> np.ndarray:
    """Add scalar v to every diagonal entry of A in place."""
    _check_square(A)
    if v != 0:
        A[np.diag_indices_from(A)] += v
    return A


def regularize_symmetric(A: np.ndarray, lam: float) -> np.ndarray:
    """
    Tikhonov regularization scaled to the spectrum of A.

    If lam > 0, adds lam * max_eigenvalue(A) to the diagonal of A in place.

    Args:
        A: Symmetric matrix, modified in place.
        lam: Relative regularization strength.

    Returns:
        A, for chaining.
    """
    n = _check_square(A)
    if lam > 0:
        emax = sla.eigh(A, eigvals_only=True, subset_by_index=[n - 1, n - 1])[0]
        add_diagonal(A, emax * lam)
    return A


def column_dot(X: np.ndarray, Y: np.ndarray) -> np.ndarray:
    """
    Inner product of matching columns.

    Args:
        X: Matrix of shape (m, n).
        Y: Matrix of shape (m, n).

    Returns:
        Vector of length n with entry j equal to X[:, j] . Y[:, j].
    """
    if X.shape != Y.shape:
        raise InvalidArgument(f"Shape mismatch: {X.shape} vs {Y.shape}")
    return np.einsum("ij,ij->j", X, Y)


def normalize_columns_under_metric(X: np.ndarray, C: np.ndarray) -> np.ndarray:
    """
    Rescale each column x of X in place so that x^T C x = 1.

    Args:
        X: Matrix of shape (m, n), modified in place.
        C: Symmetric positive-definite matrix of shape (m, m).

    Returns:
        X, for chaining.
    """
    if C.shape != (X.shape[0], X.shape[0]):
        raise InvalidArgument(
            f"Metric of shape {C.shape} does not match {X.shape[0]} rows"
        )
    norms = column_dot(X, C @ X)
    X *= 1.0 / np.sqrt(norms)
    return X


def pairwise_l2_distance(X: np.ndarray) -> np.ndarray:
    """
    Euclidean distances between the columns of X.

    Args:
        X: Matrix of shape (d, n).

    Returns:
        Symmetric (n, n) distance matrix with a zero diagonal.
    """
    X = np.asarray(X)
    if X.ndim != 2:
        raise InvalidArgument(f"Expected a matrix, got {X.ndim} dimensions")
    dtype = X.dtype if np.issubdtype(X.dtype, np.floating) else np.float64
    if X.shape[1] < 2:
        return np.zeros((X.shape[1], X.shape[1]), dtype=dtype)
    return squareform(pdist(X.T, metric="euclidean")).astype(dtype, copy=False)


def top_eigenpairs(A: np.ndarray, k: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Largest k eigenpairs of a symmetric matrix, sorted descending.

    Args:
        A: Symmetric matrix of shape (d, d).
        k: Number of pairs to keep, 1 <= k <= d.

    Returns:
        Tuple of (values, vectors) with shapes (k,) and (d, k).
    """
    d = _check_square(A)
    if not 1 <= k <= d:
        raise InvalidArgument(f"k must be in [1, {d}], got {k}")
    values, vectors = sla.eigh(A)
    order = np.argsort(values)[::-1][:k]
    return values[order], vectors[:, order]


def orthonormal_basis(W: np.ndarray) -> np.ndarray:
    """
    Orthonormal basis spanning the columns of W.

    Uses the polar factor W = U P, which is the orthonormal matrix
    closest to W and keeps the column order.

    Args:
        W: Matrix of shape (d, q) with d >= q.

    Returns:
        Matrix of shape (d, q) with U^T U = I.
    """
    U, _ = sla.polar(W, side="right")
    return U.astype(W.dtype, copy=False)
