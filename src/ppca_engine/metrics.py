# Author: Emrullah Erce Dutkan
"""
Evaluation metrics for fitted PPCA models.

This module compares PPCA estimates against a batch PCA reference
computed with a plain SVD:

1. Subspace distance: principal angles between span(W) and the reference
2. Explained variance ratio: fraction of variance kept by the model
3. Reconstruction error: mean squared error of predict-then-reconstruct

Data matrices have samples as columns, shape (d, n).
"""

from typing import Any, Optional, Tuple
import numpy as np

from .model import PPCA


def principal_angles(
    W1: np.ndarray,
    W2: np.ndarray
) -> np.ndarray:
    """
    Compute principal angles between two subspaces.

    The principal angles theta_1, ..., theta_k between subspaces spanned
    by columns of W1 and W2 are defined via:
        cos(theta_i) = sigma_i(W1^T W2)

    Args:
        W1: Matrix with orthonormal columns, shape (d, k1).
        W2: Matrix with orthonormal columns, shape (d, k2).

    Returns:
        Array of principal angles in radians, length min(k1, k2).
    """
    if W1.ndim == 1:
        W1 = W1.reshape(-1, 1)
    if W2.ndim == 1:
        W2 = W2.reshape(-1, 1)

    s = np.linalg.svd(W1.T @ W2, compute_uv=False)
    # Clip to [0, 1] for numerical stability
    return np.arccos(np.clip(s, 0, 1))


def subspace_distance(
    W_est: np.ndarray,
    W_ref: np.ndarray,
    method: str = "sin"
) -> float:
    """
    Compute distance between the column spaces of two (d, k) matrices.

    Columns need not be orthonormal (PPCA loadings usually are not).

    Args:
        W_est: Estimated basis or loadings, shape (d, k).
        W_ref: Reference basis, shape (d, k).
        method: Distance measure:
            - "sin": Mean of sin(theta) for principal angles (default)
            - "sin_max": Maximum sin(theta)
            - "grassmann": Grassmann distance sqrt(sum(theta^2))
            - "projection": 1 - mean(cos(theta))

    Returns:
        Subspace distance (0 = identical, larger = more different).
    """
    Q_est, _ = np.linalg.qr(np.asarray(W_est, dtype=np.float64))
    Q_ref, _ = np.linalg.qr(np.asarray(W_ref, dtype=np.float64))
    angles = principal_angles(Q_est, Q_ref)

    if method == "sin":
        return float(np.mean(np.sin(angles)))
    elif method == "sin_max":
        return float(np.max(np.sin(angles)))
    elif method == "grassmann":
        return float(np.sqrt(np.sum(angles ** 2)))
    elif method == "projection":
        return float(1 - np.mean(np.cos(angles)))
    else:
        raise ValueError(f"Unknown method: {method}")


def reconstruction_error(model: PPCA, X: Any) -> float:
    """
    Mean squared reconstruction error of a PPCA model.

        MSE = mean_n ||x_n - reconstruct(predict(x_n))||^2

    Args:
        model: Fitted PPCA model.
        X: Data of shape (d, n).

    Returns:
        Mean squared reconstruction error.
    """
    X = np.asarray(X)
    error = X - model.reconstruct(model.predict(X))
    return float(np.mean(np.sum(error ** 2, axis=0)))


def explained_variance_ratio(model: PPCA, X: Any) -> float:
    """
    Fraction of the variance of X around the model mean that survives
    predict-then-reconstruct.

    Args:
        model: Fitted PPCA model.
        X: Data of shape (d, n).

    Returns:
        Explained variance ratio in [0, 1].
    """
    X = np.asarray(X)
    Z = X - model.mean[:, None]
    total_var = np.mean(np.sum(Z ** 2, axis=0))

    if total_var < 1e-10:
        return 1.0  # All zeros, trivially explained

    return float(1 - reconstruction_error(model, X) / total_var)


def batch_pca_reference(
    X: Any,
    k: int,
    mean: Optional[np.ndarray] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Ordinary PCA by SVD, used as ground truth.

    Args:
        X: Data of shape (d, n).
        k: Number of principal components.
        mean: Mean to subtract. If None, the sample mean is used.

    Returns:
        Tuple of (mean, components) with shapes (d,) and (d, k); the
        components are orthonormal columns sorted by explained variance.
    """
    X = np.asarray(X, dtype=np.float64)
    mean = np.mean(X, axis=1) if mean is None else np.asarray(mean, dtype=np.float64)

    # X - mean = U S V^T, principal directions are the columns of U
    U, _, _ = np.linalg.svd(X - mean[:, None], full_matrices=False)
    return mean, U[:, :k].copy()


def pca_reconstruct(X: Any, mean: np.ndarray, components: np.ndarray) -> np.ndarray:
    """Project X onto orthonormal components and map back: mu + P P^T (x - mu)."""
    X = np.asarray(X, dtype=np.float64)
    Z = X - mean[:, None]
    return mean[:, None] + components @ (components.T @ Z)
