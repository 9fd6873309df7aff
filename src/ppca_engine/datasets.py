# Author: Emrullah Erce Dutkan
"""
Dataset utilities for PPCA experiments.

Synthetic data is drawn from a known low-rank-plus-noise Gaussian, so the
true principal subspace and noise level are available for checking fits.
The digits loader wraps scikit-learn and returns features as rows.

Available datasets:
- synthetic: `rank` dominant directions with exponential decay plus
  isotropic noise
- digits: 8x8 handwritten digit images (64 features, 1797 samples)
- random: full-rank standard Gaussian

All loaders return data of shape (d, n), samples as columns.
"""

from typing import Optional, Sequence, Tuple
import numpy as np
from sklearn.datasets import load_digits as sklearn_load_digits


def random_rotation(d: int, rng: np.random.Generator) -> np.ndarray:
    """Random orthonormal (d, d) matrix from the QR of a Gaussian matrix."""
    Q, R = np.linalg.qr(rng.standard_normal((d, d)))
    # Fix signs so the distribution is uniform over rotations
    return Q * np.sign(np.diag(R))


def generate_low_rank_data(
    spectrum: Sequence[float],
    n: int,
    mean: Optional[np.ndarray] = None,
    seed: Optional[int] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Draw n samples with covariance R R^T, R = Q diag(sqrt(spectrum)).

    Args:
        spectrum: Variances along the principal directions, length d.
        n: Number of samples.
        mean: Mean vector of length d. If None, a random mean is drawn.
        seed: Random seed.

    Returns:
        Tuple of (X, R) where X has shape (d, n) and R is the (d, d)
        scaled rotation used to generate it.
    """
    rng = np.random.default_rng(seed)
    spectrum = np.asarray(spectrum, dtype=np.float64)
    d = spectrum.shape[0]

    R = random_rotation(d, rng) * np.sqrt(spectrum)
    if mean is None:
        mean = rng.standard_normal(d)

    X = R @ rng.standard_normal((d, n)) + np.asarray(mean)[:, None]
    return X, R


def decaying_spectrum(
    d: int,
    rank: int,
    noise_std: float = 0.1,
    decay_rate: float = 0.5
) -> np.ndarray:
    """
    Eigenvalues exp(-decay_rate * i) + noise_std^2 for the first `rank`
    directions and noise_std^2 for the rest, sorted descending.
    """
    lambdas = np.full(d, noise_std ** 2)
    lambdas[:rank] = np.exp(-decay_rate * np.arange(rank)) + noise_std ** 2
    return lambdas


def load_synthetic(
    d: int = 20,
    n: int = 2000,
    rank: int = 5,
    noise_std: float = 0.1,
    seed: Optional[int] = 42
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Generate a synthetic low-rank-plus-noise dataset.

    Args:
        d: Dimensionality.
        n: Number of samples.
        rank: Number of dominant directions.
        noise_std: Standard deviation of the isotropic noise.
        seed: Random seed.

    Returns:
        Tuple of (X, R) where X has shape (d, n).
    """
    return generate_low_rank_data(
        decaying_spectrum(d, rank, noise_std), n, seed=seed
    )


def load_digits() -> Tuple[np.ndarray, np.ndarray]:
    """
    Load the digits dataset from sklearn.

    Returns:
        Tuple of (X, y) where:
        - X: Feature matrix of shape (64, 1797)
        - y: Labels of shape (1797,)
    """
    data = sklearn_load_digits()
    return data.data.T.astype(np.float64), data.target


def load_dataset(
    name: str,
    n: Optional[int] = None,
    d: Optional[int] = None,
    seed: Optional[int] = 42
) -> np.ndarray:
    """
    Load a dataset by name.

    Args:
        name: Dataset name ("digits", "synthetic", "random").
        n: Number of samples (for generated datasets).
        d: Dimensionality (for generated datasets).
        seed: Random seed.

    Returns:
        Data matrix of shape (d, n).
    """
    if name == "digits":
        return load_digits()[0]
    elif name == "synthetic":
        n = n or 2000
        d = d or 20
        return load_synthetic(d=d, n=n, rank=max(1, min(5, d // 2)), seed=seed)[0]
    elif name == "random":
        n = n or 2000
        d = d or 20
        return np.random.default_rng(seed).standard_normal((d, n))
    else:
        raise ValueError(f"Unknown dataset: {name}")
