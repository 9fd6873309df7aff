"""
Shared fixtures for the PPCA engine tests.
"""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from ppca_engine.datasets import generate_low_rank_data


TRAIN_SPECTRUM = [0.5, 0.3, 0.1, 0.05, 0.05]


@pytest.fixture
def rng():
    return np.random.default_rng(34568)


@pytest.fixture
def train_data():
    """(X, mean, Z): 5 x 1000 low-rank-plus-noise data, its mean, centered data."""
    X, _ = generate_low_rank_data(TRAIN_SPECTRUM, 1000, seed=34568)
    mval = np.mean(X, axis=1)
    Z = X - mval[:, None]
    return X, mval, Z


@pytest.fixture
def orthonormal_loadings(rng):
    """5 x 3 loadings with orthonormal columns."""
    Q, _ = np.linalg.qr(rng.standard_normal((5, 5)))
    return Q[:, :3]
