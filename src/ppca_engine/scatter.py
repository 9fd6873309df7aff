# Author: Emrullah Erce Dutkan
"""
Scatter matrix of centered data through a pluggable covariance estimator.

Any scikit-learn style covariance estimator (an object with ``fit(X)``
and a ``covariance_`` attribute) can be used, e.g. EmpiricalCovariance,
LedoitWolf or OAS from ``sklearn.covariance``. The estimator is cloned
before fitting, so the caller's instance is never modified.
"""

from typing import Any, Optional
import numpy as np
from sklearn.base import clone
from sklearn.covariance import EmpiricalCovariance

from .errors import InvalidArgument
from .linalg import symmetrize
from .model import check_dense, float_dtype


def default_covariance_estimator() -> EmpiricalCovariance:
    """Plain empirical covariance, assuming the data is already centered."""
    return EmpiricalCovariance(assume_centered=True)


def _prepare_estimator(estimator: Optional[Any]) -> Any:
    if estimator is None:
        return default_covariance_estimator()
    est = clone(estimator)
    if "assume_centered" in est.get_params():
        est.set_params(assume_centered=True)
    return est


def scatter_matrix(Z: np.ndarray, estimator: Optional[Any] = None) -> np.ndarray:
    """
    Compute the scatter matrix of centered data.

    The result is ``cov(Z, mean=0) * n``, i.e. the covariance estimate
    taken around zero and rescaled by the number of samples.

    Args:
        Z: Centered data of shape (d, n), samples as columns. Integer data
            gives a float64 result.
        estimator: Covariance estimator. Defaults to EmpiricalCovariance.

    Returns:
        Symmetric (d, d) scatter matrix.
    """
    Z = check_dense(Z, "data")
    if Z.ndim != 2:
        raise InvalidArgument(f"Expected a (d, n) matrix, got shape {Z.shape}")
    n = Z.shape[1]
    if n < 1:
        raise InvalidArgument("At least one sample is required")

    est = _prepare_estimator(estimator)
    # sklearn estimators expect samples as rows
    est.fit(Z.T)
    S = np.array(est.covariance_, dtype=float_dtype(Z.dtype)) * n
    return symmetrize(S)
