# Author: Emrullah Erce Dutkan
"""
Mean handling for column-major data matrices.

A model mean is either NoMean (data is already centered, nothing is
subtracted and no zero vector is allocated) or ExplicitMean holding a
length-d vector. Samples are the columns of a (d, n) matrix; a single
sample is a vector of shape (d,).
"""

from typing import Any, Union
from dataclasses import dataclass
import numpy as np

from .errors import InvalidArgument


@dataclass(frozen=True)
class NoMean:
    """Zero mean. Centering and decentering are identities."""

    def centralize(self, x: np.ndarray) -> np.ndarray:
        return x

    def decentralize(self, x: np.ndarray) -> np.ndarray:
        return x

    def full(self, d: int, dtype: Any = np.float64) -> np.ndarray:
        return np.zeros(d, dtype=dtype)

    def astype(self, dtype: Any) -> "NoMean":
        return self


@dataclass(frozen=True, eq=False)
class ExplicitMean:
    """A materialized mean vector of shape (d,)."""
    values: np.ndarray

    def _column(self, x: np.ndarray) -> np.ndarray:
        # vectors subtract directly, (d, n) matrices broadcast over columns
        return self.values if x.ndim == 1 else self.values[:, None]

    def centralize(self, x: np.ndarray) -> np.ndarray:
        return x - self._column(x)

    def decentralize(self, x: np.ndarray) -> np.ndarray:
        return x + self._column(x)

    def full(self, d: int, dtype: Any = None) -> np.ndarray:
        if self.values.shape[0] != d:
            raise InvalidArgument(
                f"Mean has length {self.values.shape[0]}, expected {d}"
            )
        return self.values if dtype is None else self.values.astype(dtype, copy=False)

    def astype(self, dtype: Any) -> "ExplicitMean":
        values = np.array(self.values, dtype=dtype)
        values.flags.writeable = False
        return ExplicitMean(values)


MeanSpec = Union[NoMean, ExplicitMean]


def as_mean_spec(mean: Any) -> MeanSpec:
    """
    Interpret a user supplied mean that is not estimated from data.

    None, an empty sequence and the literal 0 all mean "zero mean".
    """
    if isinstance(mean, (NoMean, ExplicitMean)):
        return mean
    if mean is None:
        return NoMean()
    if np.isscalar(mean):
        if mean == 0:
            return NoMean()
        raise InvalidArgument(f"Scalar mean must be 0, got {mean!r}")
    values = np.asarray(mean)
    if values.size == 0:
        return NoMean()
    if values.ndim != 1:
        raise InvalidArgument(f"Mean must be a vector, got shape {values.shape}")
    return ExplicitMean(values)


def resolve_mean(X: np.ndarray, mean: Any = None) -> MeanSpec:
    """
    Resolve the mean to use for a (d, n) data matrix.

    Args:
        X: Data matrix with samples as columns.
        mean: None to estimate the sample mean across columns, 0 (or
            NoMean()) for zero mean, or an explicit vector of length d.

    Returns:
        NoMean or ExplicitMean.
    """
    if mean is None:
        return ExplicitMean(np.mean(X, axis=1))
    spec = as_mean_spec(mean)
    if isinstance(spec, ExplicitMean) and spec.values.shape[0] != X.shape[0]:
        raise InvalidArgument(
            f"Mean has length {spec.values.shape[0]}, data has {X.shape[0]} rows"
        )
    return spec


def centralize(x: np.ndarray, mean: MeanSpec) -> np.ndarray:
    """Subtract the mean from a vector or from every column of a matrix."""
    return mean.centralize(x)


def decentralize(x: np.ndarray, mean: MeanSpec) -> np.ndarray:
    """Add the mean back to a vector or to every column of a matrix."""
    return mean.decentralize(x)
