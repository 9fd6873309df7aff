# Author: Emrullah Erce Dutkan
"""
The fitted Probabilistic PCA model.

PPCA is the latent variable model

    z ~ N(0, I_q)
    x | z ~ N(W z + mu, sigma^2 I_d)

with loadings W of shape (d, q) and isotropic noise variance sigma^2.
The marginal distribution of x is N(mu, W W^T + sigma^2 I).

A PPCA instance is immutable: its arrays are read-only copies and it is
safe to share between threads. Samples are columns, so ``predict``
accepts a vector of shape (d,) or a batch of shape (d, n), and
``reconstruct`` accepts (q,) or (q, n).
"""

from typing import Any, Optional, Tuple
from dataclasses import dataclass
import numpy as np
from scipy import linalg as sla
from scipy import sparse

from .centering import MeanSpec, ExplicitMean, as_mean_spec
from .errors import InvalidArgument, UnsupportedInputType
from .linalg import add_diagonal, orthonormal_basis, symmetrize


def check_dense(x: Any, name: str = "input") -> np.ndarray:
    """Reject sparse or non-numeric inputs before any numeric work."""
    if sparse.issparse(x):
        raise UnsupportedInputType(
            f"Unsupported {name} type {type(x).__name__}: dense arrays are required"
        )
    arr = np.asarray(x)
    if not (np.issubdtype(arr.dtype, np.floating)
            or np.issubdtype(arr.dtype, np.integer)
            or arr.dtype == np.bool_):
        raise UnsupportedInputType(f"Unsupported {name} dtype {arr.dtype}")
    return arr


def float_dtype(dtype: Any) -> np.dtype:
    """Float type used for a model fitted on data of the given dtype."""
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.floating):
        return np.result_type(dtype, np.float32)
    return np.dtype(np.float64)


def marginal_log_likelihood(
    S: np.ndarray,
    W: np.ndarray,
    sigma2: float,
    n: int
) -> float:
    """
    Log-likelihood of n samples with covariance S under N(0, W W^T + sigma^2 I).

        L = -n/2 * (d log(2 pi) + log|C| + tr(C^-1 S))

    Returns -inf when C is singular.
    """
    d = S.shape[0]
    C = W @ W.T
    add_diagonal(C, sigma2)
    sign, logdet = np.linalg.slogdet(C)
    if sign <= 0:
        return -np.inf
    trace = np.trace(np.linalg.solve(C, S))
    return float(-0.5 * n * (d * np.log(2 * np.pi) + logdet + trace))


@dataclass(frozen=True, eq=False)
class PPCA:
    """
    Probabilistic PCA model.

    Attributes:
        mean_spec: NoMean or ExplicitMean of length d.
        W: Loading matrix of shape (d, q).
        sigma2: Noise variance, non-negative.
    """
    mean_spec: MeanSpec
    W: np.ndarray
    sigma2: float

    def __post_init__(self):
        W = check_dense(self.W, "loadings")
        if W.ndim != 2:
            raise InvalidArgument(f"Loadings must be a matrix, got shape {W.shape}")
        d, q = W.shape
        if not d >= q >= 1:
            raise InvalidArgument(f"Loadings shape {W.shape} violates d >= q >= 1")
        if not self.sigma2 >= 0:
            raise InvalidArgument(f"Noise variance must be >= 0, got {self.sigma2}")

        dtype = float_dtype(W.dtype)
        W = np.array(W, dtype=dtype)
        W.flags.writeable = False

        mean_spec = as_mean_spec(self.mean_spec)
        if isinstance(mean_spec, ExplicitMean) and mean_spec.values.shape != (d,):
            raise InvalidArgument(
                f"Mean has shape {mean_spec.values.shape}, expected ({d},)"
            )

        object.__setattr__(self, "W", W)
        object.__setattr__(self, "sigma2", dtype.type(self.sigma2))
        object.__setattr__(self, "mean_spec", mean_spec.astype(dtype))

    @classmethod
    def from_params(cls, mean: Any, W: Any, noise_variance: float) -> "PPCA":
        """
        Build a model from raw parameters.

        Args:
            mean: Mean vector, or None / [] / 0 for a zero mean.
            W: Loading matrix of shape (d, q).
            noise_variance: Isotropic noise variance.
        """
        return cls(as_mean_spec(mean), W, noise_variance)

    # -- accessors ---------------------------------------------------------

    @property
    def shape(self) -> Tuple[int, int]:
        """(d, q): feature dimension and latent dimension."""
        return self.W.shape

    @property
    def latent_dim(self) -> int:
        return self.W.shape[1]

    @property
    def dtype(self) -> np.dtype:
        return self.W.dtype

    @property
    def mean(self) -> np.ndarray:
        """Mean vector of length d; zeros for a zero-mean model."""
        return self.mean_spec.full(self.W.shape[0], self.dtype)

    @property
    def loadings(self) -> np.ndarray:
        return self.W

    @property
    def noise_variance(self) -> float:
        return self.sigma2

    @property
    def projection(self) -> np.ndarray:
        """Orthonormal (d, q) basis spanning the columns of W."""
        return orthonormal_basis(self.W)

    # -- projections -------------------------------------------------------

    def _promote(self, x: Any, rows: int, name: str) -> Tuple[np.ndarray, np.ndarray]:
        x = check_dense(x, name)
        if x.ndim not in (1, 2) or x.shape[0] != rows:
            raise InvalidArgument(
                f"{name} must have {rows} rows, got shape {x.shape}"
            )
        dtype = np.result_type(float_dtype(x.dtype), self.dtype)
        return x.astype(dtype, copy=False), self.W.astype(dtype, copy=False)

    def _gram(self, W: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        WtW = symmetrize(W.T @ W)
        M = WtW.copy()
        add_diagonal(M, self.sigma2)
        return WtW, M

    def predict(self, x: Any) -> np.ndarray:
        """
        Posterior mean of the latent code.

            z = (W^T W + sigma^2 I)^-1 W^T (x - mu)

        Args:
            x: Observation of shape (d,) or batch of shape (d, n).

        Returns:
            Latent code of shape (q,) or (q, n).
        """
        x, W = self._promote(x, self.W.shape[0], "Observations")
        _, M = self._gram(W)
        if self.sigma2 > 0:
            T = sla.solve(M, W.T, assume_a="pos")
        else:
            # M = W^T W, singular when a column of W is zero
            T = sla.pinv(M) @ W.T
        return T @ self.mean_spec.centralize(x)

    def reconstruct(self, z: Any) -> np.ndarray:
        """
        Map latent codes back to feature space.

            x = mu + W (W^T W)^+ (W^T W + sigma^2 I) z

        The pseudo-inverse keeps collapsed (zero) columns of W harmless.

        Args:
            z: Latent code of shape (q,) or batch of shape (q, n).

        Returns:
            Reconstruction of shape (d,) or (d, n).
        """
        z, W = self._promote(z, self.W.shape[1], "Latent codes")
        WtW, M = self._gram(W)
        R = W @ (sla.pinv(WtW) @ M)
        return self.mean_spec.decentralize(R @ z)

    # -- generative model --------------------------------------------------

    def covariance(self) -> np.ndarray:
        """Model covariance W W^T + sigma^2 I of shape (d, d)."""
        C = symmetrize(self.W @ self.W.T)
        add_diagonal(C, self.sigma2)
        return C

    def log_likelihood(self, X: Any) -> float:
        """
        Total Gaussian log-likelihood of the columns of X.

        Args:
            X: Data of shape (d, n) or a single sample of shape (d,).
        """
        X, W = self._promote(X, self.W.shape[0], "Observations")
        if X.ndim == 1:
            X = X[:, None]
        Z = self.mean_spec.centralize(X).astype(np.float64, copy=False)
        S = Z @ Z.T / Z.shape[1]
        return marginal_log_likelihood(S, W.astype(np.float64), float(self.sigma2), Z.shape[1])

    def sample(self, n: int, random_state: Optional[Any] = None) -> np.ndarray:
        """
        Draw n samples from the generative model.

        Args:
            n: Number of samples.
            random_state: Seed or numpy Generator.

        Returns:
            Samples of shape (d, n).
        """
        rng = np.random.default_rng(random_state)
        d, q = self.W.shape
        z = rng.standard_normal((q, n))
        noise = rng.standard_normal((d, n)) * np.sqrt(self.sigma2)
        X = (self.W @ z + noise).astype(self.dtype, copy=False)
        return self.mean_spec.decentralize(X)
