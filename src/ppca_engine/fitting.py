# Author: Emrullah Erce Dutkan
"""
Fitting algorithms for Probabilistic PCA.

Three estimators of the PPCA parameters (W, sigma^2) are provided:

- ml:    closed-form maximum likelihood from the eigendecomposition of the
         sample covariance (Tipping & Bishop, 1999).
- em:    expectation-maximization on the sample covariance. Needs no
         eigendecomposition; converges to the ML solution up to a rotation
         of the latent space.
- bayes: variational Bayesian PCA with automatic relevance determination
         (Bishop, 1999). Each latent dimension has a precision alpha_j that
         shrinks unsupported columns of W toward zero.

All algorithms work on the (d, d) covariance S of centered data and run in
float64. The returned model is cast back to the float type of the input.

Usage:
    model = fit(X)                                  # X has shape (d, n)
    model = fit(X, method="em", maxoutdim=3)
    model = fit(Z, mean=0, method="bayes")          # Z already centered
"""

import logging
from dataclasses import replace
from typing import Any, Optional
import numpy as np
from scipy import linalg as sla

from .centering import MeanSpec, resolve_mean
from .config import FitConfig, FIT_METHODS
from .errors import ConvergenceFailure, InvalidArgument
from .linalg import add_diagonal, column_dot, symmetrize, top_eigenpairs
from .model import PPCA, check_dense, float_dtype, marginal_log_likelihood
from .scatter import scatter_matrix

logger = logging.getLogger(__name__)

# Relative lower bound on sigma^2 in the iterative fits. On rank-deficient
# data sigma^2 would otherwise reach 0 and leave M = W^T W + sigma^2 I singular.
NOISE_FLOOR = 1e-6


def _check_iteration_params(max_iter: int, tol: float) -> None:
    if max_iter < 1:
        raise InvalidArgument(f"max_iter must be >= 1, got {max_iter}")
    if tol <= 0:
        raise InvalidArgument(f"tol must be > 0, got {tol}")


def _check_outdim(d: int, q: int, closed_form: bool) -> None:
    upper = d - 1 if closed_form else d
    if not 1 <= q <= upper:
        raise InvalidArgument(
            f"maxoutdim must be in [1, {upper}] for d={d}, got {q}"
        )


def _gram(W: np.ndarray, sigma2: float) -> np.ndarray:
    """M = W^T W + sigma^2 I."""
    M = symmetrize(W.T @ W)
    return add_diagonal(M, sigma2)


def _inv_gram(W: np.ndarray, sigma2: float) -> np.ndarray:
    return symmetrize(sla.inv(_gram(W, sigma2)))


def _noise_floor(S: np.ndarray) -> float:
    """Smallest noise variance the iterative fits use: NOISE_FLOOR * tr(S) / d."""
    scale = float(np.trace(S)) / S.shape[0]
    return NOISE_FLOOR * scale if scale > 0 else NOISE_FLOOR


def _noise_update(S: np.ndarray, SW: np.ndarray, M_inv: np.ndarray, W_new: np.ndarray) -> float:
    """sigma^2 = tr(S - S W M^-1 W_new^T) / d, kept above the noise floor."""
    d = S.shape[0]
    sigma2 = (np.trace(S) - np.sum((SW @ M_inv) * W_new)) / d
    return max(float(sigma2), _noise_floor(S))


def ppca_ml(
    S: np.ndarray,
    mean: MeanSpec,
    maxoutdim: Optional[int] = None
) -> PPCA:
    """
    Closed-form maximum likelihood PPCA.

    With eigenvalues lambda_1 >= ... >= lambda_d of S:
        sigma^2 = mean(lambda_{q+1}, ..., lambda_d)
        W = V_q diag(sqrt(lambda_i - sigma^2))

    Args:
        S: Sample covariance of shape (d, d).
        mean: Mean stored in the model.
        maxoutdim: Latent dimension q < d. Defaults to d - 1.

    Returns:
        Fitted PPCA model (float64).
    """
    d = S.shape[0]
    q = d - 1 if maxoutdim is None else maxoutdim
    _check_outdim(d, q, closed_form=True)

    values, vectors = top_eigenpairs(S, d)
    sigma2 = max(float(np.mean(values[q:])), 0.0)

    gaps = values[:q] - sigma2
    if np.any(gaps < 0):
        logger.warning(
            "Degenerate covariance: %d retained eigenvalue(s) below the noise "
            "level, clamping loadings to zero", int(np.sum(gaps < 0))
        )
    W = vectors[:, :q] * np.sqrt(np.maximum(gaps, 0.0))

    logger.info("ppca_ml: d=%d, q=%d, noise variance %.6g", d, q, sigma2)
    return PPCA(mean, W, sigma2)


def ppca_em(
    S: np.ndarray,
    mean: MeanSpec,
    n: int,
    maxoutdim: Optional[int] = None,
    max_iter: int = 1000,
    tol: float = 1e-6
) -> PPCA:
    """
    PPCA by expectation-maximization.

    Starting from W = I[:, :q] and sigma^2 = 0, each iteration performs

        W_new   = S W (sigma^2 I + M^-1 W^T S W)^-1
        sigma^2 = tr(S - S W M^-1 W_new^T) / d

    with M = W^T W + sigma^2 I, until the log-likelihood changes by less
    than tol. sigma^2 never drops below NOISE_FLOOR * tr(S) / d.

    Args:
        S: Sample covariance of shape (d, d).
        mean: Mean stored in the model.
        n: Number of samples S was computed from.
        maxoutdim: Latent dimension q <= d. Defaults to d - 1.
        max_iter: Maximum number of iterations.
        tol: Convergence tolerance on the absolute log-likelihood change.

    Returns:
        Fitted PPCA model (float64).

    Raises:
        ConvergenceFailure: If tol is not met within max_iter iterations.
    """
    d = S.shape[0]
    q = d - 1 if maxoutdim is None else maxoutdim
    _check_outdim(d, q, closed_form=False)
    _check_iteration_params(max_iter, tol)

    W = np.eye(d, q)
    sigma2 = 0.0
    M_inv = _inv_gram(W, sigma2)
    I = np.eye(q)

    L_old = -np.inf
    change = np.inf
    for it in range(1, max_iter + 1):
        SW = S @ W
        A = sigma2 * I + M_inv @ W.T @ SW
        W_new = sla.solve(A.T, SW.T).T
        sigma2 = _noise_update(S, SW, M_inv, W_new)
        W = W_new
        M_inv = _inv_gram(W, sigma2)

        L = marginal_log_likelihood(S, W, sigma2, n)
        change = abs(L - L_old)
        logger.debug("ppca_em iter %d: loglik %.10g, change %.3g", it, L, change)
        if change < tol:
            logger.info("ppca_em converged after %d iterations", it)
            return PPCA(mean, W, sigma2)
        L_old = L

    raise ConvergenceFailure(max_iter, float(change), tol, method="em")


def bayes_pca(
    S: np.ndarray,
    mean: MeanSpec,
    n: int,
    maxoutdim: Optional[int] = None,
    max_iter: int = 1000,
    tol: float = 1e-6
) -> PPCA:
    """
    Variational Bayesian PCA with automatic relevance determination.

    Every column w_j of W has a Gaussian prior with precision alpha_j,
    re-estimated each iteration as alpha_j = d / ||w_j||^2. The M-step is

        W_new = S W (sigma^2 I + M^-1 W^T S W + sigma^2/n diag(alpha) M)^-1

    so columns the data does not support are driven toward zero. The model
    always keeps q columns; irrelevant ones are shrunk, never dropped.

    The iteration starts from the closed-form solution built from the top
    q eigenpairs of S.

    Args:
        S: Sample covariance of shape (d, d).
        mean: Mean stored in the model.
        n: Number of samples S was computed from.
        maxoutdim: Latent dimension q <= d. Defaults to d - 1.
        max_iter: Maximum number of iterations.
        tol: Convergence tolerance on the absolute log-likelihood change.

    Returns:
        Fitted PPCA model (float64).

    Raises:
        ConvergenceFailure: If tol is not met within max_iter iterations.
    """
    d = S.shape[0]
    q = d - 1 if maxoutdim is None else maxoutdim
    _check_outdim(d, q, closed_form=False)
    _check_iteration_params(max_iter, tol)

    values, vectors = top_eigenpairs(S, q)
    sigma2 = max(float(np.trace(S) - np.sum(values)) / max(d - q, 1), _noise_floor(S))
    W = vectors * np.sqrt(np.maximum(values - sigma2, 0.0))
    M = _gram(W, sigma2)
    M_inv = symmetrize(sla.inv(M))
    alpha = _ard_precision(W)
    I = np.eye(q)

    L_old = -np.inf
    change = np.inf
    for it in range(1, max_iter + 1):
        SW = S @ W
        A = sigma2 * I + M_inv @ W.T @ SW + (sigma2 / n) * (alpha[:, None] * M)
        W_new = sla.solve(A.T, SW.T).T
        sigma2 = _noise_update(S, SW, M_inv, W_new)
        W = W_new
        M = _gram(W, sigma2)
        M_inv = symmetrize(sla.inv(M))
        alpha = _ard_precision(W)

        L = marginal_log_likelihood(S, W, sigma2, n)
        change = abs(L - L_old)
        logger.debug("bayes_pca iter %d: loglik %.10g, change %.3g", it, L, change)
        if change < tol:
            logger.info(
                "bayes_pca converged after %d iterations, alpha=%s", it,
                np.array2string(alpha, precision=3)
            )
            return PPCA(mean, W, sigma2)
        L_old = L

    raise ConvergenceFailure(max_iter, float(change), tol, method="bayes")


def _ard_precision(W: np.ndarray) -> np.ndarray:
    """alpha_j = d / ||w_j||^2, capped for collapsed columns."""
    d = W.shape[0]
    eps = np.finfo(np.float64).eps
    wnorm = column_dot(W, W)
    alpha = np.full(wnorm.shape, 1.0 / eps)
    alive = wnorm > eps
    alpha[alive] = d / wnorm[alive]
    return alpha


def _as_data_matrix(X: Any) -> np.ndarray:
    X = check_dense(X, "data")
    if X.ndim != 2:
        raise InvalidArgument(f"Data must be a (d, n) matrix, got shape {X.shape}")
    if X.shape[1] < 1:
        raise InvalidArgument("Data must contain at least one sample")
    return X


def fit(
    X: Any,
    mean: Any = None,
    config: Optional[FitConfig] = None,
    **overrides: Any
) -> PPCA:
    """
    Fit a PPCA model to data.

    Args:
        X: Dense data matrix of shape (d, n), samples as columns.
        mean: None to estimate the mean from X, 0 for zero mean (X is
            taken as already centered), or an explicit vector of length d.
        config: Fit settings. Defaults to FitConfig().
        **overrides: Individual FitConfig fields, e.g. method="em".

    Returns:
        Fitted PPCA model with the float type of X.

    Raises:
        UnsupportedInputType: If X is sparse or not numeric.
        InvalidArgument: On shape mismatches or invalid settings.
        ConvergenceFailure: If an iterative method runs out of iterations.
    """
    X = _as_data_matrix(X)
    config = replace(config or FitConfig(), **overrides)
    if config.method not in FIT_METHODS:
        raise InvalidArgument(
            f"Unknown method: {config.method!r}, expected one of {FIT_METHODS}"
        )

    dtype = float_dtype(X.dtype)
    X = X.astype(np.float64, copy=False)
    d, n = X.shape

    mean_spec = resolve_mean(X, mean)
    Z = mean_spec.centralize(X)
    S = scatter_matrix(Z, config.covariance_estimator) / n

    logger.debug("Fitting PPCA (%s) on d=%d, n=%d", config.method, d, n)
    if config.method == "ml":
        model = ppca_ml(S, mean_spec, config.maxoutdim)
    elif config.method == "em":
        model = ppca_em(S, mean_spec, n, config.maxoutdim, config.max_iter, config.tol)
    else:
        model = bayes_pca(S, mean_spec, n, config.maxoutdim, config.max_iter, config.tol)

    if dtype == model.dtype:
        return model
    return PPCA(model.mean_spec, model.W.astype(dtype), model.sigma2)
