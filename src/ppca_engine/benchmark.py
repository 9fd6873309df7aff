# Author: Emrullah Erce Dutkan
"""
Benchmarking framework for the PPCA fitting methods.

Fits every configured method ("ml", "em", "bayes") on the same synthetic
data set and compares each model against a batch PCA reference:
- Subspace error (vs SVD reference)
- Reconstruction error on held-out data
- Noise variance estimate and log-likelihood
- Runtime

A method that fails to converge is recorded with converged=False instead
of aborting the whole run.
"""

import logging
import time
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, asdict
import numpy as np

from .config import BenchmarkConfig, FitConfig
from .datasets import decaying_spectrum, generate_low_rank_data
from .errors import ConvergenceFailure
from .fitting import fit
from .metrics import (
    batch_pca_reference,
    reconstruction_error,
    subspace_distance
)

logger = logging.getLogger(__name__)


@dataclass
class MethodResult:
    """Results for a single method run."""
    method: str
    converged: bool
    runtime_seconds: float
    subspace_error: float = float("nan")
    reconstruction_error: float = float("nan")
    noise_variance: float = float("nan")
    log_likelihood: float = float("nan")
    k: int = 0
    error: Optional[str] = None


def run_single_method(
    method: str,
    X_train: np.ndarray,
    X_test: np.ndarray,
    W_ref: np.ndarray,
    fit_config: FitConfig
) -> MethodResult:
    """
    Fit one method and collect metrics.

    Args:
        method: Fitting method name.
        X_train: Training data of shape (d, n).
        X_test: Held-out data of shape (d, m).
        W_ref: Reference principal components, shape (d, k).
        fit_config: Settings shared by all methods.

    Returns:
        MethodResult with metrics, or converged=False and the error message.
    """
    k = W_ref.shape[1]
    start_time = time.time()
    try:
        model = fit(X_train, config=fit_config, method=method, maxoutdim=k)
    except ConvergenceFailure as exc:
        logger.warning("%s did not converge: %s", method, exc)
        return MethodResult(
            method=method,
            converged=False,
            runtime_seconds=time.time() - start_time,
            k=k,
            error=str(exc)
        )
    runtime = time.time() - start_time

    return MethodResult(
        method=method,
        converged=True,
        runtime_seconds=runtime,
        subspace_error=subspace_distance(model.loadings, W_ref),
        reconstruction_error=reconstruction_error(model, X_test),
        noise_variance=float(model.noise_variance),
        log_likelihood=model.log_likelihood(X_test),
        k=k
    )


def run_benchmark(config: BenchmarkConfig) -> List[MethodResult]:
    """
    Run full benchmark suite comparing the fitting methods.

    Args:
        config: Benchmark configuration.

    Returns:
        List of MethodResult, one per method in config.methods.
    """
    k = config.maxoutdim or config.rank
    spectrum = decaying_spectrum(config.d, config.rank, config.noise_std)

    # Same rotation and mean for train and test: same seed, then split
    X, _ = generate_low_rank_data(spectrum, 2 * config.n, seed=config.seed)
    X_train, X_test = X[:, :config.n], X[:, config.n:]

    _, W_ref = batch_pca_reference(X_train, k)
    fit_config = FitConfig(max_iter=config.max_iter, tol=config.tol)

    logger.info(
        "Benchmark: d=%d, n=%d, rank=%d, k=%d, methods=%s",
        config.d, config.n, config.rank, k, ",".join(config.methods)
    )
    results = []
    for method in config.methods:
        result = run_single_method(method, X_train, X_test, W_ref, fit_config)
        logger.info(
            "%s: subspace error %.3g, reconstruction error %.4g, %.3fs",
            method, result.subspace_error, result.reconstruction_error,
            result.runtime_seconds
        )
        results.append(result)
    return results


def results_to_dict(results: List[MethodResult]) -> List[Dict[str, Any]]:
    """Convert results to a list of plain dictionaries."""
    return [asdict(r) for r in results]


def format_results_table(results: List[MethodResult]) -> str:
    """
    Format results as a text table.

    Args:
        results: List of MethodResult.

    Returns:
        Formatted table string.
    """
    header = (
        f"{'Method':<8} {'Conv':<5} {'SubErr':>10} {'ReconErr':>10} "
        f"{'Sigma2':>10} {'LogLik':>12} {'Time(s)':>8}"
    )
    lines = [header, "-" * len(header)]
    for r in results:
        lines.append(
            f"{r.method:<8} {'yes' if r.converged else 'no':<5} "
            f"{r.subspace_error:>10.4g} {r.reconstruction_error:>10.4g} "
            f"{r.noise_variance:>10.4g} {r.log_likelihood:>12.6g} "
            f"{r.runtime_seconds:>8.3f}"
        )
    return "\n".join(lines)
