# Author: Emrullah Erce Dutkan
"""
PPCA Engine

A library for Probabilistic Principal Component Analysis using:
- Closed-form maximum likelihood from the covariance eigendecomposition
- Expectation-maximization
- Variational Bayesian PCA with automatic relevance determination

Data matrices hold samples as columns, shape (d, n). The package also
provides the matrix and centering helpers used by the fits, evaluation
metrics against a batch PCA reference, and a small benchmark.
"""

import logging

from .errors import (
    PPCAError,
    InvalidArgument,
    UnsupportedInputType,
    ConvergenceFailure
)
from .centering import NoMean, ExplicitMean, resolve_mean, centralize, decentralize
from .linalg import (
    symmetrize,
    add_diagonal,
    regularize_symmetric,
    column_dot,
    normalize_columns_under_metric,
    pairwise_l2_distance,
    top_eigenpairs,
    orthonormal_basis
)
from .scatter import scatter_matrix, default_covariance_estimator
from .model import PPCA
from .fitting import fit, ppca_ml, ppca_em, bayes_pca
from .config import FitConfig, BenchmarkConfig, get_default_config
from .metrics import (
    subspace_distance,
    principal_angles,
    reconstruction_error,
    explained_variance_ratio,
    batch_pca_reference
)
from .benchmark import run_benchmark, MethodResult

__version__ = "0.1.0"
__author__ = "Emrullah Erce Dutkan"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Model and fitting
    "PPCA",
    "fit",
    "ppca_ml",
    "ppca_em",
    "bayes_pca",
    # Errors
    "PPCAError",
    "InvalidArgument",
    "UnsupportedInputType",
    "ConvergenceFailure",
    # Mean handling
    "NoMean",
    "ExplicitMean",
    "resolve_mean",
    "centralize",
    "decentralize",
    # Matrix utilities
    "symmetrize",
    "add_diagonal",
    "regularize_symmetric",
    "column_dot",
    "normalize_columns_under_metric",
    "pairwise_l2_distance",
    "top_eigenpairs",
    "orthonormal_basis",
    "scatter_matrix",
    "default_covariance_estimator",
    # Metrics
    "subspace_distance",
    "principal_angles",
    "reconstruction_error",
    "explained_variance_ratio",
    "batch_pca_reference",
    # Configuration and benchmarking
    "FitConfig",
    "BenchmarkConfig",
    "get_default_config",
    "run_benchmark",
    "MethodResult",
]
