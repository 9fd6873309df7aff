# Author: Emrullah Erce Dutkan
"""
Configuration for PPCA fitting and benchmark runs.

Defaults are chosen so that ``fit(X)`` and ``run_benchmark(BenchmarkConfig())``
work out of the box. Nothing here is module state: every setting is passed
explicitly through these dataclasses.
"""

from typing import Any, List, Optional, Literal
from dataclasses import dataclass, field, asdict


FitMethod = Literal["ml", "em", "bayes"]
FIT_METHODS = ("ml", "em", "bayes")


@dataclass
class FitConfig:
    """
    Settings for a single PPCA fit.

    Attributes:
        method: "ml" (closed form), "em" or "bayes".
        maxoutdim: Latent dimension q. None means d - 1.
        max_iter: Iteration cap for "em" and "bayes".
        tol: Absolute log-likelihood change that counts as converged.
        covariance_estimator: scikit-learn style covariance estimator.
            None means sklearn.covariance.EmpiricalCovariance.
    """
    method: FitMethod = "ml"
    maxoutdim: Optional[int] = None
    max_iter: int = 1000
    tol: float = 1e-6
    covariance_estimator: Optional[Any] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization (estimator excluded)."""
        d = asdict(self)
        d.pop("covariance_estimator")
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "FitConfig":
        """Create from dictionary."""
        return cls(**d)


@dataclass
class BenchmarkConfig:
    """Configuration for comparing the fitting methods on synthetic data."""
    d: int = 20
    n: int = 2000
    rank: int = 5
    noise_std: float = 0.1
    maxoutdim: Optional[int] = None  # If None, uses rank
    methods: List[str] = field(default_factory=lambda: list(FIT_METHODS))
    max_iter: int = 1000
    tol: float = 1e-6
    seed: int = 42

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "BenchmarkConfig":
        return cls(**d)


def get_default_config() -> FitConfig:
    """Get default fit configuration (closed-form ML)."""
    return FitConfig()


def get_quick_benchmark_config() -> BenchmarkConfig:
    """Small benchmark suitable for tests and smoke runs."""
    return BenchmarkConfig(d=8, n=500, rank=3, noise_std=0.1)
