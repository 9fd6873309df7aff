# Author: Emrullah Erce Dutkan
"""
Visualization utilities for PPCA fits.

This module provides plotting functions for:
- Covariance eigen-spectrum against the fitted noise level
- Column norms of the loadings (shows ARD shrinkage of Bayesian fits)
- Method comparisons from a benchmark run
"""

from typing import List, Optional
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from .benchmark import MethodResult
from .linalg import column_dot
from .model import PPCA
from .scatter import scatter_matrix


def setup_style() -> None:
    """Configure matplotlib style for clean plots."""
    plt.style.use("seaborn-v0_8-whitegrid")
    plt.rcParams.update({
        "figure.figsize": (10, 6),
        "font.size": 11,
        "axes.labelsize": 12,
        "axes.titlesize": 13,
        "legend.fontsize": 10,
        "lines.linewidth": 1.5,
        "lines.markersize": 6
    })


def _finish(fig: Figure, save_path: Optional[str], show: bool) -> Figure:
    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    if show:
        plt.show()
    else:
        plt.close(fig)

    return fig


def plot_eigen_spectrum(
    X: np.ndarray,
    model: Optional[PPCA] = None,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
    show: bool = True
) -> Figure:
    """
    Plot the sorted eigenvalues of the sample covariance of X.

    If a model is given, its noise variance is drawn as a horizontal line
    and the retained latent dimensions are marked.

    Args:
        X: Data of shape (d, n).
        model: Optional fitted PPCA model.
        title: Plot title.
        save_path: Path to save figure.
        show: Whether to display the plot.

    Returns:
        Matplotlib figure.
    """
    X = np.asarray(X, dtype=np.float64)
    mean = model.mean[:, None] if model is not None else X.mean(axis=1, keepdims=True)
    S = scatter_matrix(X - mean) / X.shape[1]
    eigvals = np.sort(np.linalg.eigvalsh(S))[::-1]

    setup_style()
    fig, ax = plt.subplots()
    idx = np.arange(1, len(eigvals) + 1)
    ax.plot(idx, eigvals, marker="o", label="Covariance eigenvalues")

    if model is not None:
        q = model.latent_dim
        ax.axhline(float(model.noise_variance), color="tab:red", linestyle="--",
                   label=f"Noise variance ({float(model.noise_variance):.3g})")
        ax.axvline(q + 0.5, color="gray", linestyle=":", label=f"q = {q}")

    ax.set_xlabel("Component")
    ax.set_ylabel("Eigenvalue")
    ax.set_yscale("log")
    ax.set_title(title or "Covariance Eigen-spectrum")
    ax.legend(loc="best")

    return _finish(fig, save_path, show)


def plot_loading_norms(
    model: PPCA,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
    show: bool = True
) -> Figure:
    """
    Bar chart of the column norms ||w_j|| of the loadings.

    Args:
        model: Fitted PPCA model.
        title: Plot title.
        save_path: Path to save figure.
        show: Whether to display.

    Returns:
        Matplotlib figure.
    """
    W = np.asarray(model.loadings, dtype=np.float64)
    norms = np.sqrt(column_dot(W, W))

    setup_style()
    fig, ax = plt.subplots()
    ax.bar(np.arange(1, len(norms) + 1), norms, color="tab:blue")
    ax.set_xlabel("Latent dimension")
    ax.set_ylabel("Column norm")
    ax.set_title(title or "Loading Column Norms")

    return _finish(fig, save_path, show)


def plot_benchmark_results(
    results: List[MethodResult],
    metric: str = "reconstruction_error",
    title: Optional[str] = None,
    save_path: Optional[str] = None,
    show: bool = True
) -> Figure:
    """
    Bar chart of one metric across methods.

    Args:
        results: List of MethodResult.
        metric: Attribute of MethodResult to plot ("subspace_error",
                "reconstruction_error", "runtime_seconds", ...).
        title: Plot title.
        save_path: Path to save figure.
        show: Whether to display.

    Returns:
        Matplotlib figure.
    """
    metric_labels = {
        "subspace_error": "Subspace Error (mean sin theta)",
        "reconstruction_error": "Reconstruction Error (MSE)",
        "noise_variance": "Noise Variance",
        "runtime_seconds": "Runtime (s)"
    }

    setup_style()
    fig, ax = plt.subplots()

    names = [r.method for r in results]
    values = [getattr(r, metric) for r in results]
    colors = ["tab:blue" if r.converged else "tab:gray" for r in results]
    ax.bar(names, values, color=colors)

    ax.set_xlabel("Method")
    ax.set_ylabel(metric_labels.get(metric, metric))
    ax.set_title(title or f"{metric_labels.get(metric, metric)} by Method")

    return _finish(fig, save_path, show)
