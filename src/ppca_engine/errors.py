# Author: Emrullah Erce Dutkan
"""
Error types raised by the PPCA engine.

Every error derives from PPCAError and from the closest builtin exception,
so callers can catch either ``ValueError``/``TypeError``/``RuntimeError`` or
the specific class.
"""

from typing import Optional


class PPCAError(Exception):
    """Base class for all PPCA engine errors."""


class InvalidArgument(PPCAError, ValueError):
    """Shape mismatch or out-of-range parameter."""


class UnsupportedInputType(PPCAError, TypeError):
    """Input is not a dense numeric array (e.g. a scipy sparse matrix)."""


class ConvergenceFailure(PPCAError, RuntimeError):
    """
    An iterative fit exhausted its iteration budget.

    Attributes:
        iterations: Number of iterations performed.
        last_change: Absolute log-likelihood change of the last iteration.
        tol: Tolerance that was not met.
        method: Name of the fitting method ("em" or "bayes").
    """

    def __init__(
        self,
        iterations: int,
        last_change: float,
        tol: float,
        method: Optional[str] = None
    ):
        self.iterations = iterations
        self.last_change = last_change
        self.tol = tol
        self.method = method
        prefix = f"{method}: " if method else ""
        super().__init__(
            f"{prefix}no convergence after {iterations} iterations "
            f"(last change {last_change:.3g}, tol {tol:.3g})"
        )
