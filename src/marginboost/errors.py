"""Exceptions raised by marginboost.

Configuration problems (bad sample size, capping parameter, tolerance or
budget) are ``ValueError`` subclasses and are raised before any round runs.
Numerical and solver failures abort a run. ``WeakLearnerFailure`` is the
only one the engine recovers from: the run ends with
``Termination.NO_IMPROVING_HYPOTHESIS``.
"""

from __future__ import annotations


class BoostingError(Exception):
    """Base class for all marginboost errors."""


class InvalidSampleSize(BoostingError, ValueError):
    """The sample has no examples."""


class InvalidCappingParameter(BoostingError, ValueError):
    """The capping parameter ``nu`` lies outside ``[1, n_sample]``."""

    def __init__(self, nu: float, n_sample: int) -> None:
        super().__init__(
            f"The capping parameter must be in [1, {n_sample}], got {nu}."
        )
        self.nu = nu
        self.n_sample = n_sample


class InvalidConfiguration(BoostingError, ValueError):
    """A run parameter (tolerance, budget, ...) is out of range."""


class DegenerateWeighting(BoostingError):
    """All weights collapsed to zero (or overflowed) during normalization."""


class InfeasibleCapping(BoostingError):
    """No distribution with entries at most ``1/nu`` fits the given support."""


class SolverFailure(BoostingError):
    """The LP/QP solver reported an infeasible, unbounded or failed solve."""


class SolverNotConfigured(BoostingError, ValueError):
    """A solver-driven booster was created without a solver."""


class WeakLearnerFailure(BoostingError):
    """The weak learner could not produce a hypothesis."""
