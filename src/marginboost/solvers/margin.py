"""Margin problems shared by the solver-driven boosters.

``margin_rows`` is the (num_hypotheses, n_sample) matrix ``A`` with
``A[j, i] = y_i h_j(x_i)``; the edge of hypothesis ``j`` under ``d`` is
``A[j] @ d``.

The capped edge LP

    min_{d, γ} γ   s.t.  A d <= γ,  Σ d = 1,  0 <= d <= 1/nu

has the soft-margin LP as its dual, so its inequality multipliers are the
optimal hypothesis coefficients.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

from marginboost.core.protocols import Solver
from marginboost.errors import SolverFailure
from marginboost.solvers.problems import LinearProgram, QuadraticProgram

# Floor applied to weights inside logarithms and curvature terms.
ENTROPY_FLOOR = 1e-12


class EdgeLPResult(NamedTuple):
    """Solution of the capped edge LP.

    Attributes:
        weighting: Optimal distribution over examples, shape (n_sample,).
        value: Optimal value γ*, the smallest achievable maximal edge.
        coefficients: Hypothesis coefficients (LP multipliers), summing to 1.
    """

    weighting: np.ndarray
    value: float
    coefficients: np.ndarray


def edge_lp(margin_rows: np.ndarray, nu: float = 1.0) -> LinearProgram:
    """Capped edge minimization LP over ``(d_1, ..., d_n, γ)``."""
    margin_rows = np.asarray(margin_rows, dtype=np.float64)
    n_hypothesis, n_sample = margin_rows.shape

    c = np.zeros(n_sample + 1)
    c[-1] = 1.0
    A_ub = np.hstack([margin_rows, -np.ones((n_hypothesis, 1))])
    b_ub = np.zeros(n_hypothesis)
    A_eq = np.append(np.ones(n_sample), 0.0)[None, :]
    b_eq = np.ones(1)
    bounds = [(0.0, 1.0 / nu)] * n_sample + [(None, None)]
    return LinearProgram(
        c=c, A_ub=A_ub, b_ub=b_ub, A_eq=A_eq, b_eq=b_eq, bounds=bounds
    )


def solve_edge_lp(
    solver: Solver,
    margin_rows: np.ndarray,
    nu: float = 1.0,
) -> EdgeLPResult:
    """Solve the capped edge LP and unpack its solution."""
    margin_rows = np.asarray(margin_rows, dtype=np.float64)
    n_sample = margin_rows.shape[1]
    solution = solver.solve(edge_lp(margin_rows, nu))

    if solution.dual is None:
        raise SolverFailure("The solver did not report constraint multipliers.")
    coefficients = np.maximum(np.asarray(solution.dual, dtype=np.float64), 0.0)
    total = coefficients.sum()
    if not total > 0.0:
        raise SolverFailure("The edge LP multipliers are all zero.")

    return EdgeLPResult(
        weighting=np.asarray(solution.primal[:n_sample], dtype=np.float64),
        value=float(solution.primal[n_sample]),
        coefficients=coefficients / total,
    )


def entropy_projection_qp(
    weighting: np.ndarray,
    margin_rows: np.ndarray,
    edge_bound: float,
    nu: float = 1.0,
) -> QuadraticProgram:
    """Second-order step of the relative-entropy projection.

    For the current weighting ``d`` finds the step ``δ`` minimizing the
    quadratic model of ``RE(d + δ || uniform)`` subject to
    ``A (d + δ) <= edge_bound``, ``Σ δ = 0`` and ``0 <= d + δ <= 1/nu``.
    """
    weighting = np.asarray(weighting, dtype=np.float64)
    margin_rows = np.asarray(margin_rows, dtype=np.float64)
    n_sample = weighting.shape[0]
    cap = 1.0 / nu

    floored = np.maximum(weighting, ENTROPY_FLOOR)
    q = 1.0 / floored
    c = np.log(n_sample * floored) + 1.0
    A_ub = margin_rows
    b_ub = edge_bound - margin_rows @ weighting
    A_eq = np.ones((1, n_sample))
    b_eq = np.zeros(1)
    bounds = [(-d, cap - d) for d in weighting.tolist()]
    return QuadraticProgram(
        q=q, c=c, A_ub=A_ub, b_ub=b_ub, A_eq=A_eq, b_eq=b_eq,
        bounds=bounds, x0=np.zeros(n_sample),
    )
