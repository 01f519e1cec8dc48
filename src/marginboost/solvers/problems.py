"""Descriptions of the optimization problems handed to a solver.

Both problem types share scipy's ``linprog`` conventions: minimize the
objective subject to ``A_ub @ x <= b_ub``, ``A_eq @ x == b_eq`` and
per-variable ``bounds`` (``(low, high)`` pairs, ``None`` meaning unbounded).
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np


class LinearProgram(NamedTuple):
    """``min c @ x`` under linear constraints.

    Attributes:
        c: Objective coefficients, shape (n_var,).
        A_ub: Inequality matrix, shape (n_ub, n_var), or None.
        b_ub: Inequality right-hand side, shape (n_ub,), or None.
        A_eq: Equality matrix, shape (n_eq, n_var), or None.
        b_eq: Equality right-hand side, shape (n_eq,), or None.
        bounds: One ``(low, high)`` pair per variable, or None for ``x >= 0``.
    """

    c: np.ndarray
    A_ub: np.ndarray | None = None
    b_ub: np.ndarray | None = None
    A_eq: np.ndarray | None = None
    b_eq: np.ndarray | None = None
    bounds: list[tuple[float | None, float | None]] | None = None


class QuadraticProgram(NamedTuple):
    """``min Σ_i (c_i x_i + q_i x_i² / 2)`` under linear constraints.

    Only diagonal quadratic terms are supported.

    Attributes:
        q: Diagonal of the (positive definite) quadratic term, shape (n_var,).
        c: Linear term, shape (n_var,).
        A_ub, b_ub, A_eq, b_eq, bounds: As in ``LinearProgram``.
        x0: Starting point, or None for the origin clipped into the bounds.
    """

    q: np.ndarray
    c: np.ndarray
    A_ub: np.ndarray | None = None
    b_ub: np.ndarray | None = None
    A_eq: np.ndarray | None = None
    b_eq: np.ndarray | None = None
    bounds: list[tuple[float | None, float | None]] | None = None
    x0: np.ndarray | None = None


class Solution(NamedTuple):
    """Result of a successful solve.

    Attributes:
        primal: Optimal point, shape (n_var,).
        dual: Nonnegative multipliers of the ``A_ub`` rows, shape (n_ub,),
            or None if the problem has no inequalities or the solver does
            not report them.
        objective: Optimal objective value.
    """

    primal: np.ndarray
    dual: np.ndarray | None
    objective: float
