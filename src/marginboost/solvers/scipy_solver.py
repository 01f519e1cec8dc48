"""Solver adapter backed by ``scipy.optimize``.

Linear programs go to ``linprog`` with the HiGHS backend, which also reports
the constraint marginals used as boosting coefficients. Quadratic programs
go to ``minimize`` with SLSQP and analytic gradients, after rescaling the
variables so that the quadratic term becomes the identity.
"""

from __future__ import annotations

import numpy as np
from scipy.optimize import linprog, minimize

from marginboost.errors import SolverFailure
from marginboost.solvers.problems import LinearProgram, QuadraticProgram, Solution


class ScipySolver:
    """LP/QP oracle for the solver-driven boosters.

    Args:
        qp_max_iter: Iteration limit for SLSQP.
        qp_tol: SLSQP objective tolerance.
        feasibility_tol: Largest constraint violation accepted from an SLSQP
            run that stopped without reporting success.

    Example:
        >>> booster = LPBoost(nu=10.0, solver=ScipySolver())
    """

    def __init__(
        self,
        qp_max_iter: int = 500,
        qp_tol: float = 1e-12,
        feasibility_tol: float = 1e-8,
    ):
        self.qp_max_iter = qp_max_iter
        self.qp_tol = qp_tol
        self.feasibility_tol = feasibility_tol

    def solve(self, problem: LinearProgram | QuadraticProgram) -> Solution:
        if isinstance(problem, LinearProgram):
            return self._solve_lp(problem)
        if isinstance(problem, QuadraticProgram):
            return self._solve_qp(problem)
        raise TypeError(f"Unsupported problem type: {type(problem).__name__}")

    def _solve_lp(self, problem: LinearProgram) -> Solution:
        result = linprog(
            problem.c,
            A_ub=problem.A_ub,
            b_ub=problem.b_ub,
            A_eq=problem.A_eq,
            b_eq=problem.b_eq,
            bounds=problem.bounds if problem.bounds is not None else (0, None),
            method="highs",
        )
        if result.status != 0:
            raise SolverFailure(f"linprog failed: {result.message}")

        dual = None
        if problem.A_ub is not None and result.ineqlin is not None:
            # HiGHS reports d(objective)/d(b_ub), which is <= 0 for a minimization.
            dual = np.maximum(-np.asarray(result.ineqlin.marginals), 0.0)

        return Solution(
            primal=np.asarray(result.x), dual=dual, objective=float(result.fun)
        )

    def _solve_qp(self, problem: QuadraticProgram) -> Solution:
        q = np.asarray(problem.q, dtype=np.float64)
        c = np.asarray(problem.c, dtype=np.float64)
        n_var = c.shape[0]
        if np.any(q <= 0.0):
            raise SolverFailure("The quadratic term must be positive definite.")

        # Solved in z = x / scale, where the quadratic term is the identity.
        scale = 1.0 / np.sqrt(q)
        c_scaled = c * scale

        def objective(z):
            return float(c_scaled @ z + 0.5 * (z @ z))

        def gradient(z):
            return c_scaled + z

        constraints = []
        if problem.A_ub is not None:
            A_ub = np.asarray(problem.A_ub, dtype=np.float64) * scale
            b_ub = np.asarray(problem.b_ub, dtype=np.float64)
            constraints.append({
                "type": "ineq",
                "fun": lambda z: b_ub - A_ub @ z,
                "jac": lambda z: -A_ub,
            })
        if problem.A_eq is not None:
            A_eq = np.asarray(problem.A_eq, dtype=np.float64) * scale
            b_eq = np.asarray(problem.b_eq, dtype=np.float64)
            constraints.append({
                "type": "eq",
                "fun": lambda z: A_eq @ z - b_eq,
                "jac": lambda z: A_eq,
            })

        bounds = None
        low = np.full(n_var, -np.inf)
        high = np.full(n_var, np.inf)
        if problem.bounds is not None:
            low = np.array([-np.inf if b[0] is None else b[0] for b in problem.bounds])
            high = np.array([np.inf if b[1] is None else b[1] for b in problem.bounds])
            bounds = [
                (None if np.isinf(lo) else lo / s, None if np.isinf(hi) else hi / s)
                for lo, hi, s in zip(low.tolist(), high.tolist(), scale.tolist())
            ]

        if problem.x0 is not None:
            x0 = np.asarray(problem.x0, dtype=np.float64)
        else:
            x0 = np.zeros(n_var)
        x0 = np.clip(x0, low, high)

        result = minimize(
            objective,
            x0 / scale,
            jac=gradient,
            method="SLSQP",
            bounds=bounds,
            constraints=constraints,
            options={"maxiter": self.qp_max_iter, "ftol": self.qp_tol},
        )

        x = np.clip(result.x * scale, low, high)
        violation = _max_violation(problem, x)
        if not result.success and violation > self.feasibility_tol:
            raise SolverFailure(
                f"SLSQP failed (status {result.status}): {result.message}; "
                f"max constraint violation {violation:.3e}"
            )
        objective_value = float(c @ x + 0.5 * np.sum(q * x * x))
        return Solution(primal=x, dual=None, objective=objective_value)


def _max_violation(problem: QuadraticProgram, x: np.ndarray) -> float:
    """Largest violation of any constraint of ``problem`` at ``x``."""
    violation = 0.0
    if problem.A_ub is not None:
        excess = np.asarray(problem.A_ub) @ x - np.asarray(problem.b_ub)
        violation = max(violation, float(np.max(excess, initial=0.0)))
    if problem.A_eq is not None:
        residual = np.asarray(problem.A_eq) @ x - np.asarray(problem.b_eq)
        violation = max(violation, float(np.max(np.abs(residual), initial=0.0)))
    if problem.bounds is not None:
        for value, (low, high) in zip(x, problem.bounds):
            if low is not None:
                violation = max(violation, low - value)
            if high is not None:
                violation = max(violation, value - high)
    return violation
