"""LP/QP problem descriptions and solver adapters."""

from marginboost.solvers.margin import (
    EdgeLPResult,
    edge_lp,
    entropy_projection_qp,
    solve_edge_lp,
)
from marginboost.solvers.problems import LinearProgram, QuadraticProgram, Solution
from marginboost.solvers.scipy_solver import ScipySolver

__all__ = [
    "LinearProgram",
    "QuadraticProgram",
    "Solution",
    "ScipySolver",
    "EdgeLPResult",
    "edge_lp",
    "solve_edge_lp",
    "entropy_projection_qp",
]
