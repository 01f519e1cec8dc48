"""SoftBoost and TotalBoost: relative entropy projection boosting.

The next weighting is the relative entropy projection of the uniform
weighting onto

    {d : 0 <= d_i <= 1/nu, Σ d = 1, A_j d <= γ̂ - ε for every hypothesis j},

computed by a sequence of quadratic programs, each minimizing the second
order model of the relative entropy around the current point. When that
set is empty (the capped edge LP has value ``>= γ̂ - ε``) the run has
converged. Coefficients are the multipliers of the capped edge LP.

TotalBoost is SoftBoost without capping (``nu = 1``).

References:
    Warmuth, Glocer & Rätsch, "Boosting algorithms for maximizing the soft
    margin", 2007.
    Warmuth, Liao & Rätsch, "Totally corrective boosting algorithms that
    maximize the margin", 2006.
"""

from __future__ import annotations

import math

import numpy as np
from jax import Array

from marginboost.boosters.base import CappedBooster, SolverBackedMixin, as_numpy
from marginboost.core.protocols import Classifier, Solver
from marginboost.core.state import RunConfig, Termination
from marginboost.losses import hard_margin, soft_margin
from marginboost.sample import Sample
from marginboost.solvers import entropy_projection_qp, solve_edge_lp
from marginboost.weighting import project_to_cap


class SoftBoost(SolverBackedMixin, CappedBooster):
    """SoftBoost with capping parameter ``nu``.

    Args:
        nu: Capping parameter in ``[1, n_sample]``.
        solver: LP/QP oracle, e.g. ``ScipySolver()``. Required.
        config: Run configuration. Default tolerance ``1 / n_sample``;
            default round budget ``2 ln(n_sample / nu) / tolerance²``.
        max_projection_steps: Limit on the quadratic programs solved per
            projection. The projection stops earlier once a step is shorter
            than ``tolerance / 10``.

    Raises:
        SolverNotConfigured: If ``solver`` is None.
    """

    def __init__(
        self,
        nu: float = 1.0,
        solver: Solver | None = None,
        config: RunConfig | None = None,
        max_projection_steps: int = 100,
    ):
        super().__init__(nu=nu, config=config)
        self._bind_solver(solver)
        self.max_projection_steps = max_projection_steps

    def default_max_rounds(self, n_sample: int, tolerance: float) -> int:
        return max(1, math.ceil(2.0 * math.log(n_sample / self.nu) / tolerance**2))

    def _initialize(self, sample: Sample) -> None:
        super()._initialize(sample)
        self.gamma_hat = 1.0

    def _project(self, margin_rows: np.ndarray) -> np.ndarray:
        weighting = as_numpy(self.distribution)
        edge_bound = self.gamma_hat - self.tolerance
        for _ in range(self.max_projection_steps):
            problem = entropy_projection_qp(weighting, margin_rows, edge_bound, self.nu)
            step = self.solver.solve(problem).primal
            weighting = weighting + step
            if np.linalg.norm(step) < self.tolerance / 10.0:
                break
        return weighting

    def _boost(
        self,
        hypothesis: Classifier,
        margins: Array,
        edge: float,
    ) -> Termination | None:
        self.gamma_hat = min(self.gamma_hat, edge)
        self._append(hypothesis, margins, 0.0)

        margin_rows = as_numpy(self.margin_matrix)
        result = solve_edge_lp(self.solver, margin_rows, self.nu)
        self.weights = result.coefficients.tolist()
        if result.value >= self.gamma_hat - self.tolerance:
            return Termination.CONVERGED

        self.distribution = project_to_cap(self._project(margin_rows), self.nu)
        return None

    def objective_value(self) -> float:
        """Soft margin of the normalized combined hypothesis."""
        return float(soft_margin(self.combined_margins(), self.nu))

    @property
    def dual_bound(self) -> float | None:
        return self.gamma_hat


class TotalBoost(SoftBoost):
    """TotalBoost: SoftBoost for the hard margin.

    Args:
        solver: LP/QP oracle, e.g. ``ScipySolver()``. Required.
        config: Run configuration.
        max_projection_steps: As in ``SoftBoost``.
    """

    def __init__(
        self,
        solver: Solver | None = None,
        config: RunConfig | None = None,
        max_projection_steps: int = 100,
    ):
        super().__init__(
            nu=1.0,
            solver=solver,
            config=config,
            max_projection_steps=max_projection_steps,
        )

    def objective_value(self) -> float:
        """Hard margin of the normalized combined hypothesis."""
        return float(hard_margin(self.combined_margins()))
