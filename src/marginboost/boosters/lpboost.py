"""LPBoost: soft margin maximization by column generation.

Every round re-solves the capped edge LP over all hypotheses obtained so
far. Its primal optimum is the next weighting, its multipliers replace all
hypothesis coefficients, and its value ``γ*`` is compared with the best
edge seen, ``γ̂ = min_t γ_t``: the run converges once ``γ* >= γ̂ - ε``.

References:
    Demiriz, Bennett & Shawe-Taylor, "Linear programming boosting via
    column generation", 2002.
"""

from __future__ import annotations

import math

from jax import Array

from marginboost.boosters.base import CappedBooster, SolverBackedMixin, as_numpy
from marginboost.core.protocols import Classifier, Solver
from marginboost.core.state import RunConfig, Termination
from marginboost.losses import soft_margin
from marginboost.sample import Sample
from marginboost.solvers import solve_edge_lp
from marginboost.weighting import project_to_cap


class LPBoost(SolverBackedMixin, CappedBooster):
    """LPBoost with capping parameter ``nu``.

    Args:
        nu: Capping parameter in ``[1, n_sample]``.
        solver: LP oracle, e.g. ``ScipySolver()``. Required.
        config: Run configuration. Default tolerance ``1 / n_sample``.

    Raises:
        SolverNotConfigured: If ``solver`` is None.

    Example:
        >>> booster = LPBoost(nu=0.1 * n_sample, solver=ScipySolver())
        >>> f = booster.fit(sample, DecisionStump())
    """

    def __init__(
        self,
        nu: float = 1.0,
        solver: Solver | None = None,
        config: RunConfig | None = None,
    ):
        super().__init__(nu=nu, config=config)
        self._bind_solver(solver)

    def default_max_rounds(self, n_sample: int, tolerance: float) -> int:
        return max(1, math.ceil(2.0 * math.log(n_sample / self.nu) / tolerance**2))

    def _initialize(self, sample: Sample) -> None:
        super()._initialize(sample)
        self.gamma_hat = 1.0
        self.gamma_star = -1.0

    def _boost(
        self,
        hypothesis: Classifier,
        margins: Array,
        edge: float,
    ) -> Termination | None:
        self.gamma_hat = min(self.gamma_hat, edge)
        self._append(hypothesis, margins, 0.0)

        result = solve_edge_lp(self.solver, as_numpy(self.margin_matrix), self.nu)
        self.weights = result.coefficients.tolist()
        self.gamma_star = result.value
        self.distribution = project_to_cap(result.weighting, self.nu)

        if self.gamma_star >= self.gamma_hat - self.tolerance:
            return Termination.CONVERGED
        return None

    def objective_value(self) -> float:
        """Soft margin of the normalized combined hypothesis."""
        return float(soft_margin(self.combined_margins(), self.nu))

    @property
    def dual_bound(self) -> float | None:
        return self.gamma_hat
