"""AdaBoostV (AdaBoost*): hard margin maximization.

Keeps ``γ̂ = min_t γ_t``, an upper bound on the best achievable margin, and
the target margin ``ρ = γ̂ - ε``. Each hypothesis gets the coefficient
``atanh(γ) - atanh(ρ)``; the weighting is updated multiplicatively as in
AdaBoost. The run converges once the normalized margin of the combined
hypothesis is within ``ε`` of ``γ̂``.

References:
    Rätsch & Warmuth, "Efficient margin maximizing with boosting", 2005.
"""

from __future__ import annotations

import math

from jax import Array

from marginboost.boosters.adaboost import AdaBoost
from marginboost.core.protocols import Classifier
from marginboost.core.state import Termination
from marginboost.losses import hard_margin
from marginboost.sample import Sample

# Keeps atanh(ρ) finite when γ̂ - ε falls to -1 or below.
_RHO_FLOOR = -1.0 + 1e-12


class AdaBoostV(AdaBoost):
    """AdaBoostV, maximizing the hard margin within ``ε``.

    Args:
        config: Run configuration. Default tolerance ``1 / n_sample``;
            default round budget ``2 ln(n_sample) / tolerance²``.
    """

    def default_tolerance(self, n_sample: int) -> float:
        return 1.0 / n_sample

    def default_max_rounds(self, n_sample: int, tolerance: float) -> int:
        return max(1, math.ceil(2.0 * math.log(n_sample) / tolerance**2))

    def _initialize(self, sample: Sample) -> None:
        super()._initialize(sample)
        self.gamma_hat = 1.0
        self.rho = 1.0

    def _coefficient(self, edge: float) -> float:
        self.gamma_hat = min(self.gamma_hat, edge)
        self.rho = max(self.gamma_hat - self.tolerance, _RHO_FLOOR)
        return math.atanh(edge) - math.atanh(self.rho)

    def _boost(
        self,
        hypothesis: Classifier,
        margins: Array,
        edge: float,
    ) -> Termination | None:
        if self._is_perfect(margins, edge):
            self.gamma_hat = 1.0
            return self._perfect(hypothesis, margins)

        weight = self._coefficient(edge)
        self._append(hypothesis, margins, weight)
        self._reweight(margins, weight)

        if self.gamma_hat - self.objective_value() <= self.tolerance:
            return Termination.CONVERGED
        return None

    def objective_value(self) -> float:
        """Hard margin of the normalized combined hypothesis."""
        return float(hard_margin(self.combined_margins()))

    @property
    def dual_bound(self) -> float | None:
        return self.gamma_hat
