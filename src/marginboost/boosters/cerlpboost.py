"""CERLPBoost: corrective ERLPBoost (Frank-Wolfe on the soft margin).

The weighting is the capped softmax of ``-η y_i F(x_i)`` where ``F`` is the
current combined hypothesis. For a new hypothesis ``h`` the Frank-Wolfe gap
is ``Σ_i d_i y_i (h(x_i) - F(x_i))``; the run converges once it is at most
``ε/2``. Otherwise every coefficient is scaled by ``1 - λ`` and ``h`` joins
with coefficient ``λ``, the step size that is optimal for the quadratic
upper bound of the smoothed objective.

References:
    Shalev-Shwartz & Singer, "On the equivalence of weak learnability and
    linear separability", 2010.
"""

from __future__ import annotations

import math

import jax.numpy as jnp
from jax import Array

from marginboost.boosters.base import CappedBooster
from marginboost.core.protocols import Classifier
from marginboost.core.state import Termination
from marginboost.losses import soft_margin
from marginboost.sample import Sample
from marginboost.weighting import capped_softmax


class CERLPBoost(CappedBooster):
    """CERLPBoost with capping parameter ``nu``.

    Args:
        nu: Capping parameter in ``[1, n_sample]``.
        config: Run configuration. Default tolerance ``1 / n_sample``;
            default round budget ``8 ln(n_sample/nu) / (ε/2)²``.
    """

    def default_max_rounds(self, n_sample: int, tolerance: float) -> int:
        half = tolerance / 2.0
        return max(1, math.ceil(8.0 * math.log(n_sample / self.nu) / half**2))

    def _initialize(self, sample: Sample) -> None:
        super()._initialize(sample)
        self.eta = max(0.5, math.log(len(sample) / self.nu) / (self.tolerance / 2.0))
        self.gamma_hat = 1.0

    def _boost(
        self,
        hypothesis: Classifier,
        margins: Array,
        edge: float,
    ) -> Termination | None:
        self.gamma_hat = min(self.gamma_hat, edge)

        gap = margins - self.combined_margins(normalize=False)
        diff = float(jnp.dot(gap, self.distribution))
        if diff <= self.tolerance / 2.0:
            return Termination.CONVERGED

        gap_norm = float(jnp.max(jnp.abs(gap)))
        step = min(1.0, max(0.0, diff / (self.eta * gap_norm**2)))

        self.weights = [w * (1.0 - step) for w in self.weights]
        self._append(hypothesis, margins, step)

        self.distribution = capped_softmax(
            -self.eta * self.combined_margins(normalize=False), self.nu
        )
        return None

    def objective_value(self) -> float:
        """Soft margin of the normalized combined hypothesis."""
        return float(soft_margin(self.combined_margins(), self.nu))

    @property
    def dual_bound(self) -> float | None:
        return self.gamma_hat
