"""AdaBoost: empirical risk minimization of the exponential loss.

Each hypothesis gets the coefficient ``α = ½ ln((1 + γ) / (1 - γ))`` and
the weighting is updated multiplicatively, ``d_i ∝ d_i exp(-α y_i h(x_i))``,
in log-space. The training error is bounded by ``Π_t sqrt(1 - γ_t²)``; the
run converges once that bound drops below the tolerance.

References:
    Freund & Schapire, "A decision-theoretic generalization of on-line
    learning and an application to boosting", 1997.
"""

from __future__ import annotations

import math

import jax.numpy as jnp
from jax import Array

from marginboost.boosters.base import Booster
from marginboost.core.protocols import Classifier
from marginboost.core.state import Termination
from marginboost.losses import exponential_loss
from marginboost.sample import Sample
from marginboost.weighting import initialize, log_normalize


class AdaBoost(Booster):
    """AdaBoost with the training-error-bound stopping rule.

    Args:
        config: Run configuration. Default tolerance ``1 / (n_sample + 1)``,
            below which the error bound certifies zero training error;
            default round budget ``ln(n_sample) / tolerance²``.

    Example:
        >>> booster = AdaBoost(config=RunConfig(max_rounds=100))
        >>> f = booster.fit(sample, DecisionStump())
    """

    edge_threshold = 0.0

    def default_tolerance(self, n_sample: int) -> float:
        return 1.0 / (n_sample + 1)

    def default_max_rounds(self, n_sample: int, tolerance: float) -> int:
        return max(1, math.ceil(math.log(n_sample) / tolerance**2))

    def _initialize(self, sample: Sample) -> None:
        n_sample = len(sample)
        self.distribution = initialize(n_sample)
        self._log_weights = jnp.full((n_sample,), -math.log(n_sample))
        self.error_bound = 1.0

    def _is_perfect(self, margins: Array, edge: float) -> bool:
        return edge >= 1.0 or bool(jnp.all(margins >= 1.0))

    def _perfect(self, hypothesis: Classifier, margins: Array) -> Termination:
        """A hypothesis with margin 1 on every example (edge 1) is perfect.

        Earlier hypotheses keep their place in the ensemble with weight 0.
        """
        self.weights = [0.0] * len(self.weights)
        self._append(hypothesis, margins, 1.0)
        self.error_bound = 0.0
        return Termination.CONVERGED

    def _coefficient(self, edge: float) -> float:
        return 0.5 * math.log((1.0 + edge) / (1.0 - edge))

    def _reweight(self, margins: Array, weight: float) -> None:
        self._log_weights = self._log_weights - weight * margins
        self.distribution = log_normalize(self._log_weights)

    def _boost(
        self,
        hypothesis: Classifier,
        margins: Array,
        edge: float,
    ) -> Termination | None:
        if self._is_perfect(margins, edge):
            return self._perfect(hypothesis, margins)

        weight = self._coefficient(edge)
        self._append(hypothesis, margins, weight)
        self._reweight(margins, weight)

        self.error_bound *= math.sqrt(1.0 - edge**2)
        if self.error_bound < self.tolerance:
            return Termination.CONVERGED
        return None

    def objective_value(self) -> float:
        """Exponential loss of the (unnormalized) combined hypothesis."""
        return float(exponential_loss(self.combined_margins(normalize=False)))

    @property
    def dual_bound(self) -> float | None:
        """Upper bound on the training error."""
        return self.error_bound
