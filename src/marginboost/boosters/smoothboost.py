"""SmoothBoost: boosting with smooth distributions.

Every example keeps a running margin ``N_i = Σ_t (y_i h_t(x_i) - θ)`` and a
measure ``M_i = 1`` if ``N_i <= 0`` else ``(1 - γ)^(N_i / 2)``. The
weighting is the normalized measure, so no weight exceeds
``1 / (κ n_sample)`` while ``Σ M_i >= κ n_sample``; once the total measure
drops below ``κ n_sample`` the run has converged. The combined hypothesis
is the uniform vote over all hypotheses.

References:
    Servedio, "Smooth boosting and learning with malicious noise", 2003.
"""

from __future__ import annotations

import math

import jax.numpy as jnp
from jax import Array

from marginboost.boosters.base import Booster
from marginboost.core.protocols import Classifier
from marginboost.core.state import RunConfig, Termination
from marginboost.errors import InvalidConfiguration
from marginboost.losses import soft_margin
from marginboost.sample import Sample
from marginboost.weighting import initialize, renormalize


class SmoothBoost(Booster):
    """SmoothBoost.

    Args:
        kappa: Target fraction of the sample, in ``(0, 1)``. The final
            hypothesis has margin at least ``θ`` on all but a ``kappa``
            fraction of the examples.
        gamma: Guaranteed edge of the weak learner, in ``(0, 0.5)``. The
            margin target is ``θ = gamma / (2 + gamma)``.
        config: Run configuration. Default round budget
            ``2 / (kappa gamma² sqrt(1 - gamma))``.
    """

    edge_threshold = 0.0

    def __init__(
        self,
        kappa: float = 0.5,
        gamma: float = 0.25,
        config: RunConfig | None = None,
    ):
        super().__init__(config)
        self.kappa = kappa
        self.gamma = gamma

    @property
    def theta(self) -> float:
        return self.gamma / (2.0 + self.gamma)

    def default_max_rounds(self, n_sample: int, tolerance: float) -> int:
        denom = self.kappa * self.gamma**2 * math.sqrt(1.0 - self.gamma)
        return math.ceil(2.0 / denom)

    def _validate(self, sample: Sample) -> None:
        if not 0.0 < self.kappa < 1.0:
            raise InvalidConfiguration(f"kappa must be in (0, 1), got {self.kappa}")
        # The round budget divides by gamma.
        if not 0.0 < self.gamma < 0.5:
            raise InvalidConfiguration(f"gamma must be in (0, 0.5), got {self.gamma}")

    def _initialize(self, sample: Sample) -> None:
        n_sample = len(sample)
        self.distribution = initialize(n_sample)
        self.measure = jnp.ones((n_sample,))
        self.running_margins = jnp.zeros((n_sample,))

    def _boost(
        self,
        hypothesis: Classifier,
        margins: Array,
        edge: float,
    ) -> Termination | None:
        self._append(hypothesis, margins, 0.0)
        n_hypothesis = len(self.hypotheses)
        self.weights = [1.0 / n_hypothesis] * n_hypothesis

        self.running_margins = self.running_margins + margins - self.theta
        self.measure = jnp.where(
            self.running_margins <= 0.0,
            1.0,
            (1.0 - self.gamma) ** (self.running_margins / 2.0),
        )

        n_sample = self.measure.shape[0]
        if float(jnp.sum(self.measure)) < self.kappa * n_sample:
            return Termination.CONVERGED
        self.distribution = renormalize(self.measure)
        return None

    def objective_value(self) -> float:
        """Soft margin of the uniform vote with ``nu = kappa * n_sample``."""
        margins = self.combined_margins()
        nu = max(1.0, self.kappa * margins.shape[0])
        return float(soft_margin(margins, nu))
