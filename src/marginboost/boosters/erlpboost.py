"""ERLPBoost: entropy regularized LPBoost.

Minimizes the regularized maximal edge over capped distributions,

    f(d) = max_j A_j d + (1/η) (Σ_i d_i ln d_i + ln n),   0 <= d_i <= 1/nu,

whose dual is

    φ(w) = min_d  d·(Aᵀw) + (1/η) (Σ_i d_i ln d_i + ln n),   w in the simplex.

The inner minimizer is the capped softmax ``d(w) ∝ exp(-η Aᵀw)`` and
``∇φ(w) = A d(w)``, so the dual is solved by projected gradient ascent with
optax. Any ``φ(w)`` is a lower bound ``γ*`` on the regularized optimum;
``γ̂ = min_t (γ_t + regularizer(d_t))`` is an upper bound. The run
converges once ``γ̂ - γ* <= ε/2``. Coefficients are the dual optimum ``w``.

References:
    Warmuth, Glocer & Vishwanathan, "Entropy regularized LPBoost", 2008.
"""

from __future__ import annotations

import math

import jax
import jax.numpy as jnp
import optax
from jax import Array

from marginboost.boosters.base import CappedBooster
from marginboost.core.protocols import Classifier
from marginboost.core.state import RunConfig, Termination
from marginboost.losses import soft_margin
from marginboost.sample import Sample
from marginboost.weighting import capped_softmax, capped_softmax_unchecked


def entropy_regularizer(weighting: Array, eta: float) -> Array:
    """``(Σ d ln d + ln n) / η``, the relative entropy to uniform over ``η``."""
    n_sample = weighting.shape[0]
    safe = jnp.where(weighting > 0.0, weighting, 1.0)
    neg_entropy = jnp.sum(jnp.where(weighting > 0.0, weighting * jnp.log(safe), 0.0))
    return (neg_entropy + jnp.log(n_sample)) / eta


def dual_objective(
    coefficients: Array,
    margin_rows: Array,
    eta: float,
    cap: Array,
) -> tuple[Array, Array, Array]:
    """Dual value, its gradient and the duality gap at ``coefficients``.

    Returns:
        Tuple of (φ(w), A d(w), max_j A_j d(w) - w·A d(w)).
    """
    scores = coefficients @ margin_rows
    weighting = capped_softmax_unchecked(-eta * scores, cap)
    edges = margin_rows @ weighting
    value = weighting @ scores + entropy_regularizer(weighting, eta)
    gap = jnp.max(edges) - coefficients @ edges
    return value, edges, gap


class ERLPBoost(CappedBooster):
    """ERLPBoost with capping parameter ``nu``.

    Args:
        nu: Capping parameter in ``[1, n_sample]``.
        config: Run configuration. Default tolerance ``1 / n_sample``;
            default round budget ``max(4/ε, 8 ln(n_sample/nu) / ε²)``.
        learning_rate: Step size of the dual ascent (optax Adam).
        dual_steps: Maximum ascent steps per round. Ascent stops earlier
            once the duality gap of the subproblem is below ``ε/4``.

    Example:
        >>> booster = ERLPBoost(nu=0.1 * n_sample)
        >>> f = booster.fit(sample, DecisionStump())
    """

    def __init__(
        self,
        nu: float = 1.0,
        config: RunConfig | None = None,
        learning_rate: float = 0.05,
        dual_steps: int = 500,
    ):
        super().__init__(nu=nu, config=config)
        self.learning_rate = learning_rate
        self.dual_steps = dual_steps

    def default_max_rounds(self, n_sample: int, tolerance: float) -> int:
        bound = max(4.0 / tolerance, 8.0 * math.log(n_sample / self.nu) / tolerance**2)
        return max(1, math.ceil(bound))

    def _initialize(self, sample: Sample) -> None:
        super()._initialize(sample)
        n_sample = len(sample)
        self.eta = max(0.5, math.log(n_sample / self.nu) / (self.tolerance / 2.0))
        self.gamma_hat = 1.0
        self.gamma_star = -math.inf
        self._coefficients = jnp.zeros((0,))

    def _dual_ascent(self, margin_rows: Array) -> tuple[Array, float]:
        """Maximize φ from the previous coefficients; return the best point."""
        cap = jnp.asarray(1.0 / self.nu)
        eta = self.eta
        n_hypothesis = margin_rows.shape[0]
        if n_hypothesis == 1:
            coefficients = jnp.ones((1,))
        else:
            coefficients = jnp.concatenate([self._coefficients, jnp.zeros((1,))])

        optimizer = optax.adam(self.learning_rate)
        opt_state = optimizer.init(coefficients)

        @jax.jit
        def ascent_step(coefficients, opt_state):
            value, grads, gap = dual_objective(coefficients, margin_rows, eta, cap)
            updates, opt_state = optimizer.update(-grads, opt_state, coefficients)
            coefficients = optax.projections.projection_simplex(
                optax.apply_updates(coefficients, updates)
            )
            return coefficients, opt_state, value, gap

        best_coefficients, best_value = coefficients, -math.inf
        for _ in range(self.dual_steps):
            new_coefficients, opt_state, value, gap = ascent_step(coefficients, opt_state)
            if float(value) > best_value:
                best_coefficients, best_value = coefficients, float(value)
            if float(gap) <= self.tolerance / 4.0:
                break
            coefficients = new_coefficients

        return best_coefficients, best_value

    def _boost(
        self,
        hypothesis: Classifier,
        margins: Array,
        edge: float,
    ) -> Termination | None:
        regularizer = float(entropy_regularizer(self.distribution, self.eta))
        self.gamma_hat = min(self.gamma_hat, edge + regularizer)
        if self.gamma_hat - self.gamma_star <= self.tolerance / 2.0:
            return Termination.CONVERGED

        self._append(hypothesis, margins, 0.0)
        margin_rows = self.margin_matrix
        coefficients, value = self._dual_ascent(margin_rows)

        self._coefficients = coefficients
        self.weights = [float(w) for w in coefficients]
        self.gamma_star = max(self.gamma_star, value)
        self.distribution = capped_softmax(-self.eta * (coefficients @ margin_rows), self.nu)
        return None

    def objective_value(self) -> float:
        """Soft margin of the normalized combined hypothesis."""
        return float(soft_margin(self.combined_margins(), self.nu))

    @property
    def dual_bound(self) -> float | None:
        return self.gamma_hat
