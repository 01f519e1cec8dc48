"""Objectives and losses over classification margins.

Margins are ``y_i f(x_i)``. The margin objectives expect the vote of a
combined hypothesis normalized by the l1-norm of its weights, so that
every margin lies in ``[-1, 1]``.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.scipy.special import logsumexp


def exponential_loss(margins: Array) -> Array:
    """Mean exponential loss ``mean(exp(-margins))`` on unnormalized margins.

    Args:
        margins: Margins ``y_i f(x_i)``, shape (n_sample,).

    Returns:
        Scalar exponential loss.
    """
    margins = jnp.asarray(margins)
    # log-mean-exp keeps large negative margins from overflowing early
    return jnp.exp(logsumexp(-margins) - jnp.log(margins.shape[0]))


def hard_margin(margins: Array) -> Array:
    """Smallest margin over the sample."""
    return jnp.min(jnp.asarray(margins))


def soft_margin(margins: Array, nu: float) -> Array:
    """Optimal value of the soft margin objective for fixed margins.

    ``max_ρ ρ - (1/nu) Σ_i max(0, ρ - margins_i)`` equals the mean of the
    ``nu`` smallest margins (a fractional ``nu`` takes the matching
    fraction of the next one). ``nu = 1`` gives the hard margin.
    """
    margins = jnp.sort(jnp.asarray(margins))
    position = jnp.arange(margins.shape[0])
    mass = jnp.clip(nu - position, 0.0, 1.0)
    return jnp.sum(mass * margins) / nu


def zero_one_loss(predictions: Array, targets: Array) -> Array:
    """Fraction of misclassified examples."""
    return jnp.mean(jnp.asarray(predictions) != jnp.asarray(targets))
