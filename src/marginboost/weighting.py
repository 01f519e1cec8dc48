"""Weighting model: distributions over training examples.

A weighting is a float64 vector of ``n`` nonnegative entries summing to 1.
Capped (soft margin) boosters further require every entry to lie in
``[0, 1/nu]`` with ``1 <= nu <= n``.

Capping uses the relative-entropy projection onto the capped simplex:
the largest entries are clipped to ``1/nu`` and the remaining mass is
spread over the rest in proportion to their current values.
"""

from __future__ import annotations

import math

import jax
import jax.numpy as jnp
from jax import Array
from jax.scipy.special import logsumexp

from marginboost.errors import (
    DegenerateWeighting,
    InfeasibleCapping,
    InvalidCappingParameter,
    InvalidSampleSize,
)

# Smallest total mass accepted by `renormalize`.
WEIGHT_FLOOR = float(jnp.finfo(jnp.float64).tiny)

# Relative slack when comparing a scaled entry against the cap.
_CAP_SLACK = 1e-12


def initialize(n_sample: int) -> Array:
    """Uniform weighting ``1/n`` over ``n_sample`` examples."""
    if n_sample <= 0:
        raise InvalidSampleSize("The sample has no examples.")
    return jnp.full((n_sample,), 1.0 / n_sample, dtype=jnp.float64)


def validate_capping(nu: float, n_sample: int) -> None:
    """Raise ``InvalidCappingParameter`` unless ``1 <= nu <= n_sample``."""
    if not 1.0 <= nu <= n_sample:
        raise InvalidCappingParameter(nu, n_sample)


def renormalize(raw_weights: Array) -> Array:
    """Scale nonnegative weights so that they sum to 1.

    Raises:
        DegenerateWeighting: If the total mass is not finite or not above
            ``WEIGHT_FLOOR``.
    """
    raw_weights = jnp.asarray(raw_weights, dtype=jnp.float64)
    total = float(jnp.sum(raw_weights))
    if not (math.isfinite(total) and total > WEIGHT_FLOOR):
        raise DegenerateWeighting(
            f"Cannot normalize weights with total mass {total}."
        )
    return raw_weights / total


def log_normalize(log_weights: Array) -> Array:
    """Normalize weights given by their logarithms.

    Equivalent to ``renormalize(exp(log_weights))`` without overflow.
    """
    log_weights = jnp.asarray(log_weights, dtype=jnp.float64)
    normalizer = logsumexp(log_weights)
    if not bool(jnp.isfinite(normalizer)):
        raise DegenerateWeighting(
            f"Cannot normalize log-weights with log-mass {float(normalizer)}."
        )
    return jnp.exp(log_weights - normalizer)


def project_to_cap(raw_weights: Array, nu: float) -> Array:
    """Project nonnegative weights onto the capped simplex.

    Negative entries (solver round-off) are treated as zero. Zero entries
    stay zero, so at least ``nu`` entries must carry positive mass.

    Args:
        raw_weights: Nonnegative weights, shape (n_sample,). Need not sum to 1.
        nu: Capping parameter, ``1 <= nu <= n_sample``.

    Returns:
        A distribution with every entry in ``[0, 1/nu]``.

    Raises:
        InfeasibleCapping: If fewer than ``nu`` entries are positive.
    """
    raw_weights = jnp.asarray(raw_weights, dtype=jnp.float64)
    n_sample = raw_weights.shape[0]
    validate_capping(nu, n_sample)
    raw_weights = renormalize(jnp.maximum(raw_weights, 0.0))
    cap = 1.0 / nu

    # Sort in non-increasing order; tail[k] is the mass of entries k, k+1, ...
    order = jnp.argsort(-raw_weights)
    sorted_weights = raw_weights[order]
    tail = jnp.cumsum(sorted_weights[::-1])[::-1]

    k = jnp.arange(n_sample)
    mass = 1.0 - k * cap
    safe_tail = jnp.where(tail > 0.0, tail, 1.0)
    head = sorted_weights * mass / safe_tail
    feasible = (mass > 0.0) & (tail > 0.0) & (head <= cap * (1.0 + _CAP_SLACK))

    if not bool(jnp.any(feasible)):
        n_positive = int(jnp.sum(raw_weights > 0.0))
        raise InfeasibleCapping(
            f"Only {n_positive} examples carry weight; "
            f"a cap of 1/{nu} needs at least {nu}."
        )

    # The first feasible k is the number of entries clipped to the cap.
    n_capped = int(jnp.argmax(feasible))
    scale = mass[n_capped] / tail[n_capped]
    projected = jnp.where(
        k < n_capped, cap, jnp.minimum(sorted_weights * scale, cap)
    )
    return jnp.zeros_like(raw_weights).at[order].set(projected)


@jax.jit
def capped_softmax_unchecked(logits: Array, cap: Array) -> Array:
    """``project_to_cap(softmax(logits), 1/cap)`` computed in log-space.

    No argument validation, so it can be used inside jitted code.
    ``cap`` must be in ``[1/n_sample, 1]`` and ``logits`` finite.
    """
    n_sample = logits.shape[0]
    order = jnp.argsort(-logits)
    sorted_logits = logits[order]
    log_tail = jax.lax.cumlogsumexp(sorted_logits, reverse=True)

    k = jnp.arange(n_sample)
    mass = 1.0 - k * cap
    log_mass = jnp.log(jnp.maximum(mass, 0.0))
    log_head = log_mass - log_tail + sorted_logits
    feasible = (mass > 0.0) & (log_head <= jnp.log(cap) + _CAP_SLACK)

    n_capped = jnp.argmax(feasible)
    log_scale = log_mass[n_capped] - log_tail[n_capped]
    projected = jnp.where(
        k < n_capped, cap, jnp.minimum(jnp.exp(sorted_logits + log_scale), cap)
    )
    return jnp.zeros_like(logits).at[order].set(projected)


def capped_softmax(logits: Array, nu: float) -> Array:
    """Capped distribution proportional to ``exp(logits)``.

    Never infeasible for finite logits and ``1 <= nu <= n_sample``.
    """
    logits = jnp.asarray(logits, dtype=jnp.float64)
    validate_capping(nu, logits.shape[0])
    if not bool(jnp.all(jnp.isfinite(logits))):
        raise DegenerateWeighting("capped_softmax requires finite logits.")
    return capped_softmax_unchecked(logits, jnp.asarray(1.0 / nu))


def is_distribution(
    weights: Array,
    nu: float | None = None,
    atol: float = 1e-9,
) -> bool:
    """Check the weighting invariants (and the cap, if ``nu`` is given)."""
    weights = jnp.asarray(weights)
    if weights.ndim != 1 or weights.shape[0] == 0:
        return False
    if bool(jnp.any(weights < 0.0)):
        return False
    if abs(float(jnp.sum(weights)) - 1.0) > atol:
        return False
    if nu is not None and bool(jnp.any(weights > 1.0 / nu + atol)):
        return False
    return True
