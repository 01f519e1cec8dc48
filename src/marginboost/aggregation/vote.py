"""Weighted vote of an ensemble.

Rows are per-hypothesis outputs over the same examples, either confidences
``h_j(x_i)`` or margins ``y_i h_j(x_i)``; the vote is ``Σ_j weight_j * row_j``.
"""

from __future__ import annotations

from collections.abc import Sequence

import jax.numpy as jnp
from jax import Array


def weighted_vote(
    rows: Sequence[Array] | Array,
    weights: Sequence[float] | Array,
    n_columns: int,
    normalize: bool = False,
) -> Array:
    """Combine hypothesis rows into one vote per example.

    Args:
        rows: One row per hypothesis, each of shape (n_columns,), or an
            already stacked (num_hypotheses, n_columns) array.
        weights: Coefficient of each hypothesis, shape (num_hypotheses,).
        n_columns: Number of examples. An empty ensemble votes 0 on each.
        normalize: Divide by the l1-norm of ``weights`` (when positive), so
            that a vote of ±1 outputs lies in ``[-1, 1]``.

    Returns:
        Votes, shape (n_columns,).
    """
    if len(rows) == 0:
        return jnp.zeros((n_columns,), dtype=jnp.float64)

    stacked = rows if isinstance(rows, Array) else jnp.stack(list(rows))
    weights = jnp.asarray(weights, dtype=jnp.float64)
    if weights.shape[0] != stacked.shape[0]:
        raise ValueError(
            f"Got {stacked.shape[0]} rows but {weights.shape[0]} weights."
        )

    votes = jnp.einsum("t,tn->n", weights, stacked)
    if normalize:
        norm = float(jnp.sum(jnp.abs(weights)))
        if norm > 0.0:
            votes = votes / norm
    return votes
