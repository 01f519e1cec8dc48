"""Decision stump weak learner.

A stump tests one feature against a threshold: examples with
``x[feature] < threshold`` go left, the others go right, and each side
carries a fixed label in {+1, -1}.

For a weighting ``d`` the learner returns the stump of maximal edge
``Σ d_i y_i h(x_i)``. With ``s = d * y`` sorted along a feature and ``P_k``
the sum of its first ``k`` entries, the stump that sends the first ``k``
examples left with label -1 has edge ``T - 2 P_k`` (``T = Σ s``); flipping
both labels negates it. All features are scored at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import jax
import jax.numpy as jnp
from jax import Array

from marginboost.errors import WeakLearnerFailure
from marginboost.sample import Sample


@dataclass(frozen=True)
class StumpClassifier:
    """An axis-aligned decision stump.

    Attributes:
        feature: Index of the tested feature.
        threshold: Split threshold; ``x[feature] < threshold`` goes left.
        left: Label of the left side (+1 or -1).
        right: Label of the right side (+1 or -1).
    """
    feature: int
    threshold: float
    left: int
    right: int

    kind = "stump"

    def confidence(self, X: Array) -> Array:
        X = jnp.asarray(X, dtype=jnp.float64)
        goes_left = X[:, self.feature] < self.threshold
        return jnp.where(goes_left, float(self.left), float(self.right))

    def predict(self, X: Array) -> Array:
        return self.confidence(X)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "feature": self.feature,
            "threshold": self.threshold,
            "left": self.left,
            "right": self.right,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StumpClassifier:
        return cls(
            feature=int(data["feature"]),
            threshold=float(data["threshold"]),
            left=int(data["left"]),
            right=int(data["right"]),
        )


@jax.jit
def _best_split(features: Array, signed_weights: Array) -> tuple[Array, ...]:
    """Score every split position of every feature.

    Returns:
        Tuple of (split position k, feature index, signed score T - 2 P_k,
        sorted column of the chosen feature).
    """
    n_sample, n_feature = features.shape
    order = jnp.argsort(features, axis=0)
    sorted_features = jnp.take_along_axis(features, order, axis=0)
    sorted_weights = signed_weights[order]

    prefix = jnp.concatenate(
        [jnp.zeros((1, n_feature)), jnp.cumsum(sorted_weights, axis=0)], axis=0
    )
    scores = prefix[-1][None, :] - 2.0 * prefix  # (n_sample + 1, n_feature)

    # A threshold fits strictly between two sorted values only if they differ.
    boundary = jnp.ones((1, n_feature), dtype=bool)
    valid = jnp.concatenate(
        [boundary, sorted_features[1:] > sorted_features[:-1], boundary], axis=0
    )
    masked = jnp.where(valid, jnp.abs(scores), -jnp.inf)

    k, feature = jnp.unravel_index(jnp.argmax(masked), masked.shape)
    return k, feature, scores[k, feature], sorted_features[:, feature]


class DecisionStump:
    """Weak learner returning the edge-maximizing decision stump.

    Example:
        >>> learner = DecisionStump()
        >>> h = learner.fit(weighting, sample)
        >>> h.predict(sample.features)
    """

    def fit(self, weighting: Array, sample: Sample) -> StumpClassifier:
        n_sample, n_feature = sample.shape
        if n_feature == 0:
            raise WeakLearnerFailure("The sample has no features to split on.")

        weighting = jnp.asarray(weighting, dtype=jnp.float64)
        if weighting.shape != (n_sample,):
            raise WeakLearnerFailure(
                f"Expected a weighting of shape ({n_sample},), got {weighting.shape}"
            )
        if not bool(jnp.all(jnp.isfinite(weighting))):
            raise WeakLearnerFailure("The weighting contains non-finite values.")

        k, feature, score, column = _best_split(
            sample.features, weighting * sample.target
        )
        k = int(k)

        if k == 0:
            threshold = float(column[0]) - 1.0
        elif k == n_sample:
            threshold = float(column[-1]) + 1.0
        else:
            threshold = (float(column[k - 1]) + float(column[k])) / 2.0

        if float(score) >= 0.0:
            left, right = -1, 1
        else:
            left, right = 1, -1

        return StumpClassifier(
            feature=int(feature), threshold=threshold, left=left, right=right
        )
