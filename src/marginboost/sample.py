"""Training sample: a rectangular feature matrix with ±1 labels."""

from __future__ import annotations

from dataclasses import dataclass

import jax.numpy as jnp
import numpy as np
from jax import Array

from marginboost.core.protocols import Classifier
from marginboost.errors import InvalidSampleSize


@dataclass(frozen=True)
class Sample:
    """An immutable labeled sample.

    Attributes:
        features: Feature matrix, shape (n_sample, n_feature), float64.
        target: Labels in {+1, -1}, shape (n_sample,), float64.
    """
    features: Array
    target: Array

    @classmethod
    def from_arrays(cls, X: np.ndarray | Array, y: np.ndarray | Array) -> Sample:
        """Build a sample from array-likes.

        Args:
            X: Features, shape (n_sample, n_feature).
            y: Labels in {+1, -1}, shape (n_sample,).

        Returns:
            The validated sample.
        """
        features = jnp.asarray(X, dtype=jnp.float64)
        target = jnp.asarray(y, dtype=jnp.float64)

        if features.ndim != 2:
            raise ValueError(
                f"features must be a 2-D matrix, got shape {features.shape}"
            )
        if target.ndim != 1 or target.shape[0] != features.shape[0]:
            raise ValueError(
                f"target must have shape ({features.shape[0]},), "
                f"got {target.shape}"
            )
        if features.shape[0] == 0:
            raise InvalidSampleSize("The sample has no examples.")
        if not bool(jnp.all(jnp.abs(target) == 1.0)):
            raise ValueError("Labels must be +1 or -1.")

        return cls(features=features, target=target)

    @property
    def shape(self) -> tuple[int, int]:
        return self.features.shape

    def __len__(self) -> int:
        return self.features.shape[0]

    def margins(self, h: Classifier) -> Array:
        """Per-example margins ``y_i * h(x_i)`` of a hypothesis."""
        return self.target * h.confidence(self.features)
