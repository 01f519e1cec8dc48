"""Combined hypothesis: the weighted-vote predictor returned by every booster.

The vote of an example is ``Σ_j weight_j * h_j(x)``; its label is the sign
of the vote. A vote of exactly zero (which includes every example when the
ensemble is empty) is labeled ``DEFAULT_LABEL``.

Example:
    >>> f = booster.fit(sample, DecisionStump())
    >>> f.predict_all(X_test)
    >>> f.save("model.json")
    >>> g = CombinedHypothesis.load("model.json")
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jax.numpy as jnp
import numpy as np
from jax import Array

from marginboost.aggregation.vote import weighted_vote
from marginboost.core.protocols import Classifier
from marginboost.core.state import Termination
from marginboost.sample import Sample

# Label assigned to a tied (zero) vote.
DEFAULT_LABEL = 1

FORMAT_VERSION = 1


@dataclass(frozen=True)
class CombinedHypothesis:
    """An immutable ensemble of hypotheses and their coefficients.

    Attributes:
        hypotheses: Hypotheses in the order they were obtained.
        weights: Coefficient of each hypothesis.
        termination: Why the run that produced it stopped
            (None when built by hand).
    """
    hypotheses: tuple[Classifier, ...] = ()
    weights: tuple[float, ...] = ()
    termination: Termination | None = None

    def __post_init__(self) -> None:
        if len(self.hypotheses) != len(self.weights):
            raise ValueError(
                f"Got {len(self.hypotheses)} hypotheses "
                f"but {len(self.weights)} weights."
            )

    @property
    def certified(self) -> bool:
        """Whether the run ended by passing its convergence test."""
        return self.termination is Termination.CONVERGED

    def __len__(self) -> int:
        return len(self.hypotheses)

    def entries(self) -> list[tuple[Classifier, float]]:
        """``(hypothesis, weight)`` pairs in order."""
        return list(zip(self.hypotheses, self.weights))

    def confidence(self, X: np.ndarray | Array) -> Array:
        """Weighted vote for each row of ``X`` (or for a single example)."""
        X = jnp.asarray(X, dtype=jnp.float64)
        single_sample = X.ndim == 1
        if single_sample:
            X = X[None, :]

        rows = [h.confidence(X) for h in self.hypotheses]
        output = weighted_vote(rows, self.weights, X.shape[0])

        return output[0] if single_sample else output

    def predict(self, x: np.ndarray | Array) -> int:
        """Label of a single example, shape (n_feature,)."""
        x = jnp.asarray(x, dtype=jnp.float64)
        if x.ndim != 1:
            raise ValueError(
                f"predict expects one example, got shape {x.shape}; "
                "use predict_all or predict_batch for matrices."
            )
        return int(_to_labels(np.asarray(self.confidence(x))[None])[0])

    def predict_all(self, X: np.ndarray | Array) -> np.ndarray:
        """Labels for every row of ``X`` as an int array."""
        X = jnp.asarray(X, dtype=jnp.float64)
        return _to_labels(np.asarray(self.confidence(X)))

    def predict_batch(
        self,
        X: np.ndarray | Array | Sample,
        chunk_size: int = 1024,
    ) -> Predictions:
        """Lazy, re-iterable predictions for the rows of ``X`` (or a sample)."""
        if isinstance(X, Sample):
            X = X.features
        return Predictions(self, X, chunk_size=chunk_size)

    def margins(self, sample: Sample, normalize: bool = False) -> Array:
        """Margins ``y_i f(x_i)`` on a sample.

        With ``normalize=True`` the vote is divided by the l1-norm of the
        weights, so that margins lie in ``[-1, 1]``.
        """
        rows = [sample.margins(h) for h in self.hypotheses]
        return weighted_vote(rows, self.weights, len(sample), normalize=normalize)

    # ------------------------------------------------------------------
    # Persistence

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": FORMAT_VERSION,
            "termination": (
                None if self.termination is None else self.termination.value
            ),
            "entries": [
                {"hypothesis": h.to_dict(), "weight": float(w)}
                for h, w in self.entries()
            ],
        }

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        kinds: Mapping[str, type] | None = None,
    ) -> CombinedHypothesis:
        """Rebuild a combined hypothesis written by ``to_dict``.

        Args:
            data: The persisted form.
            kinds: Maps each hypothesis ``kind`` to a class with a
                ``from_dict`` constructor. Defaults to the built-in weak
                learners' hypothesis types.
        """
        if kinds is None:
            from marginboost.weak_learners import HYPOTHESIS_KINDS

            kinds = HYPOTHESIS_KINDS

        hypotheses = []
        weights = []
        for entry in data["entries"]:
            described = entry["hypothesis"]
            try:
                hypothesis_cls = kinds[described["kind"]]
            except KeyError:
                raise ValueError(
                    f"Unknown hypothesis kind: {described.get('kind')!r}"
                ) from None
            hypotheses.append(hypothesis_cls.from_dict(described))
            weights.append(float(entry["weight"]))

        termination = data.get("termination")
        return cls(
            hypotheses=tuple(hypotheses),
            weights=tuple(weights),
            termination=None if termination is None else Termination(termination),
        )

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(
        cls,
        text: str,
        kinds: Mapping[str, type] | None = None,
    ) -> CombinedHypothesis:
        return cls.from_dict(json.loads(text), kinds=kinds)

    def save(self, path: str | Path) -> None:
        Path(path).write_text(self.to_json())

    @classmethod
    def load(
        cls,
        path: str | Path,
        kinds: Mapping[str, type] | None = None,
    ) -> CombinedHypothesis:
        return cls.from_json(Path(path).read_text(), kinds=kinds)


class Predictions:
    """Predictions of a combined hypothesis, computed lazily chunk by chunk.

    Iterating twice yields the same labels; nothing is cached.
    """

    def __init__(
        self,
        hypothesis: CombinedHypothesis,
        X: np.ndarray | Array,
        chunk_size: int = 1024,
    ) -> None:
        X = jnp.asarray(X, dtype=jnp.float64)
        if X.ndim != 2:
            raise ValueError(f"Expected a 2-D feature matrix, got shape {X.shape}")
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self._hypothesis = hypothesis
        self._X = X
        self._chunk_size = chunk_size

    def __len__(self) -> int:
        return self._X.shape[0]

    def __iter__(self) -> Iterator[int]:
        for start in range(0, len(self), self._chunk_size):
            chunk = self._X[start:start + self._chunk_size]
            for label in self._hypothesis.predict_all(chunk):
                yield int(label)


def _to_labels(scores: np.ndarray) -> np.ndarray:
    """Sign of each score, with ties mapped to ``DEFAULT_LABEL``."""
    labels = np.sign(scores).astype(np.int64)
    labels[labels == 0] = DEFAULT_LABEL
    return labels
