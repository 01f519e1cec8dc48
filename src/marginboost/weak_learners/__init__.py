"""Weak learners for marginboost."""

from marginboost.weak_learners.stump import DecisionStump, StumpClassifier

# Hypothesis classes by ``kind``, used to load persisted combined hypotheses.
HYPOTHESIS_KINDS = {
    StumpClassifier.kind: StumpClassifier,
}

__all__ = [
    "DecisionStump",
    "StumpClassifier",
    "HYPOTHESIS_KINDS",
]
