"""Aggregation of hypotheses into the final weighted-vote predictor."""

from marginboost.aggregation.combined import (
    DEFAULT_LABEL,
    CombinedHypothesis,
    Predictions,
)
from marginboost.aggregation.vote import weighted_vote

__all__ = [
    "weighted_vote",
    "CombinedHypothesis",
    "Predictions",
    "DEFAULT_LABEL",
]
