"""Loss and objective functions for marginboost."""

from marginboost.losses.classification import (
    exponential_loss,
    hard_margin,
    soft_margin,
    zero_one_loss,
)

__all__ = [
    "exponential_loss",
    "hard_margin",
    "soft_margin",
    "zero_one_loss",
]
