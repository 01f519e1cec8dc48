"""Core abstractions and protocols for marginboost."""

from marginboost.core.protocols import (
    Classifier,
    RoundObserver,
    Solver,
    WeakLearner,
)
from marginboost.core.state import RoundRecord, RunConfig, State, Termination

__all__ = [
    "Classifier",
    "WeakLearner",
    "Solver",
    "RoundObserver",
    "RunConfig",
    "RoundRecord",
    "State",
    "Termination",
]
