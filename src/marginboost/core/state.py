"""Run configuration and state of the boosting loop."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from jax import Array

from marginboost.errors import InvalidConfiguration

if TYPE_CHECKING:
    from marginboost.aggregation.combined import CombinedHypothesis
    from marginboost.core.protocols import RoundObserver


class State(enum.Enum):
    """Lifecycle of a booster."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    RUNNING = "running"
    TERMINATED = "terminated"


class Termination(enum.Enum):
    """Why a run stopped. None of these is an error."""

    CONVERGED = "converged"
    BUDGET_EXHAUSTED = "budget_exhausted"
    NO_IMPROVING_HYPOTHESIS = "no_improving_hypothesis"


@dataclass
class RunConfig:
    """Configuration shared by every booster.

    Attributes:
        tolerance: Accuracy parameter (epsilon > 0). None = the booster's
            default, usually ``1 / n_sample``.
        max_rounds: Maximum number of rounds. None = the booster's
            theoretical iteration bound for ``tolerance``.
        time_limit: Wall-clock budget in seconds (None = unlimited).
        verbose: Whether to print progress.
        observer: Optional research observer receiving one record per round.
    """
    tolerance: float | None = None
    max_rounds: int | None = None
    time_limit: float | None = None
    verbose: bool = False
    observer: RoundObserver | None = None

    def validate(self) -> None:
        """Raise ``InvalidConfiguration`` for out-of-range values."""
        if self.tolerance is not None and not self.tolerance > 0.0:
            raise InvalidConfiguration(
                f"tolerance must be positive, got {self.tolerance}"
            )
        if self.max_rounds is not None and self.max_rounds < 0:
            raise InvalidConfiguration(
                f"max_rounds must be non-negative, got {self.max_rounds}"
            )
        if self.time_limit is not None and not self.time_limit > 0.0:
            raise InvalidConfiguration(
                f"time_limit must be positive, got {self.time_limit}"
            )


@dataclass(frozen=True)
class RoundRecord:
    """What an observer sees after each round.

    Attributes:
        round: 1-based round number.
        edge: Edge of the round's hypothesis under ``weighting``
            (None if the weak learner failed).
        objective: The booster's objective estimate for the current
            combined hypothesis.
        bound: Best dual bound seen so far (None for boosters without one).
        weighting: Distribution presented to the weak learner this round.
        elapsed: Seconds since the run started.
        hypothesis: Snapshot of the combined hypothesis after the round.
    """
    round: int
    edge: float | None
    objective: float
    bound: float | None
    weighting: Array
    elapsed: float
    hypothesis: CombinedHypothesis
    termination: Termination | None = None

    def as_row(self) -> dict[str, Any]:
        """Flat row for tabular logging."""
        return {
            "round": self.round,
            "objective": self.objective,
            "edge": self.edge,
            "bound": self.bound,
            "time": self.elapsed,
        }
