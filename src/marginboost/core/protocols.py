"""Interfaces between the boosting loop and its collaborators.

A booster only calls ``WeakLearner.fit`` once per round, ``Solver.solve`` for
its LP or QP subproblems and ``RoundObserver.on_round`` after each round;
the hypotheses it collects need ``confidence`` for voting and ``to_dict``
for persistence. Any object with these methods can be plugged in.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from jax import Array

if TYPE_CHECKING:
    from marginboost.core.state import RoundRecord
    from marginboost.sample import Sample
    from marginboost.solvers.problems import Solution


@runtime_checkable
class Classifier(Protocol):
    """Protocol for hypotheses returned by a weak learner.

    A classifier maps each row of a feature matrix to a confidence in
    ``[-1, 1]``; its prediction is the sign of that confidence.
    """

    kind: str

    def confidence(self, X: Array) -> Array:
        """Confidence for each row of ``X``, shape (n_samples,)."""
        ...

    def predict(self, X: Array) -> Array:
        """Labels in {+1, -1} for each row of ``X``."""
        ...

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible description, including ``"kind"``."""
        ...


@runtime_checkable
class WeakLearner(Protocol):
    """Protocol for weak learners.

    ``fit`` must not modify ``weighting`` or ``sample`` (both are JAX arrays
    and therefore immutable) and raises ``WeakLearnerFailure`` when it cannot
    produce a hypothesis.
    """

    def fit(self, weighting: Array, sample: Sample) -> Classifier:
        """Return a hypothesis with large edge under ``weighting``."""
        ...


@runtime_checkable
class Solver(Protocol):
    """Protocol for LP/QP oracles used by the solver-driven boosters."""

    def solve(self, problem: Any) -> Solution:
        """Solve a ``LinearProgram`` or ``QuadraticProgram``.

        Raises ``SolverFailure`` when the problem is infeasible, unbounded
        or the solve fails.
        """
        ...


@runtime_checkable
class RoundObserver(Protocol):
    """Protocol for research observers. Observers never alter a run."""

    def on_round(self, record: RoundRecord) -> None:
        """Called once per completed or terminating round."""
        ...
