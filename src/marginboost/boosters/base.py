"""Boosting engine: the control loop shared by every booster.

Each round the booster

1. checks the round and time budget,
2. presents its weighting to the weak learner and measures the edge of the
   returned hypothesis,
3. stops if the edge does not exceed the family's threshold,
4. lets the family update the ensemble and the weighting, and evaluate its
   convergence test,
5. reports the round to the configured observer.

Subclasses implement ``_initialize``, ``_boost`` and ``objective_value``
and may override the defaults for tolerance, round budget and weighting.
"""

from __future__ import annotations

import time

import jax.numpy as jnp
import numpy as np
from jax import Array

from marginboost.aggregation import CombinedHypothesis, weighted_vote
from marginboost.core.protocols import Classifier, Solver, WeakLearner
from marginboost.core.state import RoundRecord, RunConfig, State, Termination
from marginboost.errors import SolverNotConfigured, WeakLearnerFailure
from marginboost.sample import Sample
from marginboost.weighting import initialize, validate_capping

# Width of the round number in progress lines.
PRINT_WIDTH = 9


class Booster:
    """Base class of all boosters.

    Attributes:
        edge_threshold: A round whose edge does not exceed this value ends
            the run with ``NO_IMPROVING_HYPOTHESIS``. None disables the check.
        config: Run configuration.
        state: Lifecycle state.
        termination: Why the last run stopped (None until it does).
        rounds: Number of completed rounds. A round counts once its
            hypothesis joins the ensemble, so that ``rounds`` equals the
            ensemble size; a certifying round that adds nothing is not counted.
        hypotheses: Hypotheses obtained so far.
        weights: Current coefficient of each hypothesis.
        distribution: Weighting presented in the next round.
    """

    edge_threshold: float | None = None

    def __init__(self, config: RunConfig | None = None):
        self.config = config if config is not None else RunConfig()
        self.state = State.UNINITIALIZED
        self.termination: Termination | None = None
        self.rounds = 0
        self.hypotheses: list[Classifier] = []
        self.weights: list[float] = []
        self.distribution: Array | None = None
        self.tolerance: float | None = None
        self.max_rounds: int | None = None
        self._margin_rows: list[Array] = []
        self._sample: Sample | None = None

    # ------------------------------------------------------------------
    # Family hooks

    def default_tolerance(self, n_sample: int) -> float:
        return 1.0 / n_sample

    def default_max_rounds(self, n_sample: int, tolerance: float) -> int:
        raise NotImplementedError

    def _validate(self, sample: Sample) -> None:
        """Check family parameters against the sample before anything runs."""

    def _initialize(self, sample: Sample) -> None:
        """Reset family state before the first round."""
        self.distribution = initialize(len(sample))

    def _next_distribution(self) -> Array:
        return self.distribution

    def _boost(
        self,
        hypothesis: Classifier,
        margins: Array,
        edge: float,
    ) -> Termination | None:
        """Update ensemble and weighting; return CONVERGED to stop."""
        raise NotImplementedError

    def objective_value(self) -> float:
        """The family's objective for the current combined hypothesis."""
        raise NotImplementedError

    @property
    def dual_bound(self) -> float | None:
        """Best dual bound seen so far (None if the family has none)."""
        return None

    # ------------------------------------------------------------------
    # Ensemble bookkeeping

    def _append(self, hypothesis: Classifier, margins: Array, weight: float) -> None:
        self.hypotheses.append(hypothesis)
        self.weights.append(float(weight))
        self._margin_rows.append(margins)

    @property
    def margin_matrix(self) -> Array:
        """``A[j, i] = y_i h_j(x_i)``, shape (num_hypotheses, n_sample)."""
        if not self._margin_rows:
            return jnp.zeros((0, len(self._sample)))
        return jnp.stack(self._margin_rows)

    def combined_margins(self, normalize: bool = True) -> Array:
        """Margins of the current combined hypothesis on the training sample."""
        return weighted_vote(
            self._margin_rows, self.weights, len(self._sample), normalize=normalize
        )

    def combined_hypothesis(self) -> CombinedHypothesis:
        return CombinedHypothesis(
            hypotheses=tuple(self.hypotheses),
            weights=tuple(self.weights),
            termination=self.termination,
        )

    # ------------------------------------------------------------------
    # Control loop

    def fit(self, sample: Sample, weak_learner: WeakLearner) -> CombinedHypothesis:
        """Run the booster to termination.

        Args:
            sample: Training sample.
            weak_learner: Produces one hypothesis per round.

        Returns:
            The combined hypothesis, tagged with the termination reason.

        Raises:
            BoostingError: Configuration errors before the first round;
                solver and numerical failures abort the run and propagate.
        """
        config = self.config
        config.validate()
        self._validate(sample)

        n_sample = len(sample)
        self._sample = sample
        self.tolerance = (
            config.tolerance
            if config.tolerance is not None
            else self.default_tolerance(n_sample)
        )
        self.max_rounds = (
            config.max_rounds
            if config.max_rounds is not None
            else self.default_max_rounds(n_sample, self.tolerance)
        )
        self.termination = None
        self.rounds = 0
        self.hypotheses = []
        self.weights = []
        self._margin_rows = []
        self._initialize(sample)
        self.state = State.INITIALIZED

        start = time.perf_counter()
        self.state = State.RUNNING
        try:
            termination = self._run(sample, weak_learner, start)
        finally:
            # A fatal error also ends the run, with termination left as None.
            self.state = State.TERMINATED

        self.termination = termination
        if config.verbose:
            print(f"[ BREAK ] {self.rounds:{PRINT_WIDTH}}\t{termination.value}")
        return self.combined_hypothesis()

    def _run(
        self,
        sample: Sample,
        weak_learner: WeakLearner,
        start: float,
    ) -> Termination:
        config = self.config
        while True:
            elapsed = time.perf_counter() - start
            if self.rounds >= self.max_rounds:
                termination = Termination.BUDGET_EXHAUSTED
                break
            if config.time_limit is not None and elapsed > config.time_limit:
                if config.verbose:
                    print(f"[  TLE  ] {self.rounds:{PRINT_WIDTH}}\tReached the time limit.")
                termination = Termination.BUDGET_EXHAUSTED
                break

            round_number = self.rounds + 1
            if config.verbose and round_number % 100 == 1:
                print(f"[ ROUND ] {round_number:{PRINT_WIDTH}}")

            weighting = self._next_distribution()
            try:
                hypothesis = weak_learner.fit(weighting, sample)
            except WeakLearnerFailure:
                termination = Termination.NO_IMPROVING_HYPOTHESIS
                self._notify(round_number, None, weighting, start, termination)
                break

            margins = sample.margins(hypothesis)
            edge = float(jnp.dot(margins, weighting))
            if self.edge_threshold is not None and edge <= self.edge_threshold:
                termination = Termination.NO_IMPROVING_HYPOTHESIS
                self._notify(round_number, edge, weighting, start, termination)
                break

            ensemble_size = len(self.hypotheses)
            termination = self._boost(hypothesis, margins, edge)
            if len(self.hypotheses) > ensemble_size:
                self.rounds = round_number
            self._notify(round_number, edge, weighting, start, termination)
            if termination is not None:
                break
        return termination

    def _notify(
        self,
        round_number: int,
        edge: float | None,
        weighting: Array,
        start: float,
        termination: Termination | None,
    ) -> None:
        observer = self.config.observer
        if observer is None:
            return
        self.termination = termination
        observer.on_round(RoundRecord(
            round=round_number,
            edge=edge,
            objective=self.objective_value(),
            bound=self.dual_bound,
            weighting=weighting,
            elapsed=time.perf_counter() - start,
            hypothesis=self.combined_hypothesis(),
            termination=termination,
        ))


class CappedBooster(Booster):
    """Base class of the soft margin boosters with capping parameter ``nu``.

    Args:
        nu: Capping parameter; every weight stays at most ``1/nu``.
            Must lie in ``[1, n_sample]``, checked when ``fit`` starts.
        config: Run configuration.
    """

    def __init__(self, nu: float = 1.0, config: RunConfig | None = None):
        super().__init__(config)
        self.nu = nu

    def _validate(self, sample: Sample) -> None:
        validate_capping(self.nu, len(sample))


class SolverBackedMixin:
    """Requires a solver at construction time."""

    solver: Solver

    def _bind_solver(self, solver: Solver | None) -> None:
        if solver is None:
            raise SolverNotConfigured(
                f"{type(self).__name__} needs an LP/QP solver, e.g. ScipySolver()."
            )
        self.solver = solver


def as_numpy(array: Array) -> np.ndarray:
    """Host copy of a JAX array for the solver."""
    return np.asarray(array, dtype=np.float64)
