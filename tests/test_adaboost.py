"""Tests for AdaBoost."""

import jax.numpy as jnp
import numpy as np
import pytest
from sklearn.datasets import make_classification

from marginboost import (
    DEFAULT_LABEL,
    AdaBoost,
    DecisionStump,
    History,
    InvalidConfiguration,
    RunConfig,
    Sample,
    State,
    StumpClassifier,
    Termination,
)
from marginboost.losses import zero_one_loss
from marginboost.weighting import is_distribution


@pytest.fixture
def sample():
    X, y = make_classification(
        n_samples=120, n_features=6, n_informative=3, flip_y=0.05, random_state=42
    )
    return Sample.from_arrays(X, 2 * y - 1)


class TestAdaBoost:
    def test_two_separable_points(self):
        """Test that training error reaches 0 within 2 rounds."""
        sample = Sample.from_arrays(np.array([[0.0], [1.0]]), np.array([1, -1]))
        booster = AdaBoost()
        f = booster.fit(sample, DecisionStump())

        assert booster.rounds <= 2
        assert f.termination is Termination.CONVERGED
        assert f.certified
        assert list(f.predict_all(sample.features)) == [1, -1]

    def test_round_budget_zero(self, sample):
        """Test that a zero round budget returns an empty ensemble."""
        booster = AdaBoost(config=RunConfig(max_rounds=0))
        f = booster.fit(sample, DecisionStump())

        assert f.termination is Termination.BUDGET_EXHAUSTED
        assert not f.certified
        assert len(f) == 0
        assert np.all(f.predict_all(sample.features) == DEFAULT_LABEL)
        assert f.predict(sample.features[0]) == DEFAULT_LABEL

    def test_budget_exhausted(self, sample):
        """Test that the round budget ends the run."""
        booster = AdaBoost(config=RunConfig(max_rounds=5))
        f = booster.fit(sample, DecisionStump())

        assert f.termination is Termination.BUDGET_EXHAUSTED
        assert len(f) == 5
        assert booster.rounds == 5

    def test_lifecycle(self, sample):
        """Test the state transitions of a run."""
        booster = AdaBoost(config=RunConfig(max_rounds=3))
        assert booster.state is State.UNINITIALIZED
        booster.fit(sample, DecisionStump())
        assert booster.state is State.TERMINATED
        assert booster.termination is Termination.BUDGET_EXHAUSTED

    def test_weightings_are_distributions(self, sample):
        """Test that every round's weighting sums to one."""
        history = History()
        booster = AdaBoost(config=RunConfig(max_rounds=30, observer=history))
        booster.fit(sample, DecisionStump())

        assert len(history) == 30
        for record in history.records:
            assert abs(float(jnp.sum(record.weighting)) - 1.0) <= 1e-9
            assert is_distribution(record.weighting)

    def test_training_error_below_bound(self, sample):
        """Test the training error bound Π sqrt(1 - γ²)."""
        booster = AdaBoost(config=RunConfig(max_rounds=40))
        f = booster.fit(sample, DecisionStump())

        error = float(zero_one_loss(f.predict_all(sample.features), sample.target))
        assert error <= booster.error_bound + 1e-12
        assert booster.objective_value() == pytest.approx(booster.error_bound, rel=1e-6)

    def test_coefficients_follow_edges(self, sample):
        """Test α = ½ ln((1 + γ) / (1 - γ))."""
        history = History()
        booster = AdaBoost(config=RunConfig(max_rounds=4, observer=history))
        f = booster.fit(sample, DecisionStump())

        for weight, edge in zip(f.weights, history.edges):
            assert weight == pytest.approx(0.5 * np.log((1 + edge) / (1 - edge)))

    def test_perfect_hypothesis_keeps_ensemble(self):
        """Test that a perfect hypothesis zeroes earlier weights."""
        X = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 1.0], [3.0, 1.0]])
        y = np.array([1, 1, -1, -1])
        sample = Sample.from_arrays(X, y)

        class Scripted:
            def __init__(self):
                self.stumps = [
                    StumpClassifier(feature=1, threshold=0.5, left=1, right=-1),
                    StumpClassifier(feature=0, threshold=1.5, left=1, right=-1),
                ]

            def fit(self, weighting, sample):
                return self.stumps.pop(0)

        f = AdaBoost().fit(sample, Scripted())

        assert f.termination is Termination.CONVERGED
        assert len(f) == 2
        assert f.weights == (0.0, 1.0)
        assert list(f.predict_all(X)) == [1, 1, -1, -1]

    def test_no_improving_hypothesis(self):
        """Test that a hypothesis without positive edge ends the run."""

        class Contrarian:
            def fit(self, weighting, sample):
                return StumpClassifier(feature=0, threshold=np.inf, left=-1, right=-1)

        sample = Sample.from_arrays(np.arange(4.0)[:, None], np.ones(4))
        f = AdaBoost().fit(sample, Contrarian())

        assert f.termination is Termination.NO_IMPROVING_HYPOTHESIS
        assert len(f) == 0

    def test_invalid_tolerance(self, sample):
        """Test that a non-positive tolerance is rejected."""
        with pytest.raises(InvalidConfiguration):
            AdaBoost(config=RunConfig(tolerance=0.0)).fit(sample, DecisionStump())

    def test_default_tolerance(self, sample):
        """Test the default tolerance and round budget."""
        booster = AdaBoost(config=RunConfig(max_rounds=1))
        booster.fit(sample, DecisionStump())
        assert booster.tolerance == pytest.approx(1 / 121)
        assert AdaBoost().default_max_rounds(120, 1 / 121) == int(
            np.ceil(np.log(120) * 121**2)
        )
