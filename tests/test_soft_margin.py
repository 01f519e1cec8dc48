"""Tests for the soft margin boosters."""

import numpy as np
import pytest
from sklearn.datasets import make_classification

from marginboost import (
    CERLPBoost,
    DecisionStump,
    ERLPBoost,
    History,
    InvalidCappingParameter,
    InvalidConfiguration,
    LPBoost,
    RunConfig,
    Sample,
    ScipySolver,
    SmoothBoost,
    SoftBoost,
    SolverNotConfigured,
    Termination,
)
from marginboost.weighting import is_distribution

N_SAMPLE = 30

FAMILIES = {
    "lpboost": lambda nu, config: LPBoost(nu=nu, solver=ScipySolver(), config=config),
    "softboost": lambda nu, config: SoftBoost(nu=nu, solver=ScipySolver(), config=config),
    "erlpboost": lambda nu, config: ERLPBoost(nu=nu, config=config),
    "cerlpboost": lambda nu, config: CERLPBoost(nu=nu, config=config),
}


@pytest.fixture
def noisy():
    X, y = make_classification(
        n_samples=N_SAMPLE,
        n_features=4,
        n_informative=2,
        n_redundant=0,
        flip_y=0.1,
        random_state=3,
    )
    return Sample.from_arrays(X, 2 * y - 1)


@pytest.fixture
def separable():
    rng = np.random.default_rng(0)
    X = rng.uniform(-1.0, 1.0, size=(200, 2))
    X = X[np.all(np.abs(X) > 0.1, axis=1)][:40]
    y = np.where(np.all(X > 0.0, axis=1), 1, -1)
    return Sample.from_arrays(X, y)


class NeverCalled:
    def fit(self, weighting, sample):
        raise AssertionError("no round may run")


class TestCapping:
    @pytest.mark.parametrize("family", sorted(FAMILIES))
    @pytest.mark.parametrize("nu", [1.0, 2.0, N_SAMPLE / 2, float(N_SAMPLE)])
    def test_weights_respect_cap(self, family, nu, noisy):
        """Test that every weighting lies in the capped simplex."""
        history = History()
        booster = FAMILIES[family](nu, RunConfig(max_rounds=6, observer=history))
        f = booster.fit(noisy, DecisionStump())

        assert len(history) >= 1
        for record in history.records:
            assert is_distribution(record.weighting, nu=nu, atol=1e-9)
        assert is_distribution(booster.distribution, nu=nu, atol=1e-9)
        assert all(w >= 0.0 for w in f.weights)

    @pytest.mark.parametrize("family", sorted(FAMILIES))
    @pytest.mark.parametrize("nu", [-1.0, 0.0, 0.5, N_SAMPLE + 1.0])
    def test_invalid_nu_fails_before_any_round(self, family, nu, noisy):
        """Test that nu outside [1, n] is rejected up front."""
        booster = FAMILIES[family](nu, RunConfig())
        with pytest.raises(InvalidCappingParameter):
            booster.fit(noisy, NeverCalled())
        assert booster.rounds == 0


class TestDualBound:
    @pytest.mark.parametrize("family", sorted(FAMILIES))
    def test_bound_is_monotone(self, family, separable):
        """Test that the best dual bound never increases."""
        history = History()
        booster = FAMILIES[family](2.0, RunConfig(max_rounds=10, observer=history))
        booster.fit(separable, DecisionStump())

        bounds = history.bounds
        assert all(b2 <= b1 for b1, b2 in zip(bounds, bounds[1:]))

    @pytest.mark.parametrize("family", sorted(FAMILIES))
    def test_objective_below_bound(self, family, noisy):
        """Test weak duality between soft margin and the dual bound."""
        history = History()
        booster = FAMILIES[family](3.0, RunConfig(max_rounds=8, observer=history))
        booster.fit(noisy, DecisionStump())

        for record in history.records:
            assert record.objective <= record.bound + 1e-7


class TestLPBoost:
    def test_requires_solver(self):
        """Test that LPBoost cannot be created without a solver."""
        with pytest.raises(SolverNotConfigured):
            LPBoost(nu=2.0)

    def test_converges_on_separable_sample(self, separable):
        """Test a certified run on a separable sample."""
        booster = LPBoost(nu=1.0, solver=ScipySolver())
        f = booster.fit(separable, DecisionStump())

        assert f.termination is Termination.CONVERGED
        assert f.certified
        assert sum(f.weights) == pytest.approx(1.0)
        predictions = f.predict_all(separable.features)
        assert np.array_equal(predictions, np.asarray(separable.target, dtype=int))
        assert booster.gamma_star >= booster.gamma_hat - booster.tolerance

    def test_coefficients_replaced_each_round(self, noisy):
        """Test that all coefficients come from the latest LP."""
        history = History()
        booster = LPBoost(
            nu=5.0, solver=ScipySolver(), config=RunConfig(max_rounds=5, observer=history)
        )
        booster.fit(noisy, DecisionStump())

        for record in history.records:
            assert sum(record.hypothesis.weights) == pytest.approx(1.0)


class TestSoftBoost:
    def test_requires_solver(self):
        """Test that SoftBoost cannot be created without a solver."""
        with pytest.raises(SolverNotConfigured):
            SoftBoost(nu=2.0)

    def test_nu_equal_n_converges_immediately(self, noisy):
        """Test that the uniform weighting is the only capped one."""
        booster = SoftBoost(nu=float(N_SAMPLE), solver=ScipySolver())
        f = booster.fit(noisy, DecisionStump())

        assert f.termination is Termination.CONVERGED
        assert len(f) == 1


class TestERLPBoost:
    def test_lower_bound_below_upper_bound(self, separable):
        """Test that the dual value never exceeds the primal bound."""
        booster = ERLPBoost(nu=2.0, config=RunConfig(tolerance=0.1, max_rounds=10))
        f = booster.fit(separable, DecisionStump())

        assert booster.gamma_star <= booster.gamma_hat + 1e-9
        assert sum(f.weights) == pytest.approx(1.0, abs=1e-9)
        assert all(w >= 0.0 for w in f.weights)

    def test_rounds_match_ensemble(self, separable):
        """Test that a certifying round without a new entry is not counted."""
        booster = ERLPBoost(nu=2.0, config=RunConfig(tolerance=0.1, max_rounds=10))
        f = booster.fit(separable, DecisionStump())
        assert booster.rounds == len(f)

    def test_regularization_parameter(self, noisy):
        """Test η = max(1/2, ln(n/nu) / (ε/2))."""
        booster = ERLPBoost(nu=3.0, config=RunConfig(tolerance=0.1, max_rounds=1))
        booster.fit(noisy, DecisionStump())
        assert booster.eta == pytest.approx(np.log(N_SAMPLE / 3.0) / 0.05)


class TestCERLPBoost:
    def test_ensemble_never_shrinks(self, noisy):
        """Test that each round adds one entry, duplicates included."""
        history = History()
        booster = CERLPBoost(nu=3.0, config=RunConfig(max_rounds=12, observer=history))
        booster.fit(noisy, DecisionStump())

        sizes = [len(record.hypothesis) for record in history.records]
        assert all(s2 >= s1 for s1, s2 in zip(sizes, sizes[1:]))
        converged = [r for r in history.records if r.termination is Termination.CONVERGED]
        assert sizes[-1] == len(history) - len(converged)

    def test_certifying_round_not_counted(self, noisy):
        """Test that rounds equals the ensemble size after convergence."""
        booster = CERLPBoost(nu=float(N_SAMPLE), config=RunConfig(tolerance=2.5))
        f = booster.fit(noisy, DecisionStump())

        assert f.termination is Termination.CONVERGED
        assert booster.rounds == len(f) == 0

    def test_rounds_match_ensemble(self, noisy):
        """Test that every counted round added one entry."""
        booster = CERLPBoost(nu=3.0, config=RunConfig(max_rounds=12))
        f = booster.fit(noisy, DecisionStump())
        assert booster.rounds == len(f)


class TestSmoothBoost:
    def test_weights_are_smooth(self, noisy):
        """Test that no weight exceeds 1 / (kappa n)."""
        history = History()
        booster = SmoothBoost(kappa=0.5, gamma=0.25, config=RunConfig(observer=history))
        f = booster.fit(noisy, DecisionStump())

        assert len(history) >= 1
        for record in history.records:
            assert is_distribution(record.weighting, nu=0.5 * N_SAMPLE)
        assert len(set(f.weights)) <= 1
        assert sum(f.weights) == pytest.approx(1.0) or len(f) == 0

    def test_default_budget(self):
        """Test the round budget 2 / (kappa gamma² sqrt(1 - gamma))."""
        booster = SmoothBoost(kappa=0.5, gamma=0.25)
        expected = int(np.ceil(2.0 / (0.5 * 0.25**2 * np.sqrt(0.75))))
        assert booster.default_max_rounds(N_SAMPLE, 1.0 / N_SAMPLE) == expected

    @pytest.mark.parametrize(
        "kappa,gamma",
        [(0.0, 0.25), (1.0, 0.25), (0.5, 0.5), (0.5, 0.0), (0.5, -0.1)],
    )
    def test_invalid_parameters(self, kappa, gamma, noisy):
        """Test that kappa and gamma are validated before any round."""
        booster = SmoothBoost(kappa=kappa, gamma=gamma)
        with pytest.raises(InvalidConfiguration):
            booster.fit(noisy, NeverCalled())
