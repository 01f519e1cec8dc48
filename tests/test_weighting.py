"""Tests for the weighting model."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from marginboost import (
    DegenerateWeighting,
    InfeasibleCapping,
    InvalidCappingParameter,
    InvalidSampleSize,
)
from marginboost.weighting import (
    capped_softmax,
    initialize,
    is_distribution,
    log_normalize,
    project_to_cap,
    renormalize,
    validate_capping,
)


class TestInitialize:
    def test_uniform(self):
        """Test that the initial weighting is uniform."""
        d = initialize(8)
        assert d.shape == (8,)
        assert d.dtype == jnp.float64
        assert jnp.allclose(d, 1.0 / 8)
        assert is_distribution(d)

    def test_empty_sample(self):
        """Test that an empty sample is rejected."""
        with pytest.raises(InvalidSampleSize):
            initialize(0)


class TestValidateCapping:
    @pytest.mark.parametrize("nu", [1.0, 2.5, 10.0])
    def test_valid(self, nu):
        """Test capping parameters inside [1, n]."""
        validate_capping(nu, 10)

    @pytest.mark.parametrize("nu", [0.0, 0.5, 11.0])
    def test_invalid(self, nu):
        """Test capping parameters outside [1, n]."""
        with pytest.raises(InvalidCappingParameter) as info:
            validate_capping(nu, 10)
        assert info.value.nu == nu
        assert isinstance(info.value, ValueError)


class TestNormalize:
    def test_renormalize(self):
        """Test that renormalize divides by the total mass."""
        d = renormalize(jnp.array([1.0, 3.0]))
        assert jnp.allclose(d, jnp.array([0.25, 0.75]))

    def test_renormalize_zero_mass(self):
        """Test that a weighting without mass is degenerate."""
        with pytest.raises(DegenerateWeighting):
            renormalize(jnp.zeros(4))

    def test_renormalize_overflow(self):
        """Test that an infinite total mass is degenerate."""
        with pytest.raises(DegenerateWeighting):
            renormalize(jnp.array([jnp.inf, 1.0]))

    def test_log_normalize_large_values(self):
        """Test log-space normalization of weights that overflow exp."""
        d = log_normalize(jnp.array([1000.0, 1000.0, 1000.0 - jnp.log(2.0)]))
        assert jnp.allclose(d, jnp.array([0.4, 0.4, 0.2]))
        assert is_distribution(d)

    def test_log_normalize_all_zero(self):
        """Test that all-zero weights in log-space are degenerate."""
        with pytest.raises(DegenerateWeighting):
            log_normalize(jnp.full(3, -jnp.inf))


class TestProjectToCap:
    def test_caps_largest_entry(self):
        """Test that excess mass is spread proportionally over the rest."""
        d = project_to_cap(jnp.array([0.7, 0.1, 0.1, 0.1]), nu=2.0)
        assert jnp.allclose(d, jnp.array([0.5, 1 / 6, 1 / 6, 1 / 6]))
        assert is_distribution(d, nu=2.0)

    def test_keeps_feasible_weighting(self):
        """Test that a weighting already under the cap is unchanged."""
        raw = jnp.array([0.3, 0.3, 0.2, 0.2])
        d = project_to_cap(raw, nu=2.0)
        assert jnp.allclose(d, raw)

    def test_order_is_preserved(self):
        """Test that the projection is applied to unsorted input."""
        d = project_to_cap(jnp.array([0.1, 0.1, 0.7, 0.1]), nu=2.0)
        assert jnp.isclose(d[2], 0.5)
        assert jnp.allclose(d[jnp.array([0, 1, 3])], 1 / 6)

    def test_nu_equal_n_gives_uniform(self):
        """Test that nu = n forces the uniform weighting."""
        raw = jnp.array([0.5, 0.2, 0.2, 0.1])
        d = project_to_cap(raw, nu=4.0)
        assert jnp.allclose(d, 0.25)

    def test_infeasible(self):
        """Test that too few positive entries cannot be capped."""
        with pytest.raises(InfeasibleCapping):
            project_to_cap(jnp.array([1.0, 0.0, 0.0, 0.0]), nu=2.0)

    def test_invalid_nu(self):
        """Test that the capping parameter is validated."""
        with pytest.raises(InvalidCappingParameter):
            project_to_cap(jnp.ones(4), nu=5.0)

    def test_negative_roundoff_is_clipped(self):
        """Test that tiny negative entries from a solver become zero."""
        d = project_to_cap(jnp.array([0.5, 0.5, -1e-15]), nu=2.0)
        assert jnp.all(d >= 0.0)
        assert is_distribution(d, nu=2.0)


class TestCappedSoftmax:
    @pytest.mark.parametrize("nu", [1.0, 2.0, 5.0, 10.0])
    def test_matches_projection(self, nu):
        """Test capped softmax against projecting the softmax."""
        logits = jax.random.normal(jax.random.PRNGKey(0), (10,)) * 3.0
        expected = project_to_cap(jax.nn.softmax(logits), nu)
        d = capped_softmax(logits, nu)
        assert jnp.allclose(d, expected, atol=1e-12)
        assert is_distribution(d, nu=nu)

    def test_extreme_logits(self):
        """Test that huge logits do not overflow."""
        d = capped_softmax(jnp.array([1000.0, 0.0, 0.0, 0.0]), nu=2.0)
        assert jnp.allclose(d, jnp.array([0.5, 1 / 6, 1 / 6, 1 / 6]))

    def test_non_finite_logits(self):
        """Test that non-finite logits are rejected."""
        with pytest.raises(DegenerateWeighting):
            capped_softmax(jnp.array([jnp.nan, 0.0]), nu=1.0)


class TestIsDistribution:
    def test_checks(self):
        """Test the invariant checks."""
        assert is_distribution(np.array([0.5, 0.5]))
        assert not is_distribution(np.array([0.6, 0.6]))
        assert not is_distribution(np.array([1.5, -0.5]))
        assert not is_distribution(np.array([]))
        assert not is_distribution(np.array([0.7, 0.3]), nu=2.0)
