"""Tests for the margin objectives."""

import jax.numpy as jnp
import numpy as np
import pytest

from marginboost.losses import exponential_loss, hard_margin, soft_margin, zero_one_loss


class TestMarginObjectives:
    def test_hard_margin(self):
        """Test that the hard margin is the smallest margin."""
        assert float(hard_margin(jnp.array([0.3, -0.2, 0.9]))) == pytest.approx(-0.2)

    def test_soft_margin_nu_one_is_hard_margin(self):
        """Test that nu = 1 gives the hard margin."""
        margins = jnp.array([0.4, -0.1, 0.7, 0.2])
        assert float(soft_margin(margins, 1.0)) == pytest.approx(-0.1)

    def test_soft_margin_integer_nu(self):
        """Test the mean of the nu smallest margins."""
        margins = jnp.array([0.4, -0.1, 0.7, 0.2])
        assert float(soft_margin(margins, 2.0)) == pytest.approx(0.05)
        assert float(soft_margin(margins, 4.0)) == pytest.approx(0.3)

    def test_soft_margin_fractional_nu(self):
        """Test that a fractional nu weights the next margin partially."""
        margins = jnp.array([0.4, -0.1, 0.7, 0.2])
        expected = (-0.1 + 0.2 + 0.5 * 0.4) / 2.5
        assert float(soft_margin(margins, 2.5)) == pytest.approx(expected)

    def test_soft_margin_matches_lp_form(self):
        """Test max_ρ ρ - (1/nu) Σ max(0, ρ - margin) on a grid of ρ."""
        rng = np.random.default_rng(0)
        margins = rng.uniform(-1.0, 1.0, size=11)
        nu = 3.7
        grid = np.linspace(-1.0, 1.0, 20001)
        values = grid - np.maximum(0.0, grid[:, None] - margins).sum(axis=1) / nu
        assert float(soft_margin(jnp.asarray(margins), nu)) == pytest.approx(
            values.max(), abs=1e-3
        )


class TestLosses:
    def test_exponential_loss(self):
        """Test the mean of exp(-margin)."""
        margins = jnp.array([0.0, 1.0, -1.0])
        expected = np.mean(np.exp([0.0, -1.0, 1.0]))
        assert float(exponential_loss(margins)) == pytest.approx(expected)

    def test_exponential_loss_large_margins(self):
        """Test that large negative margins do not overflow."""
        assert np.isfinite(float(exponential_loss(jnp.array([-700.0, 5.0]))))

    def test_zero_one_loss(self):
        """Test the fraction of wrong labels."""
        predictions = jnp.array([1, -1, 1, 1])
        targets = jnp.array([1.0, 1.0, 1.0, -1.0])
        assert float(zero_one_loss(predictions, targets)) == pytest.approx(0.5)
