"""Tests for Beta beliefs, simulated priors and evidence weighting.

Tests cover:
  - Beta moments, entropy shape and observation counting
  - Update monotonicity and weight validation
  - Prior from simulated confusion (worked example)
  - Sigmoid evidence weighting and the large-distance cap
"""

import math

import pytest

from cvdlab.bayesian.belief import Belief, PriorInitializer, binary_entropy
from cvdlab.bayesian.evidence import EvidenceWeighting
from cvdlab.core.exceptions import InvalidInput


# ============================================================
# Belief
# ============================================================

class TestBelief:

    def test_moments(self):
        b = Belief(alpha=2.0, beta=6.0)
        assert b.mean == pytest.approx(0.25)
        assert b.variance == pytest.approx(2 * 6 / (64 * 9))
        assert b.std_dev == pytest.approx(math.sqrt(b.variance))

    def test_observation_count_subtracts_unit_priors(self):
        assert Belief(1.0, 1.0).observation_count == 0.0
        assert Belief(2.9, 2.6).observation_count == pytest.approx(3.5)

    def test_rejects_non_positive_parameters(self):
        with pytest.raises(InvalidInput):
            Belief(alpha=0.0, beta=1.0)
        with pytest.raises(InvalidInput):
            Belief(alpha=1.0, beta=-2.0)

    def test_success_adds_to_alpha(self):
        b = Belief(1.4, 2.6)
        b.update(True, 1.5)
        assert (b.alpha, b.beta) == pytest.approx((2.9, 2.6))

    def test_failure_adds_to_beta(self):
        b = Belief(1.4, 2.6)
        b.update(False, 0.8)
        assert (b.alpha, b.beta) == pytest.approx((1.4, 3.4))

    @pytest.mark.parametrize("alpha,beta", [(1, 1), (0.3, 7), (40, 2), (2.5, 2.5)])
    @pytest.mark.parametrize("weight", [0.01, 0.77, 1.0, 1.5])
    def test_monotonicity(self, alpha, beta, weight):
        up = Belief(alpha, beta)
        up.update(True, weight)
        down = Belief(alpha, beta)
        down.update(False, weight)
        assert up.mean > Belief(alpha, beta).mean
        assert down.mean < Belief(alpha, beta).mean

    @pytest.mark.parametrize("weight", [0.0, -1.0])
    def test_update_rejects_non_positive_weight(self, weight):
        b = Belief()
        with pytest.raises(InvalidInput):
            b.update(True, weight)
        assert (b.alpha, b.beta) == (1.0, 1.0)

    def test_credible_interval_contains_mean(self):
        b = Belief(8.0, 4.0)
        lo, hi = b.credible_interval(0.95)
        assert 0.0 < lo < b.mean < hi < 1.0
        lo90, hi90 = b.credible_interval(0.90)
        assert lo < lo90 and hi90 < hi


# ============================================================
# Entropy
# ============================================================

class TestEntropy:

    def test_one_bit_at_half(self):
        assert Belief(1, 1).entropy == pytest.approx(1.0)
        assert Belief(7.3, 7.3).entropy == pytest.approx(1.0)

    def test_zero_at_certainty(self):
        assert binary_entropy(0.0) == 0.0
        assert binary_entropy(1.0) == 0.0

    @pytest.mark.parametrize("p", [0.01, 0.1, 0.3, 0.45])
    def test_symmetric_about_half(self, p):
        assert binary_entropy(p) == pytest.approx(binary_entropy(1 - p))
        assert binary_entropy(p) < 1.0

    def test_belief_entropy_symmetric_in_parameters(self):
        assert Belief(3, 9).entropy == pytest.approx(Belief(9, 3).entropy)


# ============================================================
# Prior
# ============================================================

class TestPriorInitializer:

    def test_worked_example(self):
        b = PriorInitializer().from_simulated(0.8)
        assert b.alpha == pytest.approx(1.4)
        assert b.beta == pytest.approx(2.6)
        assert b.mean == pytest.approx(0.35)
        assert 1 - b.mean == pytest.approx(0.65)

        b.update(True, 1.5)
        assert (b.alpha, b.beta) == pytest.approx((2.9, 2.6))
        assert 1 - b.mean == pytest.approx(0.4727, abs=1e-3)

    def test_extremes(self):
        init = PriorInitializer()
        assert (init.from_simulated(0.0).alpha, init.from_simulated(0.0).beta) == (3.0, 1.0)
        assert (init.from_simulated(1.0).alpha, init.from_simulated(1.0).beta) == (1.0, 3.0)

    def test_more_simulated_confusion_means_lower_mean(self):
        init = PriorInitializer()
        means = [init.from_simulated(p).mean for p in (0.0, 0.25, 0.5, 0.75, 1.0)]
        assert means == sorted(means, reverse=True)

    def test_clamps_out_of_range(self):
        init = PriorInitializer()
        assert init.from_simulated(1.3).mean == init.from_simulated(1.0).mean
        assert init.from_simulated(-0.2).mean == init.from_simulated(0.0).mean

    def test_nan_rejected(self):
        with pytest.raises(InvalidInput):
            PriorInitializer().from_simulated(float("nan"))

    def test_weak_prior_overturned_quickly(self):
        b = PriorInitializer().from_simulated(1.0)
        for _ in range(3):
            b.update(True, 1.0)
        assert b.mean > 0.5


# ============================================================
# Evidence weighting
# ============================================================

class TestEvidenceWeighting:

    def setup_method(self):
        self.w = EvidenceWeighting()

    def test_center_is_unit_weight(self):
        assert self.w.weight(10.0) == pytest.approx(1.0)

    def test_identical_colors(self):
        # 0.5 + 1 / (1 + e)
        assert self.w.weight(0.0) == pytest.approx(0.7689, abs=1e-4)

    def test_large_distance_capped(self):
        assert self.w.weight(40.0) <= 1.0
        assert self.w.weight(40.0) == pytest.approx(1.0)

    def test_cap_starts_above_thirty(self):
        assert self.w.weight(30.0) == pytest.approx(0.5 + 1 / (1 + math.exp(-2.0)))
        assert self.w.weight(30.0) > 1.0

    def test_increasing_below_cap(self):
        weights = [self.w.weight(d) for d in (0, 2, 5, 10, 20, 30)]
        assert weights == sorted(weights)
        assert all(0.5 < x < 1.5 for x in weights)

    def test_callable(self):
        assert self.w(10.0) == self.w.weight(10.0)

    @pytest.mark.parametrize("bad", [-0.1, float("nan")])
    def test_rejects_bad_distance(self, bad):
        with pytest.raises(InvalidInput):
            self.w.weight(bad)
