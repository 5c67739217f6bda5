"""Unit tests for the weighted Kendall's Tau-b correlation."""

import math

import pytest
import numpy as np
from scipy import stats

from fluoranalysis.core.errors import MismatchedArrayLengthsError
from fluoranalysis.core.statistics import weighted_kendall_tau_b_correlation
from fluoranalysis.core.statistics.kendall_tau import rank_with_weights


class TestWeightedKendallTau:
    """Test weighted Kendall's Tau-b."""

    @pytest.mark.unit
    def test_perfect_positive(self):
        """Test identical sequences."""
        tau = weighted_kendall_tau_b_correlation([1, 2, 3, 4, 5], [1, 2, 3, 4, 5], [1.0] * 5)
        assert tau == pytest.approx(1.0, abs=1e-12)

    @pytest.mark.unit
    def test_perfect_negative(self):
        """Test reversed sequences."""
        tau = weighted_kendall_tau_b_correlation([1, 2, 3, 4, 5], [5, 4, 3, 2, 1], [1.0] * 5)
        assert tau == pytest.approx(-1.0, abs=1e-12)

    @pytest.mark.unit
    def test_one_disagreement(self):
        """Test a single adjacent swap."""
        tau = weighted_kendall_tau_b_correlation([1, 2, 3, 4, 5], [1, 2, 3, 5, 4], [1.0] * 5)
        assert tau == pytest.approx(0.8, abs=1e-12)

    @pytest.mark.unit
    def test_all_ties_returns_nan(self):
        """Test that two constant sequences are undefined."""
        tau = weighted_kendall_tau_b_correlation([2, 2, 2, 2], [3, 3, 3, 3], [1.0] * 4)
        assert math.isnan(tau)

    @pytest.mark.unit
    def test_one_constant_variable_returns_zero(self):
        """Test that a single constant sequence gives zero correlation."""
        tau = weighted_kendall_tau_b_correlation([2, 2, 2, 2], [1, 2, 3, 4], [1.0] * 4)
        assert tau == 0.0

    @pytest.mark.unit
    @pytest.mark.parametrize("a,b,expected", [
        ([10, 21, 22, 23, 30, 40, 50], [5, 3, 8, 6, 2, 9, 10], 0.42857142857142855),
        ([50, 40, 30, 23, 22, 21, 10], [10, 9, 2, 6, 8, 3, 5], 0.42857142857142855),
        ([10, 20, 20, 20, 30, 40, 50], [5, 3, 8, 6, 2, 9, 10], 0.41147559989891175),
        ([50, 40, 30, 20, 20, 20, 10], [10, 9, 2, 6, 8, 3, 5], 0.41147559989891175),
    ])
    def test_order_invariant(self, a, b, expected):
        """Test that the result does not depend on the observation order."""
        tau = weighted_kendall_tau_b_correlation(a, b, [1.0] * 7)
        assert tau == pytest.approx(expected, abs=1e-12)

    @pytest.mark.unit
    def test_unit_weights_match_scipy(self):
        """Test unit weights against scipy's Tau-b on data with ties."""
        a = np.random.randint(0, 6, size=40)
        b = a + np.random.randint(0, 4, size=40)

        tau = weighted_kendall_tau_b_correlation(a, b, np.ones(40))
        expected = stats.kendalltau(a, b, variant='b')[0]

        assert tau == pytest.approx(expected, abs=1e-12)

    @pytest.mark.unit
    def test_integer_weights_match_replication(self):
        """Test that an integer weight behaves like repeated observations."""
        a = np.random.randint(0, 10, size=15)
        b = np.random.randint(0, 10, size=15)
        weights = np.random.randint(1, 4, size=15)

        tau = weighted_kendall_tau_b_correlation(a, b, weights.astype(float))
        expected = stats.kendalltau(
            np.repeat(a, weights), np.repeat(b, weights), variant='b'
        )[0]

        assert tau == pytest.approx(expected, abs=1e-12)

    @pytest.mark.unit
    def test_symmetric_in_arguments(self):
        """Test that swapping the two sequences gives the same value."""
        a = np.random.rand(25)
        b = a + np.random.rand(25)
        w = np.random.rand(25)

        assert weighted_kendall_tau_b_correlation(a, b, w) == pytest.approx(
            weighted_kendall_tau_b_correlation(b, a, w), abs=1e-12
        )

    @pytest.mark.unit
    def test_bounded(self):
        """Test that random inputs stay within [-1, 1]."""
        for _ in range(20):
            a = np.random.randint(0, 5, size=12)
            b = np.random.randint(0, 5, size=12)
            w = np.random.rand(12)
            tau = weighted_kendall_tau_b_correlation(a, b, w)
            assert math.isnan(tau) or -1.0 <= tau <= 1.0

    @pytest.mark.unit
    @pytest.mark.parametrize("n", [0, 1])
    def test_too_few_observations(self, n):
        """Test that fewer than two observations give zero."""
        assert weighted_kendall_tau_b_correlation([1.0] * n, [1.0] * n, [1.0] * n) == 0.0

    @pytest.mark.unit
    def test_mismatched_lengths(self):
        """Test that mismatched lengths are rejected."""
        with pytest.raises(MismatchedArrayLengthsError):
            weighted_kendall_tau_b_correlation([1, 2, 3], [1, 2], [1.0, 1.0, 1.0])
        with pytest.raises(MismatchedArrayLengthsError):
            weighted_kendall_tau_b_correlation([1, 2, 3], [1, 2, 3], [1.0, 1.0])


class TestRankWithWeights:
    """Test average ranking with weighted tie corrections."""

    @pytest.mark.unit
    def test_average_ranks(self):
        """Test that tied values share the average of their ranks."""
        ranks, _ = rank_with_weights(np.array([30, 10, 20, 10]), np.ones(4))
        np.testing.assert_array_equal(ranks, [4.0, 1.5, 3.0, 1.5])

    @pytest.mark.unit
    def test_tie_correction(self):
        """Test the weighted pair mass inside tie groups."""
        _, tie_corr = rank_with_weights(
            np.array([1, 1, 2, 3, 3, 3]), np.array([1.0, 2.0, 5.0, 1.0, 1.0, 2.0])
        )
        # (1 + 2)^2 - (1 + 4) + (1 + 1 + 2)^2 - (1 + 1 + 4)
        assert tie_corr == pytest.approx(4.0 + 10.0)

    @pytest.mark.unit
    def test_no_ties(self):
        """Test that untied data has no tie correction."""
        _, tie_corr = rank_with_weights(np.array([3.0, 1.0, 2.0]), np.ones(3))
        assert tie_corr == 0.0
