"""Tests for largest-remainder apportionment."""

import pytest

from py_dynmap.core.apportionment import largest_remainder, shares_to_weights


class TestLargestRemainder:
    """Test integer apportionment."""

    def test_exact_division(self):
        assert largest_remainder([1, 2, 3], 600) == [100, 200, 300]

    def test_remainders_go_to_largest(self):
        """Leftover units go to the largest fractional parts."""
        # ideals 3.33, 3.33, 3.33 -> one leftover to the lowest index
        assert largest_remainder([1, 1, 1], 10) == [4, 3, 3]
        # ideals 1.4, 2.8, 5.8 -> floors 1, 2, 5, two leftovers to .8 and .8
        assert largest_remainder([7, 14, 29], 10) == [1, 3, 6]

    def test_ties_broken_by_index(self):
        assert largest_remainder([1, 1, 1, 1], 2) == [1, 1, 0, 0]

    def test_sum_is_exact(self):
        weights = [3, 7, 11, 13, 17, 19, 23, 29]
        for total in (0, 1, 97, 10_000_019, 11_000_000_000):
            allocation = largest_remainder(weights, total)
            assert sum(allocation) == total
            assert all(a >= 0 for a in allocation)

    def test_within_one_of_ideal(self):
        weights = [5, 9, 2, 31, 8]
        total = 12345
        allocation = largest_remainder(weights, total)
        for w, a in zip(weights, allocation):
            ideal = w * total / sum(weights)
            assert abs(a - ideal) < 1

    def test_huge_weights_stay_exact(self):
        """Python integers keep the arithmetic exact at planetary scale."""
        weights = [2 ** 40, 2 ** 40 - 1, 3 * 2 ** 38]
        allocation = largest_remainder(weights, 11_000_000_000)
        assert sum(allocation) == 11_000_000_000

    def test_zero_weights_split_uniformly(self):
        assert largest_remainder([0, 0, 0], 10) == [4, 3, 3]

    def test_zero_weight_bucket_gets_nothing(self):
        assert largest_remainder([0, 1, 1], 5) == [0, 3, 2]

    def test_empty(self):
        assert largest_remainder([], 0) == []
        with pytest.raises(ValueError):
            largest_remainder([], 5)

    def test_invalid_input(self):
        with pytest.raises(ValueError):
            largest_remainder([1, -1], 5)
        with pytest.raises(ValueError):
            largest_remainder([1, 1], -5)


class TestSharesToWeights:
    """Test decimal share conversion."""

    def test_decimal_shares_are_exact(self):
        assert shares_to_weights([0.3, 0.25, 0.2, 0.15, 0.1]) == [6, 5, 4, 3, 2]

    def test_mixed_precision(self):
        assert shares_to_weights([0.5, 0.045, 0.455]) == [100, 9, 91]
