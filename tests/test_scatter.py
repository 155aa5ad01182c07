"""Tests for the scatter distributor."""

import random

import pytest

from cribbot.core.scatter import scatter


def values(shares):
    return [s.value for s in shares]


class TestScatterInvariants:
    @pytest.mark.parametrize("seed", range(25))
    def test_total_bounds_and_order(self, seed):
        rng = random.Random(seed)
        amount, minimum, maximum, length = 10_000_000, 1_000_000, 10_000_000, 6
        shares = values(scatter(amount, minimum, maximum, length, rng))
        assert len(shares) == length
        assert sum(shares) == amount
        assert all(minimum <= s <= maximum for s in shares)
        assert shares == sorted(shares, reverse=True)

    @pytest.mark.parametrize("seed", range(10))
    def test_small_amounts(self, seed):
        shares = values(scatter(37, 2, 20, 5, random.Random(seed)))
        assert sum(shares) == 37
        assert all(2 <= s <= 20 for s in shares)

    @pytest.mark.parametrize("seed", range(50))
    def test_hundred_over_six(self, seed):
        shares = values(scatter(100, 5, 25, 6, random.Random(seed)))
        assert len(shares) == 6
        assert sum(shares) == 100
        assert all(5 <= s <= 25 for s in shares)

    def test_same_seed_same_split(self):
        first = values(scatter(5_000, 100, 5_000, 4, random.Random(7)))
        second = values(scatter(5_000, 100, 5_000, 4, random.Random(7)))
        assert first == second


class TestScatterEdges:
    def test_single_share_gets_everything(self):
        assert values(scatter(900, 0, 900, 1, random.Random(1))) == [900]

    def test_minimum_forces_equal_split(self):
        assert values(scatter(30, 10, 50, 3, random.Random(1))) == [10, 10, 10]

    def test_maximum_forces_equal_split(self):
        assert values(scatter(150, 10, 50, 3, random.Random(1))) == [50, 50, 50]

    def test_spam_prize_split(self):
        prize, winners = 5_000_000, 3
        shares = values(scatter(prize, prize // (2 * winners), prize, winners, random.Random(3)))
        assert sum(shares) == prize
        assert min(shares) >= prize // (2 * winners)


class TestScatterValidation:
    def test_zero_length(self):
        with pytest.raises(ValueError, match="length"):
            scatter(10, 0, 10, 0)

    def test_minimum_above_maximum(self):
        with pytest.raises(ValueError, match="minimum"):
            scatter(10, 5, 4, 2)

    def test_amount_unreachable(self):
        with pytest.raises(ValueError, match="cannot split"):
            scatter(100, 0, 10, 3)
        with pytest.raises(ValueError, match="cannot split"):
            scatter(5, 3, 10, 3)
