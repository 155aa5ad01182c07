"""Tests for the winnings calculator and rounding helpers."""

import pytest

from conftest import ScriptedRandom
from cribbot.core.winnings import (
    WinningsCalculator,
    calculate_winnings,
    round_half_up,
    round_zero,
)


class TestRounding:
    def test_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2

    @pytest.mark.parametrize(
        ("value", "zeros", "expected"),
        [
            (744, 1, 740),
            (745, 1, 750),
            (1234, 2, 1200),
            (1250, 2, 1300),
            (15, 0, 20),  # zeros below 1 clamp to 1
            (5, 25, 0),  # zeros above 20 clamp to 20
        ],
    )
    def test_round_zero(self, value, zeros, expected):
        assert round_zero(value, zeros) == expected

    @pytest.mark.parametrize("zeros", [0, 1, 2, 3, 6, 20, 21])
    @pytest.mark.parametrize("value", [0, 4, 5, 49, 745, 1_250, 99_999, 123_456_789])
    def test_round_zero_is_idempotent(self, value, zeros):
        once = round_zero(value, zeros)
        assert round_zero(once, zeros) == once


class TestCalculateWinnings:
    def test_multiplier_applies_on_top_of_raw(self):
        winnings = calculate_winnings(0.1, 1000, multiplier=50, random=0.4)
        assert winnings.raw == 500
        assert winnings.final == 750

    def test_final_is_rounded_to_tens(self):
        winnings = calculate_winnings(0.25, 1003, multiplier=0, random=0)
        assert winnings.raw == 251
        assert winnings.final == 250

    def test_random_drawn_from_rng(self):
        rng = ScriptedRandom(randoms=[0.3])
        winnings = calculate_winnings(0.2, 100, rng=rng)
        assert winnings.raw == 50

    def test_fixed_multiplier_payout(self):
        assert calculate_winnings(100, 1000, random=0).final == 100_000

    def test_flat_payout_without_multiplier(self):
        assert calculate_winnings(10, 1234, multiplier=0, random=0).final == 12_340


class TestWinningsCalculator:
    def test_session_multiplier_is_used(self):
        calc = WinningsCalculator(multiplier=10)
        assert calc.set_base(0.5).set_random(0).calculate(1000).final == 550

    def test_fluent_setters_return_self(self):
        calc = WinningsCalculator()
        assert calc.set_base(1) is calc
        assert calc.set_random(0) is calc

    def test_unset_random_uses_rng(self):
        calc = WinningsCalculator(rng=ScriptedRandom(randoms=[0.6]))
        assert calc.set_base(0.4).set_random(None).calculate(1000).raw == 1000
