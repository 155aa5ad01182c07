"""Winnings calculation shared by every game.

Pure functions. Rounding is half-up so results stay stable across
platforms (``round()`` in Python rounds half to even).
"""

from __future__ import annotations

import math
import random as _random
from dataclasses import dataclass
from typing import Self

MIN_ZEROS = 1
MAX_ZEROS = 20


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def round_zero(value: float, zeros: int = 1) -> int:
    """Round ``value`` to the nearest multiple of ``10**zeros`` (zeros clamped to 1..20)."""
    factor = 10 ** max(MIN_ZEROS, min(zeros, MAX_ZEROS))
    return round_half_up(value / factor) * factor


@dataclass(frozen=True)
class Winnings:
    raw: int
    final: int


def calculate_winnings(
    base: float,
    bet: int,
    multiplier: float = 0,
    random: float | None = None,
    rng: _random.Random | None = None,
) -> Winnings:
    """Compute raw and final winnings for a bet.

    raw   = round(bet * (random + base))
    final = round_zero(round(raw + raw * multiplier / 100))

    ``random`` defaults to a uniform draw from ``rng``.
    """
    if random is None:
        random = (rng or _random.Random()).random()
    raw = round_half_up(bet * (random + base))
    final = round_half_up(raw + raw * (multiplier / 100))
    return Winnings(raw=raw, final=round_zero(final, 1))


class WinningsCalculator:
    """Per-session calculator. Games set base and random each round."""

    def __init__(self, multiplier: float = 0, rng: _random.Random | None = None) -> None:
        self.base: float = 0
        self.multiplier = multiplier
        self.random: float | None = None
        self.rng = rng

    def set_base(self, base: float) -> Self:
        self.base = base
        return self

    def set_random(self, random: float | None) -> Self:
        self.random = random
        return self

    def calculate(self, bet: int) -> Winnings:
        return calculate_winnings(
            self.base, bet, multiplier=self.multiplier, random=self.random, rng=self.rng
        )
