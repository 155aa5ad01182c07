"""Bounded numeric values stored on a player document.

Every balance a player owns (wallet, bank, bank space, energy, bet,
multiplier) is a ``NumericValue``: a single ``value`` with fluent
set/add/sub/reset helpers. Nothing here clamps. Ceilings scale with the
player's tier or mastery and are exposed as ``is_max_value(...)`` checks so
the caller decides what to do at the edge.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Self

from pydantic import BaseModel, ConfigDict, Field

from cribbot.models.constants import (
    BANK_LIMIT,
    BET_LIMIT,
    DEFAULT_BANK,
    DEFAULT_BET,
    DEFAULT_MULTIPLIER,
    DEFAULT_STARS,
    DEFAULT_WALLET,
    ENERGY_DURATION_MINUTES,
    ENERGY_LIMIT,
    EPOCH,
    MASTERY_ADDED_BANK,
    MASTERY_ADDED_BET,
    MASTERY_ADDED_WALLET,
    MASTERY_LIMIT,
    MIN_BET_DIVISOR,
    MULTIPLIER_LIMIT,
    STAR_GAIN,
    STAR_LIMIT,
    STAR_RATIO,
    TIER_ADDED_DURATION_MINUTES,
    TIER_ADDED_ENERGY,
    TIER_ADDED_MULTIPLIER,
    TIER_LIMIT,
    WALLET_LIMIT,
)


def _now() -> datetime:
    return datetime.now(UTC)


class NumericValue(BaseModel):
    """A single integer balance with fluent mutators."""

    value: int = 0

    def set_value(self, value: int) -> Self:
        self.value = value
        return self

    def add_value(self, value: int) -> Self:
        self.value += value
        return self

    def sub_value(self, value: int) -> Self:
        self.value -= value
        return self

    def reset_value(self) -> Self:
        """Restore the default declared by the concrete subtype."""
        self.value = type(self).model_fields["value"].get_default(call_default_factory=True)
        return self


class Wallet(NumericValue):
    value: int = DEFAULT_WALLET

    @staticmethod
    def max_value(mastery: int) -> int:
        return round(WALLET_LIMIT + MASTERY_ADDED_WALLET * mastery)

    def is_max_value(self, mastery: int) -> bool:
        return self.value >= self.max_value(mastery)


class BankSpace(NumericValue):
    value: int = 0

    @staticmethod
    def max_value(mastery: int) -> int:
        return round(BANK_LIMIT + MASTERY_ADDED_BANK * mastery)

    def is_max_value(self, mastery: int) -> bool:
        return self.value >= self.max_value(mastery)


class Bank(NumericValue):
    """Coins stored away from games. Capacity is ``space``, grown by winning."""

    value: int = DEFAULT_BANK
    space: BankSpace = Field(default_factory=BankSpace)

    @property
    def available_space(self) -> int:
        return self.space.value - self.value

    def is_max_value(self) -> bool:
        return self.value >= self.space.value


class Energy(NumericValue):
    """Stars plus an expiry timestamp.

    ``energy`` is derived: one energy per ``STAR_RATIO`` stars. Games are only
    playable while ``expire`` is in the future.
    """

    value: int = DEFAULT_STARS
    expire: datetime = EPOCH

    @property
    def energy(self) -> int:
        return self.value // STAR_RATIO

    def add_value(self, value: int | None = None) -> Self:
        return super().add_value(STAR_GAIN if value is None else value)

    def sub_value(self, value: int | None = None) -> Self:
        return super().sub_value(STAR_GAIN if value is None else value)

    def add_energy(self, energy: int) -> Self:
        return self.add_value(energy * STAR_RATIO)

    def sub_energy(self, energy: int) -> Self:
        return self.sub_value(energy * STAR_RATIO)

    def set_expire(self, expire: datetime) -> Self:
        self.expire = expire
        return self

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or _now()) > self.expire

    @staticmethod
    def default_duration(tier: int) -> int:
        """Minutes of play one energy buys at ``tier``."""
        return round(ENERGY_DURATION_MINUTES + TIER_ADDED_DURATION_MINUTES * tier)

    def recharge(self, tier: int, now: datetime | None = None) -> Self:
        """Spend one energy and push the expiry out by the default duration."""
        self.sub_energy(1)
        return self.set_expire((now or _now()) + timedelta(minutes=self.default_duration(tier)))

    @staticmethod
    def max_energy(tier: int) -> int:
        return round(ENERGY_LIMIT + TIER_ADDED_ENERGY * tier)

    def is_max_energy(self, tier: int) -> bool:
        return self.energy >= self.max_energy(tier)

    def is_max_stars(self) -> bool:
        return self.value >= STAR_LIMIT


class Bet(NumericValue):
    value: int = DEFAULT_BET

    @staticmethod
    def max_value(mastery: int) -> int:
        return round(BET_LIMIT + MASTERY_ADDED_BET * mastery)

    @classmethod
    def min_value(cls, mastery: int) -> int:
        return round(cls.max_value(mastery) / MIN_BET_DIVISOR)

    def is_max_value(self, mastery: int) -> bool:
        return self.value >= self.max_value(mastery)


class Multiplier(NumericValue):
    """Percentage bonus on winnings. ``expire=None`` means permanent."""

    value: int = DEFAULT_MULTIPLIER
    expire: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expire is not None and (now or _now()) > self.expire

    def effective(self, now: datetime | None = None) -> int:
        return 0 if self.is_expired(now) else self.value

    @staticmethod
    def max_value(tier: int) -> int:
        return round(MULTIPLIER_LIMIT + TIER_ADDED_MULTIPLIER * tier)

    def is_max_value(self, tier: int) -> bool:
        return self.value >= self.max_value(tier)


class Upgrades(BaseModel):
    """Progression counters. Replaced wholesale, never mutated in place."""

    model_config = ConfigDict(frozen=True)

    tier: int = Field(default=0, ge=0, le=TIER_LIMIT)
    mastery: int = Field(default=0, ge=0, le=MASTERY_LIMIT)

    def is_max_tier(self) -> bool:
        return self.tier >= TIER_LIMIT

    def is_max_mastery(self) -> bool:
        return self.mastery >= MASTERY_LIMIT
