"""Player economy document: everything persisted for one Discord user.

The document is stored as a single JSON blob (see ``cribbot.db.models``),
so nested records are plain pydantic models and collections are keyed by
id with explicit lookups instead of back-references.
"""

from __future__ import annotations

from datetime import datetime
from enum import IntEnum

from pydantic import BaseModel, Field

from cribbot.models.values import Bank, Bet, Energy, Multiplier, Upgrades, Wallet


class Streak(BaseModel):
    """A running streak with its all-time high."""

    value: int = 0
    highest: int = 0

    def add(self, value: int) -> None:
        self.value += value
        self.highest = max(self.highest, self.value)

    def reset(self) -> None:
        self.value = 0


class Coins(BaseModel):
    """Total coins for a result kind and the largest single amount."""

    value: int = 0
    highest: int = 0

    def add(self, value: int) -> None:
        self.value += value
        self.highest = max(self.highest, value)


class GameStatistic(BaseModel):
    """Count, streak and coin total for one result kind (wins, loses or ties)."""

    value: int = 0
    coins: Coins = Field(default_factory=Coins)
    streak: Streak = Field(default_factory=Streak)

    @property
    def display_streak(self) -> int:
        # A single result is not a streak yet.
        return self.streak.value - 1 if self.streak.value > 1 else 0

    def record(self, coins: int) -> None:
        self.value += 1
        self.streak.add(1)
        self.coins.add(coins)


class GameStats(BaseModel):
    """Per-game statistics."""

    id: str
    wins: GameStatistic = Field(default_factory=GameStatistic)
    loses: GameStatistic = Field(default_factory=GameStatistic)
    ties: GameStatistic = Field(default_factory=GameStatistic)
    last_played: datetime | None = None

    @property
    def played(self) -> int:
        return self.wins.value + self.loses.value + self.ties.value

    @property
    def win_rate(self) -> float:
        return self.wins.value / self.played if self.played else 0.0

    @property
    def lose_rate(self) -> float:
        return self.loses.value / self.played if self.played else 0.0

    @property
    def profit(self) -> int:
        return self.wins.coins.value - self.loses.coins.value

    def win(self, coins: int) -> None:
        self.loses.streak.reset()
        self.ties.streak.reset()
        self.wins.record(coins)

    def lose(self, coins: int) -> None:
        self.wins.streak.reset()
        self.ties.streak.reset()
        self.loses.record(coins)

    def tie(self, coins: int) -> None:
        self.wins.streak.reset()
        self.loses.streak.reset()
        self.ties.record(coins)


class PartyRole(IntEnum):
    OWNER = 1
    MEMBER = 2
    INVITED = 3


class PartyMembership(BaseModel):
    """A player's link to a party document."""

    id: str
    role: PartyRole = PartyRole.MEMBER

    @property
    def is_active(self) -> bool:
        return self.role in (PartyRole.OWNER, PartyRole.MEMBER)


class Advancement(BaseModel):
    id: str
    value: int = 0
    unlocked: bool = False


class PlayerEconomy(BaseModel):
    """The persisted economy state of one Discord user."""

    id: str
    wallet: Wallet = Field(default_factory=Wallet)
    bank: Bank = Field(default_factory=Bank)
    energy: Energy = Field(default_factory=Energy)
    bet: Bet = Field(default_factory=Bet)
    multiplier: Multiplier = Field(default_factory=Multiplier)
    upgrades: Upgrades = Field(default_factory=Upgrades)
    games: dict[str, GameStats] = Field(default_factory=dict)
    party: list[PartyMembership] = Field(default_factory=list)
    advancements: list[Advancement] = Field(default_factory=list)

    @property
    def net_worth(self) -> int:
        return self.wallet.value + self.bank.value

    @property
    def max_bet(self) -> int:
        return Bet.max_value(self.upgrades.mastery)

    @property
    def min_bet(self) -> int:
        return Bet.min_value(self.upgrades.mastery)

    @property
    def party_ids(self) -> list[str]:
        """Parties that count towards the multiplier (invites do not)."""
        return [m.id for m in self.party if m.is_active]

    @property
    def unlocked_advancements(self) -> list[Advancement]:
        return [a for a in self.advancements if a.unlocked]

    def stats_for(self, game_id: str) -> GameStats:
        """Return the stats entry for ``game_id``, creating it on first play."""
        stats = self.games.get(game_id)
        if stats is None:
            stats = GameStats(id=game_id)
            self.games[game_id] = stats
        return stats
