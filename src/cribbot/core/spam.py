"""Spam event bookkeeping.

Players join during a short window, then spam a word in the channel. Only
players with enough matching messages win, and the prize is scattered
between them with the biggest share going to the most active spammer.
Discord plumbing lives in ``cribbot.discord.bot``; this module only counts.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from cribbot.core.scatter import scatter

MIN_SPAM_MESSAGES = 15
MAX_SPAM_PLAYERS = 30
MIN_SPAM_PLAYERS = 3
MIN_SPAM_PRIZE = 5_000_000


@dataclass
class Spammer:
    user_id: int
    spams: int = 0
    won: int = 0


class SpamEvent:
    def __init__(
        self,
        *,
        host_id: int,
        prize: int,
        word: str,
        max_players: int = MAX_SPAM_PLAYERS,
        min_messages: int = MIN_SPAM_MESSAGES,
    ) -> None:
        self.host_id = host_id
        self.prize = prize
        self.word = word
        self.max_players = max_players
        self.min_messages = min_messages
        self.players: dict[int, Spammer] = {}

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.max_players

    def join(self, user_id: int) -> bool:
        """Add a player. False if they already joined or the event is full."""
        if user_id in self.players or self.is_full:
            return False
        self.players[user_id] = Spammer(user_id=user_id)
        return True

    def record(self, user_id: int, text: str) -> bool:
        """Count a message if it comes from a player and contains the word."""
        spammer = self.players.get(user_id)
        if spammer is None or self.word.lower() not in text.lower():
            return False
        spammer.spams += 1
        return True

    def winners(self) -> list[Spammer]:
        qualified = [p for p in self.players.values() if p.spams >= self.min_messages]
        return sorted(qualified, key=lambda p: p.spams, reverse=True)

    def losers(self) -> list[Spammer]:
        return [p for p in self.players.values() if p.spams < self.min_messages]

    def payouts(self, rng: random.Random | None = None) -> list[Spammer]:
        """Split the prize between the winners. The top spammer gets the largest share."""
        winners = self.winners()
        if not winners:
            return []
        shares = scatter(self.prize, self.prize // (2 * len(winners)), self.prize, len(winners), rng)
        for winner, share in zip(winners, shares, strict=True):
            winner.won = share.value
        return winners
