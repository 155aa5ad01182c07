"""High-low: guess whether a secret number is above or below a hint.

Calling JACKPOT pays a flat ten times the bet, but only when the secret
equals the hint.
"""

from __future__ import annotations

import random
from enum import StrEnum
from typing import TYPE_CHECKING

from cribbot.core.errors import ActionTimeout
from cribbot.core.games.base import UNPICKED, Game, Picked, Unpicked, timed_out
from cribbot.core.render import Button, ButtonStyle, Color, MessageContent, bold, coins
from cribbot.core.winnings import calculate_winnings
from cribbot.models.outcome import GameOutcome, OutcomeKind

if TYPE_CHECKING:
    from cribbot.core.session import GameContext

NUMBER_MIN = 1
NUMBER_MAX = 10
BASE = 0.05
RANDOM_SCALE = 1.9
JACKPOT_BASE = 10


class Guess(StrEnum):
    LOWER = "lower"
    JACKPOT = "jackpot"
    HIGHER = "higher"


class HighlowLogic:
    def __init__(self, rng: random.Random) -> None:
        self.value = rng.randint(NUMBER_MIN, NUMBER_MAX)
        self.hint = rng.randint(NUMBER_MIN, NUMBER_MAX)
        self.guess: Unpicked | Picked[Guess] = UNPICKED

    def set_guess(self, guess: Guess) -> None:
        self.guess = Picked(guess)

    @property
    def outcome(self) -> OutcomeKind | None:
        if not isinstance(self.guess, Picked):
            return None
        guess = self.guess.value
        if guess == Guess.JACKPOT and self.value == self.hint:
            return OutcomeKind.JACKPOT
        if (self.value > self.hint and guess == Guess.HIGHER) or (
            self.value < self.hint and guess == Guess.LOWER
        ):
            return OutcomeKind.WIN
        return OutcomeKind.LOSE


class Highlow(Game):
    id = "highlow"
    name = "High-Low"
    emoji = "🔢"
    description = "Is the secret number higher or lower than the hint?"

    async def play(self, ctx: GameContext) -> None:
        logic = HighlowLogic(ctx.rng)
        await ctx.respond(self.render(ctx, logic))

        try:
            guess = await ctx.await_action(*Guess)
        except ActionTimeout:
            outcome = timed_out(forfeit=True)
            ctx.resolve(outcome)
            await self.finish(ctx, self.render(ctx, logic, outcome), force=True)
            return

        logic.set_guess(Guess(guess))
        kind = logic.outcome
        if kind == OutcomeKind.JACKPOT:
            winnings = calculate_winnings(JACKPOT_BASE, ctx.bet, multiplier=0, random=0)
            outcome = GameOutcome(kind=kind, payoff=winnings.final)
        elif kind == OutcomeKind.WIN:
            winnings = (
                ctx.winnings.set_base(BASE)
                .set_random(ctx.rng.random() * RANDOM_SCALE)
                .calculate(ctx.bet)
            )
            outcome = GameOutcome(kind=kind, payoff=winnings.final)
        else:
            outcome = GameOutcome(kind=OutcomeKind.LOSE)
        ctx.resolve(outcome)
        await self.finish(ctx, self.render(ctx, logic, outcome))

    def render(
        self, ctx: GameContext, logic: HighlowLogic, outcome: GameOutcome | None = None
    ) -> MessageContent:
        wallet = bold(coins(ctx.player.wallet.value))
        if outcome is None:
            description = (
                f"You bet {bold(coins(ctx.bet))}.\n"
                f"I just chose a secret number between {NUMBER_MIN} and {NUMBER_MAX}.\n"
                f"Is the secret number *higher* or *lower* than {bold(logic.hint)}?"
            )
            color = Color.BLURPLE
        elif outcome.kind == OutcomeKind.OTHER:
            description = f"{outcome.reason} You lost your bet.\nYou now have {wallet}."
            color = Color.RED
        else:
            won = outcome.is_win
            prefix = "JACKPOT! " if outcome.kind == OutcomeKind.JACKPOT else ""
            amount = coins(outcome.payoff or 0) if won else coins(ctx.bet)
            description = (
                bold(f"{prefix}You {'won' if won else 'lost'} {amount}{'!' if won else '.'}")
                + f"\nYour hint was {bold(logic.hint)}. The hidden number was {bold(logic.value)}."
                + f"\nYou now have {wallet}."
            )
            if outcome.kind == OutcomeKind.JACKPOT:
                color = Color.GOLD
            else:
                color = Color.GREEN if won else Color.RED

        embed = self.embed(ctx, description, color)
        if outcome is not None and outcome.kind != OutcomeKind.OTHER:
            stats = ctx.stats
            streak = stats.wins if outcome.is_win else stats.loses
            if streak.display_streak:
                label = "Win" if outcome.is_win else "Lose"
                embed.footer = f"{label} Streak: {streak.display_streak}"

        rows = [
            [
                Button(
                    custom_id=ctx.ids.create(guess),
                    label="JACKPOT!" if guess == Guess.JACKPOT else guess.title(),
                    style=self._style(logic, guess, outcome),
                    disabled=outcome is not None,
                )
                for guess in Guess
            ]
        ]
        return MessageContent(embeds=[embed], rows=rows)

    @staticmethod
    def _style(logic: HighlowLogic, guess: Guess, outcome: GameOutcome | None) -> ButtonStyle:
        if outcome is None:
            return ButtonStyle.PRIMARY
        if logic.guess == Picked(guess):
            return ButtonStyle.SUCCESS if outcome.is_win else ButtonStyle.DANGER
        return ButtonStyle.SECONDARY
