"""Dice roll: both sides roll a die, the higher roll wins."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from cribbot.core.errors import ActionTimeout
from cribbot.core.games.base import UNPICKED, Game, Picked, Unpicked, timed_out
from cribbot.core.render import Button, ButtonStyle, Color, Field, MessageContent, bold, coins
from cribbot.models.outcome import GameOutcome, OutcomeKind

if TYPE_CHECKING:
    from cribbot.core.session import GameContext

BASE = 0.5
DIE_MIN = 1
DIE_MAX = 6
REVEAL = "reveal"


class DiceRollLogic:
    def __init__(self, rng: random.Random) -> None:
        self.rng = rng
        self.player: Unpicked | Picked[int] = UNPICKED
        self.opponent: Unpicked | Picked[int] = UNPICKED

    def roll(self) -> None:
        self.player = Picked(self.rng.randint(DIE_MIN, DIE_MAX))
        self.opponent = Picked(self.rng.randint(DIE_MIN, DIE_MAX))

    @property
    def outcome(self) -> OutcomeKind | None:
        if not isinstance(self.player, Picked) or not isinstance(self.opponent, Picked):
            return None
        if self.player.value > self.opponent.value:
            return OutcomeKind.WIN
        if self.player.value == self.opponent.value:
            return OutcomeKind.TIE
        return OutcomeKind.LOSE


class DiceRoll(Game):
    id = "diceroll"
    name = "Dice Roll"
    emoji = "🎲"
    description = "Roll a die against the house."

    async def play(self, ctx: GameContext) -> None:
        logic = DiceRollLogic(ctx.rng)
        await ctx.respond(self.render(ctx, logic))

        try:
            await ctx.await_action(REVEAL)
        except ActionTimeout:
            outcome = timed_out(forfeit=True)
            ctx.resolve(outcome)
            await self.finish(ctx, self.render(ctx, logic, outcome), force=True)
            return

        logic.roll()
        kind = logic.outcome
        if kind == OutcomeKind.WIN:
            winnings = ctx.winnings.set_base(BASE).set_random(None).calculate(ctx.bet)
            outcome = GameOutcome(kind=kind, payoff=winnings.final)
        else:
            outcome = GameOutcome(kind=kind or OutcomeKind.LOSE)
        ctx.resolve(outcome)
        await self.finish(ctx, self.render(ctx, logic, outcome))

    def render(
        self, ctx: GameContext, logic: DiceRollLogic, outcome: GameOutcome | None = None
    ) -> MessageContent:
        wallet = bold(coins(ctx.player.wallet.value))
        if outcome is None:
            description, color = f"You bet {bold(coins(ctx.bet))}. Roll the dice!", Color.BLURPLE
        elif outcome.kind == OutcomeKind.OTHER:
            description = f"{outcome.reason} You lost your bet.\nYou now have {wallet}."
            color = Color.RED
        elif outcome.kind == OutcomeKind.WIN:
            description = f"You won {bold(coins(outcome.payoff or 0))}!\nYou now have {wallet}."
            color = Color.GREEN
        elif outcome.kind == OutcomeKind.TIE:
            description = f"It's a tie. You have {wallet} still."
            color = Color.YELLOW
        else:
            description = f"You lost {bold(coins(ctx.bet))}.\nYou now have {wallet}."
            color = Color.RED

        embed = self.embed(ctx, description, color)
        embed.fields = [
            Field(name="Your Roll", value=bold(self._face(logic.player)), inline=True),
            Field(name="House Roll", value=bold(self._face(logic.opponent)), inline=True),
        ]
        rows = [
            [
                Button(
                    custom_id=ctx.ids.create(REVEAL),
                    label="Reveal",
                    style=ButtonStyle.SECONDARY if outcome is not None else ButtonStyle.PRIMARY,
                    disabled=outcome is not None,
                )
            ]
        ]
        return MessageContent(embeds=[embed], rows=rows)

    @staticmethod
    def _face(roll: Unpicked | Picked[int]) -> str:
        return str(roll.value) if isinstance(roll, Picked) else "?"
