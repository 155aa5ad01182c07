"""Coinflip: call heads or tails before the coin lands."""

from __future__ import annotations

import random
from enum import StrEnum
from typing import TYPE_CHECKING

from cribbot.core.errors import ActionTimeout
from cribbot.core.games.base import UNPICKED, Game, Picked, Unpicked, timed_out
from cribbot.core.render import Button, ButtonStyle, Color, MessageContent, bold, coins
from cribbot.models.outcome import GameOutcome, OutcomeKind

if TYPE_CHECKING:
    from cribbot.core.session import GameContext

BASE = 0.25
RANDOM_SCALE = 1.5


class Side(StrEnum):
    HEADS = "heads"
    TAILS = "tails"


class CoinflipLogic:
    def __init__(self, rng: random.Random) -> None:
        self.rng = rng
        self.player: Unpicked | Picked[Side] = UNPICKED
        self.opponent: Unpicked | Picked[Side] = UNPICKED

    def pick(self, side: Side) -> None:
        self.player = Picked(side)
        self.opponent = Picked(self.rng.choice(list(Side)))

    @property
    def outcome(self) -> OutcomeKind | None:
        if not isinstance(self.player, Picked) or not isinstance(self.opponent, Picked):
            return None
        return OutcomeKind.WIN if self.player.value == self.opponent.value else OutcomeKind.LOSE


class Coinflip(Game):
    id = "coinflip"
    name = "Coin Flip"
    emoji = "🪙"
    description = "Flip a coin and call the side."

    async def play(self, ctx: GameContext) -> None:
        logic = CoinflipLogic(ctx.rng)
        await ctx.respond(self.render(ctx, logic))

        try:
            side = await ctx.await_action(*Side)
        except ActionTimeout:
            outcome = timed_out(forfeit=True)
            ctx.resolve(outcome)
            await self.finish(ctx, self.render(ctx, logic, outcome), force=True)
            return

        logic.pick(Side(side))
        if logic.outcome == OutcomeKind.WIN:
            winnings = (
                ctx.winnings.set_base(BASE)
                .set_random(ctx.rng.random() * RANDOM_SCALE)
                .calculate(ctx.bet)
            )
            outcome = GameOutcome(kind=OutcomeKind.WIN, payoff=winnings.final)
        else:
            outcome = GameOutcome(kind=OutcomeKind.LOSE)
        ctx.resolve(outcome)
        await self.finish(ctx, self.render(ctx, logic, outcome))

    def render(
        self, ctx: GameContext, logic: CoinflipLogic, outcome: GameOutcome | None = None
    ) -> MessageContent:
        wallet = bold(coins(ctx.player.wallet.value))
        if outcome is None:
            description = f"You bet {bold(coins(ctx.bet))}. Call it in the air!"
            color = Color.BLURPLE
        elif outcome.kind == OutcomeKind.OTHER:
            description = f"{outcome.reason} You lost your bet.\nYou now have {wallet}."
            color = Color.RED
        elif outcome.kind == OutcomeKind.WIN:
            description = (
                f"It landed on {bold(self._side(logic.opponent))}! "
                f"You won {bold(coins(outcome.payoff or 0))}.\nYou now have {wallet}."
            )
            color = Color.GREEN
        else:
            description = (
                f"It landed on {bold(self._side(logic.opponent))}. "
                f"You lost {bold(coins(ctx.bet))}.\nYou now have {wallet}."
            )
            color = Color.RED

        rows = [
            [
                Button(
                    custom_id=ctx.ids.create(side),
                    label=side.title(),
                    style=self._style(logic, side, outcome),
                    disabled=outcome is not None,
                )
                for side in Side
            ]
        ]
        return MessageContent(embeds=[self.embed(ctx, description, color)], rows=rows)

    @staticmethod
    def _side(pick: Unpicked | Picked[Side]) -> str:
        return pick.value.title() if isinstance(pick, Picked) else "?"

    @staticmethod
    def _style(logic: CoinflipLogic, side: Side, outcome: GameOutcome | None) -> ButtonStyle:
        if outcome is None:
            return ButtonStyle.PRIMARY
        if logic.player == Picked(side):
            return ButtonStyle.SUCCESS if outcome.is_win else ButtonStyle.DANGER
        return ButtonStyle.SECONDARY
