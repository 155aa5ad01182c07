"""Emoji pair: reveal two emojis and win if they match."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cribbot.core.errors import ActionTimeout
from cribbot.core.games.base import Game, timed_out
from cribbot.core.render import Button, ButtonStyle, Color, MessageContent, bold, code, coins
from cribbot.models.outcome import GameOutcome, OutcomeKind

if TYPE_CHECKING:
    from cribbot.core.session import GameContext

REVEAL = "reveal"


@dataclass(frozen=True)
class PairEmoji:
    emoji: str
    multiplier: float


PAIR_EMOJIS: tuple[PairEmoji, ...] = (
    PairEmoji("🍍", 1.5),
    PairEmoji("🍎", 1.2),
    PairEmoji("🥕", 1),
    PairEmoji("🍑", 0.8),
    PairEmoji("🍆", 0.5),
)


class EmojiPairLogic:
    def __init__(self, rng: random.Random, emojis: tuple[PairEmoji, ...] = PAIR_EMOJIS) -> None:
        self.pair: list[PairEmoji] = [rng.choice(emojis) for _ in range(2)]
        self.revealed = False

    @property
    def is_win(self) -> bool:
        return self.pair[0] == self.pair[1]

    @property
    def multiplier(self) -> float:
        return self.pair[0].multiplier

    def reveal(self) -> None:
        self.revealed = True


class EmojiPair(Game):
    id = "emojipair"
    name = "Emoji Pair"
    emoji = "🍍"
    description = "Just pair it!"

    async def play(self, ctx: GameContext) -> None:
        logic = EmojiPairLogic(ctx.rng)
        await ctx.respond(self.render(ctx, logic))

        try:
            await ctx.await_action(REVEAL)
        except ActionTimeout:
            outcome = timed_out(forfeit=False)
            ctx.resolve(outcome)
            await self.finish(ctx, self.render(ctx, logic, outcome), force=True)
            return

        logic.reveal()
        if logic.is_win:
            winnings = ctx.winnings.set_base(logic.multiplier).set_random(0).calculate(ctx.bet)
            outcome = GameOutcome(kind=OutcomeKind.WIN, payoff=winnings.final)
        else:
            outcome = GameOutcome(kind=OutcomeKind.LOSE)
        ctx.resolve(outcome)
        await self.finish(ctx, self.render(ctx, logic, outcome))

    def render(
        self, ctx: GameContext, logic: EmojiPairLogic, outcome: GameOutcome | None = None
    ) -> MessageContent:
        shown = " ".join(
            emoji.emoji if logic.revealed or index == 0 else "❓"
            for index, emoji in enumerate(logic.pair)
        )
        lines = [shown, ""]
        wallet = bold(coins(ctx.player.wallet.value))

        if outcome is None:
            lines.append(f"You bet {bold(coins(ctx.bet))}. Will the second one match?")
            color = Color.BLURPLE
        elif outcome.kind == OutcomeKind.OTHER:
            lines.append(f"{outcome.reason} You are keeping your money.")
            lines.append(f"You have {wallet} still.")
            color = Color.DARK
        elif outcome.is_win:
            lines.append(f"{bold('PAIRED!')} You won {bold(coins(outcome.payoff or 0))}.")
            lines.append(f"{bold('Multiplier')} {code(f'{logic.multiplier}x')}")
            lines.append(f"You now have {wallet}.")
            color = Color.GREEN
        else:
            lines.append(f"No pair. You lost {bold(coins(ctx.bet))}.")
            lines.append(f"You now have {wallet}.")
            color = Color.RED

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
        return MessageContent(embeds=[self.embed(ctx, "\n".join(lines), color)], rows=rows)
