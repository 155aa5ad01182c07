"""Slot machine: three reels, pay out on two or three of a kind."""

from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cribbot.core.errors import ActionTimeout
from cribbot.core.games.base import Game, timed_out
from cribbot.core.render import Button, ButtonStyle, Color, MessageContent, bold, code, coins
from cribbot.models.outcome import GameOutcome, OutcomeKind

if TYPE_CHECKING:
    from cribbot.core.session import GameContext

REELS = 3
SPIN = "spin"


@dataclass(frozen=True)
class SlotEmoji:
    emoji: str
    jackpot: int
    win: int


SLOT_EMOJIS: tuple[SlotEmoji, ...] = (
    SlotEmoji("🔥", jackpot=100, win=10),
    SlotEmoji("🐉", jackpot=90, win=9),
    SlotEmoji("🌟", jackpot=80, win=8),
    SlotEmoji("⭐", jackpot=70, win=7),
    SlotEmoji("💍", jackpot=40, win=4),
    SlotEmoji("💎", jackpot=30, win=3),
    SlotEmoji("😎", jackpot=20, win=2),
    SlotEmoji("🤡", jackpot=10, win=1),
)


class SlotMachineLogic:
    def __init__(self, rng: random.Random, emojis: tuple[SlotEmoji, ...] = SLOT_EMOJIS) -> None:
        # Drawn with replacement, so repeats are possible.
        self.slots: list[SlotEmoji] = [rng.choice(emojis) for _ in range(REELS)]
        self.revealed = False

    @property
    def common(self) -> list[SlotEmoji]:
        """Reels whose emoji shows up at least twice."""
        counts = Counter(self.slots)
        return [slot for slot in self.slots if counts[slot] >= 2]

    @property
    def outcome(self) -> OutcomeKind:
        matches = len(self.common)
        if matches == REELS:
            return OutcomeKind.JACKPOT
        if matches == 2:
            return OutcomeKind.WIN
        return OutcomeKind.LOSE

    @property
    def multiplier(self) -> int:
        common = self.common
        if not common:
            return 0
        return common[0].jackpot if self.outcome == OutcomeKind.JACKPOT else common[0].win

    def reveal(self) -> None:
        self.revealed = True


class SlotMachine(Game):
    id = "slotmachine"
    name = "Slot Machine"
    emoji = "🎰"
    description = "Spin for win!"

    async def play(self, ctx: GameContext) -> None:
        machine = SlotMachineLogic(ctx.rng)
        await ctx.respond(self.render(ctx, machine))

        try:
            await ctx.await_action(SPIN)
        except ActionTimeout:
            outcome = timed_out(forfeit=False)
            ctx.resolve(outcome)
            await self.finish(ctx, self.render(ctx, machine, outcome), force=True)
            return

        machine.reveal()
        kind = machine.outcome
        if kind == OutcomeKind.LOSE:
            outcome = GameOutcome(kind=kind)
        else:
            winnings = ctx.winnings.set_base(machine.multiplier).set_random(0).calculate(ctx.bet)
            outcome = GameOutcome(kind=kind, payoff=winnings.final)
        ctx.resolve(outcome)
        await self.finish(ctx, self.render(ctx, machine, outcome))

    def render(
        self, ctx: GameContext, machine: SlotMachineLogic, outcome: GameOutcome | None = None
    ) -> MessageContent:
        reels = "    ".join(slot.emoji if machine.revealed else "❓" for slot in machine.slots)
        lines = [f"{bold('>')} {reels} {bold('<')}", ""]
        wallet = bold(coins(ctx.player.wallet.value))

        if outcome is None:
            lines.append(f"You bet {bold(coins(ctx.bet))}. Pull the lever!")
            color = Color.BLURPLE
        elif outcome.kind == OutcomeKind.OTHER:
            lines.append(f"{outcome.reason} You are keeping your money.")
            lines.append(f"You have {wallet} still.")
            color = Color.DARK
        elif outcome.is_win:
            lines.append(f"{bold('Won')} {coins(outcome.payoff or 0)}")
            lines.append(f"{bold('Multiplier')} {code(f'{machine.multiplier:,}x')}")
            lines.append(f"You now have {wallet}.")
            color = Color.GOLD if outcome.kind == OutcomeKind.JACKPOT else Color.GREEN
        else:
            lines.append(f"{bold('Lost')} {coins(ctx.bet)}")
            lines.append(f"You now have {wallet}.")
            color = Color.RED

        rows = [
            [
                Button(
                    custom_id=ctx.ids.create(SPIN),
                    label="Spin",
                    style=ButtonStyle.SECONDARY if outcome is not None else ButtonStyle.PRIMARY,
                    disabled=outcome is not None,
                )
            ]
        ]
        return MessageContent(embeds=[self.embed(ctx, "\n".join(lines), color)], rows=rows)
