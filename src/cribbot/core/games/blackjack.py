"""Blackjack against the house dealer.

Hands never hold the same card twice. The opening two cards of each hand
are re-drawn while they would total 21 or more, so nobody wins or busts
before the first decision.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from cribbot.core.errors import ActionTimeout
from cribbot.core.games.base import Game, timed_out
from cribbot.core.render import (
    Button,
    ButtonStyle,
    Color,
    Field,
    MessageContent,
    bold,
    code,
    coins,
)
from cribbot.models.outcome import GameOutcome, OutcomeKind

if TYPE_CHECKING:
    from cribbot.core.session import GameContext

logger = logging.getLogger(__name__)

SUITS = ("♠", "♥", "♦", "♣")
FACES: tuple[str, ...] = ("A", "J", "Q", "K", *(str(n) for n in range(2, 11)))

BLACKJACK = 21
DEALER_STANDS_AT = 17
FACE_VALUE = 10
ACE_LOW = 1
ACE_HIGH = 11
HAND_LIMIT = 5
BASE = 0.4


class Control(StrEnum):
    HIT = "hit"
    STAND = "stand"
    FORFEIT = "forfeit"


@dataclass(frozen=True)
class Card:
    suit: str
    face: str

    @property
    def base_value(self) -> int:
        if self.face == "A":
            return ACE_HIGH
        if self.face in ("J", "Q", "K"):
            return FACE_VALUE
        return int(self.face)

    def __str__(self) -> str:
        return f"{self.suit} {self.face}"


def count_hand(cards: list[Card]) -> int:
    """Hand total with aces counted as 11, demoted to 1 one at a time while over 21."""
    total = sum(card.base_value for card in cards)
    aces = sum(1 for card in cards if card.face == "A")
    while total > BLACKJACK and aces:
        total -= ACE_HIGH - ACE_LOW
        aces -= 1
    return total


@dataclass
class Hand:
    cards: list[Card] = field(default_factory=list)
    stood: bool = False

    @property
    def total(self) -> int:
        return count_hand(self.cards)

    def deal(self, rng: random.Random, initial: bool = False) -> Card:
        while True:
            card = Card(suit=rng.choice(SUITS), face=rng.choice(FACES))
            if card in self.cards:
                continue
            if initial and count_hand([*self.cards, card]) >= BLACKJACK:
                continue
            self.cards.append(card)
            return card


class BlackjackLogic:
    """Pure blackjack rules. The outcome stays ``None`` until the hand is decided."""

    def __init__(self, rng: random.Random) -> None:
        self.rng = rng
        self.player = Hand()
        self.dealer = Hand()
        self.outcome: GameOutcome | None = None

    @property
    def stood(self) -> bool:
        return self.player.stood

    def start(self) -> BlackjackLogic:
        for _ in range(2):
            self.player.deal(self.rng, initial=True)
            self.dealer.deal(self.rng, initial=True)
        return self

    def hit(self) -> GameOutcome | None:
        self.player.deal(self.rng)
        return self.evaluate()

    def stand(self) -> GameOutcome | None:
        self.player.stood = True
        while self.dealer.total < DEALER_STANDS_AT:
            self.dealer.deal(self.rng)
        return self.evaluate()

    def set_outcome(self, kind: OutcomeKind, reason: str, forfeit: bool = False) -> GameOutcome:
        self.outcome = GameOutcome(kind=kind, reason=reason, forfeit=forfeit)
        return self.outcome

    def evaluate(self) -> GameOutcome | None:
        player = self.player.total
        dealer = self.dealer.total

        if player == BLACKJACK:
            return self.set_outcome(OutcomeKind.WIN, "You got to 21.")
        if dealer == BLACKJACK:
            return self.set_outcome(OutcomeKind.LOSE, "The dealer got to 21 before you.")
        if player <= BLACKJACK and len(self.player.cards) == HAND_LIMIT:
            return self.set_outcome(OutcomeKind.WIN, "You took 5 cards without going over 21.")
        if dealer <= BLACKJACK and len(self.dealer.cards) == HAND_LIMIT:
            return self.set_outcome(
                OutcomeKind.LOSE, "The dealer took 5 cards without going over 21."
            )
        if player > BLACKJACK:
            return self.set_outcome(OutcomeKind.LOSE, "You went over 21 and busted.")
        if dealer > BLACKJACK:
            return self.set_outcome(OutcomeKind.WIN, "The dealer went over 21 and busted.")
        if self.stood and player > dealer:
            return self.set_outcome(
                OutcomeKind.WIN,
                f"You stood with a higher score ({code(player)}) than the dealer ({code(dealer)})",
            )
        if self.stood and dealer > player:
            return self.set_outcome(
                OutcomeKind.LOSE,
                f"You stood with a lower score ({code(player)}) than the dealer ({code(dealer)})",
            )
        if self.stood:
            return self.set_outcome(OutcomeKind.TIE, "You tied with the dealer.")
        return None


_HEADLINES = {
    OutcomeKind.WIN: ("You win!", Color.GREEN),
    OutcomeKind.LOSE: ("You lost ):", Color.RED),
    OutcomeKind.TIE: ("You tied.", Color.YELLOW),
    OutcomeKind.OTHER: ("", Color.BLURPLE),
}


class Blackjack(Game):
    id = "blackjack"
    name = "Blackjack"
    emoji = "🃏"
    description = "Play a game of blackjack!"

    async def play(self, ctx: GameContext) -> None:
        logic = BlackjackLogic(ctx.rng).start()
        await ctx.respond(self.render(ctx, logic))

        while logic.outcome is None:
            try:
                control = await ctx.await_action(*Control)
            except ActionTimeout:
                logic.outcome = timed_out(forfeit=False)
                ctx.resolve(logic.outcome)
                content = self.render(ctx, logic, extra="You keep your coins this time.")
                await self.finish(ctx, content, force=True)
                return

            logger.debug("blackjack_control control=%s player=%s", control, ctx.player.id)
            if control == Control.HIT:
                logic.hit()
            elif control == Control.STAND:
                logic.stand()
            else:
                logic.set_outcome(OutcomeKind.OTHER, "You ended the game.", forfeit=True)

            if logic.outcome is None:
                await ctx.edit(self.render(ctx, logic))

        outcome = logic.outcome
        if outcome.kind == OutcomeKind.WIN:
            winnings = ctx.winnings.set_base(BASE).set_random(None).calculate(ctx.bet)
            outcome = logic.outcome = outcome.model_copy(update={"payoff": winnings.final})
        # Resolve before rendering so the summary shows the updated wallet.
        ctx.resolve(outcome)
        await self.finish(ctx, self.render(ctx, logic), force=outcome.forfeit)

    def render(
        self, ctx: GameContext, logic: BlackjackLogic, extra: str | None = None
    ) -> MessageContent:
        outcome = logic.outcome
        hide_dealer = outcome is None and not logic.stood

        def hand_field(label: str, hand: Hand, hide: bool) -> Field:
            cards = "  ".join(
                code("?" if hide and index > 0 else card) for index, card in enumerate(hand.cards)
            )
            total = code("?" if hide else hand.total)
            return Field(name=label, value=f"Cards - {bold(cards)}\nTotal - {total}", inline=True)

        if outcome is None:
            description, color = "", Color.BLURPLE
            footer_hint = "K, Q, J = 10  |  A = 1 OR 11"
        else:
            headline, color = _HEADLINES.get(outcome.kind, ("", Color.BLURPLE))
            description = bold(f"{headline} {outcome.reason}".strip())
            description += "\n" + (extra or self.summary(ctx, outcome))
            footer_hint = None

        embed = self.embed(ctx, description, color)
        if footer_hint:
            embed.footer = footer_hint
        embed.fields = [
            hand_field("Player", logic.player, False),
            hand_field("Dealer", logic.dealer, hide_dealer),
        ]
        finished = outcome is not None
        rows = [
            [
                Button(
                    custom_id=ctx.ids.create(control),
                    label=control.title(),
                    style=ButtonStyle.SECONDARY if finished else ButtonStyle.PRIMARY,
                    disabled=finished,
                )
                for control in Control
            ]
        ]
        return MessageContent(embeds=[embed], rows=rows)

    @staticmethod
    def summary(ctx: GameContext, outcome: GameOutcome) -> str:
        wallet = coins(ctx.player.wallet.value)
        if outcome.kind == OutcomeKind.WIN:
            return f"You won {bold(coins(outcome.payoff or 0))}. You now have {bold(wallet)}."
        if outcome.kind == OutcomeKind.LOSE:
            return f"You lost {bold(coins(ctx.bet))}. You now have {bold(wallet)}."
        if outcome.kind == OutcomeKind.TIE:
            return f"Your wallet hasn't changed! You have {bold(wallet)} still."
        return "The dealer is keeping your money to deal with your nonsense."
