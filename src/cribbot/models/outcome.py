"""Round results produced by games and applied by the session."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class OutcomeKind(StrEnum):
    WIN = "win"
    LOSE = "lose"
    TIE = "tie"
    JACKPOT = "jackpot"
    OTHER = "other"


class GameOutcome(BaseModel):
    """How a round ended.

    ``payoff`` is the final (multiplied, rounded) winnings for WIN and
    JACKPOT. ``forfeit`` marks an OTHER outcome that still costs the bet,
    e.g. a timeout in coinflip or pressing "forfeit" in blackjack.
    """

    kind: OutcomeKind
    reason: str = ""
    payoff: int | None = None
    forfeit: bool = False

    @property
    def is_win(self) -> bool:
        return self.kind in (OutcomeKind.WIN, OutcomeKind.JACKPOT)
