"""Game contract shared by every game."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Generic, TypeVar

from cribbot.core.render import Color, Embed, MessageContent
from cribbot.models.constants import GAME_ACTION_TIMEOUT_SECONDS
from cribbot.models.outcome import GameOutcome, OutcomeKind

if TYPE_CHECKING:
    from cribbot.core.session import GameContext

T = TypeVar("T")


@dataclass(frozen=True)
class Unpicked:
    """No choice made yet."""


@dataclass(frozen=True)
class Picked(Generic[T]):
    value: T


UNPICKED = Unpicked()


class Game(ABC):
    """A playable game.

    ``play`` runs exactly one round: render, wait for input, resolve the
    outcome on the context, save, then hand control back with
    ``ctx.end()``.
    """

    id: ClassVar[str]
    name: ClassVar[str]
    emoji: ClassVar[str]
    description: ClassVar[str]
    action_timeout: ClassVar[float] = GAME_ACTION_TIMEOUT_SECONDS

    @abstractmethod
    async def play(self, ctx: GameContext) -> None: ...

    def embed(self, ctx: GameContext, description: str, color: Color | None = None) -> Embed:
        """Common frame: game name as author, bet in the footer."""
        return Embed(
            author=f"{self.emoji} {self.name}",
            description=description,
            color=color,
            footer=f"Bet: {ctx.bet:,} | Round {ctx.interactions}",
        )

    async def finish(self, ctx: GameContext, content: MessageContent, force: bool = False) -> None:
        """Persist the resolved round, show its final frame and hand over to ``ctx.end``."""
        await ctx.save()
        await ctx.edit(content)
        await ctx.end(force=force)


def timed_out(forfeit: bool) -> GameOutcome:
    return GameOutcome(
        kind=OutcomeKind.OTHER, reason="You didn't respond in time.", forfeit=forfeit
    )
