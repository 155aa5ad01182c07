"""Game session lifecycle.

A ``GameContext`` wraps one ``/play`` invocation: the chosen game, the
player document, the transport (``Responder``) and persistence
(``PlayerStore``) collaborators, an injected RNG and clock.

Lifecycle of a round::

    IDLE --play()--> AWAITING_ACTION --resolve()--> RESOLVED
    RESOLVED --end()--> IDLE (guards pass, next round)
    RESOLVED --end()--> TERMINATED (a guard fails or the round was forced)

``resolve`` applies the economy mutation for an outcome at most once per
round; anything arriving after that is ignored.
"""

from __future__ import annotations

import logging
import random
import uuid
from collections.abc import Callable, Collection
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from cribbot.core.errors import GuardFailure
from cribbot.core.render import Action, MessageContent, game_ended
from cribbot.core.winnings import WinningsCalculator
from cribbot.models.constants import SESSION_INTERACTIONS_LIMIT, STAR_GAIN
from cribbot.models.outcome import GameOutcome, OutcomeKind

if TYPE_CHECKING:
    from cribbot.core.games.base import Game
    from cribbot.models.party import Party
    from cribbot.models.player import GameStats, PlayerEconomy

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class Responder(Protocol):
    """Transport used by games to show content and wait for button presses."""

    async def send(self, content: MessageContent) -> None: ...

    async def edit(self, content: MessageContent) -> None: ...

    async def await_action(self, custom_ids: Collection[str], timeout: float) -> Action:
        """Return the next press of one of ``custom_ids``; raise ``ActionTimeout``."""
        ...


class PlayerStore(Protocol):
    """Persistence used by sessions and commands."""

    async def fetch_player(self, player_id: str) -> PlayerEconomy: ...

    async def save_player(self, player: PlayerEconomy) -> None: ...

    async def get_parties(self, party_ids: Collection[str]) -> list[Party]: ...


class SessionState(StrEnum):
    IDLE = "idle"
    AWAITING_ACTION = "awaiting_action"
    RESOLVED = "resolved"
    TERMINATED = "terminated"


class ComponentIds:
    """Custom ids unique to one session and one round.

    Buttons left over from an earlier round carry a different round number,
    so a late press can never be mistaken for an action in the current one.
    """

    def __init__(self, session_id: str | None = None) -> None:
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.round = 0

    def create(self, name: str) -> str:
        return f"{self.session_id}:{self.round}:{name}"

    def name_of(self, custom_id: str) -> str:
        return custom_id.rsplit(":", 1)[-1]

    def next_round(self) -> None:
        self.round += 1


class GameContext:
    """One player's running session of one game."""

    def __init__(
        self,
        *,
        game: Game,
        player: PlayerEconomy,
        responder: Responder,
        store: PlayerStore,
        rng: random.Random | None = None,
        clock: Clock = utc_now,
        multiplier: int = 0,
        interactions_limit: int = SESSION_INTERACTIONS_LIMIT,
        ids: ComponentIds | None = None,
    ) -> None:
        self.game = game
        self.player = player
        self.responder = responder
        self.store = store
        self.rng = rng or random.Random()
        self.clock = clock
        self.multiplier = multiplier
        self.interactions_limit = interactions_limit
        self.ids = ids or ComponentIds()
        self.winnings = WinningsCalculator(multiplier=multiplier, rng=self.rng)
        self.interactions = 1
        self.state = SessionState.IDLE
        self.outcome: GameOutcome | None = None

    # --- Accessors ---

    @property
    def bet(self) -> int:
        return self.player.bet.value

    @property
    def stats(self) -> GameStats:
        return self.player.stats_for(self.game.id)

    @property
    def is_terminated(self) -> bool:
        return self.state == SessionState.TERMINATED

    # --- Transport ---

    async def respond(self, content: MessageContent) -> None:
        """Post the first frame of a round as a new message."""
        await self.responder.send(content)

    async def edit(self, content: MessageContent) -> None:
        await self.responder.edit(content)

    async def await_action(self, *names: str, timeout: float | None = None) -> str:
        """Wait for one of the named buttons of this round; return its name."""
        self.state = SessionState.AWAITING_ACTION
        action = await self.responder.await_action(
            [self.ids.create(name) for name in names],
            timeout if timeout is not None else self.game.action_timeout,
        )
        return self.ids.name_of(action.custom_id)

    # --- Lifecycle ---

    async def play(self) -> None:
        self.state = SessionState.IDLE
        self.outcome = None
        logger.debug(
            "game_round_started game=%s player=%s round=%d",
            self.game.id,
            self.player.id,
            self.interactions,
        )
        await self.game.play(self)

    def check(self, force: bool = False) -> None:
        """Raise ``GuardFailure`` if the session cannot start another round."""
        if force:
            raise GuardFailure("This session has ended.")
        if self.interactions >= self.interactions_limit:
            raise GuardFailure("You have reached the maximum interactions for this session.")
        if self.player.energy.is_expired(self.clock()):
            raise GuardFailure("Your energy just expired!")
        if self.player.bet.value > self.player.wallet.value:
            raise GuardFailure("You don't have enough coins to play anymore.")
        if self.player.wallet.is_max_value(self.player.upgrades.mastery):
            raise GuardFailure("Your wallet just reached its maximum capacity.")

    async def end(self, force: bool = False) -> None:
        """Finish the round: either start the next one or show why the session stopped."""
        try:
            self.check(force)
        except GuardFailure as exc:
            self.state = SessionState.TERMINATED
            logger.info(
                "game_session_ended game=%s player=%s rounds=%d reason=%s",
                self.game.id,
                self.player.id,
                self.interactions,
                exc,
            )
            await self.responder.send(game_ended(str(exc)))
            return
        self.interactions += 1
        self.ids.next_round()
        await self.play()

    # --- Economy ---

    def resolve(self, outcome: GameOutcome) -> bool:
        """Apply ``outcome`` to the player. Returns False if the round already resolved."""
        if self.outcome is not None:
            logger.debug("game_round_already_resolved game=%s", self.game.id)
            return False
        self.outcome = outcome
        self.state = SessionState.RESOLVED
        stats = self.stats
        player = self.player

        if outcome.is_win:
            payoff = outcome.payoff or 0
            player.wallet.add_value(payoff)
            player.bank.space.add_value(payoff)
            if not player.energy.is_max_stars():
                player.energy.add_value()
            stats.win(payoff)
        elif outcome.kind == OutcomeKind.LOSE:
            player.wallet.sub_value(self.bet)
            if player.energy.value >= STAR_GAIN:
                player.energy.sub_value()
            stats.lose(self.bet)
        elif outcome.kind == OutcomeKind.TIE:
            stats.tie(0)
        elif outcome.forfeit:
            player.wallet.sub_value(self.bet)

        stats.last_played = self.clock()
        logger.info(
            "game_round_resolved game=%s player=%s kind=%s payoff=%s",
            self.game.id,
            player.id,
            outcome.kind,
            outcome.payoff,
        )
        return True

    async def save(self) -> None:
        await self.store.save_player(self.player)
