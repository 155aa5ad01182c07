"""Discord bot helpers: per-user session locks, DB session context."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Iterator
from contextlib import asynccontextmanager, contextmanager

from sqlalchemy.ext.asyncio import AsyncEngine

from cribbot.db.engine import get_session
from cribbot.db.repository import Repository
from cribbot.models.party import Party

logger = logging.getLogger(__name__)


class PlayerBusy(Exception):
    """Raised when a user starts a command while one of theirs is still running."""


class PartyNotFound(Exception):
    """Raised when a user is not in any party."""


class ActiveSessions:
    """Tracks users with a running ``/play`` session or money command."""

    def __init__(self) -> None:
        self._users: set[int] = set()

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._users

    @contextmanager
    def claim(self, user_id: int) -> Iterator[None]:
        if user_id in self._users:
            raise PlayerBusy("You already have a command running. Finish it first.")
        self._users.add(user_id)
        try:
            yield
        finally:
            self._users.discard(user_id)


@asynccontextmanager
async def db_session(
    engine: AsyncEngine,
) -> AsyncGenerator[Repository, None]:
    """Yield a Repository bound to a fresh async session."""
    async with get_session(engine) as session:
        yield Repository(session)


async def get_player_party(engine: AsyncEngine, player_id: str) -> Party:
    """Return the first active party of a player.

    Raises PartyNotFound if they are not in one.
    """
    async with db_session(engine) as repo:
        player = await repo.fetch_player(player_id)
        for party_id in player.party_ids:
            party = await repo.get_party(party_id)
            if party is not None:
                return party
    raise PartyNotFound("You're not in a party. Create one with `/party create`.")
