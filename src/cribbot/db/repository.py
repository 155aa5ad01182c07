"""Repository pattern for database access.

``Repository`` wraps one SQLAlchemy async session. ``EconomyStore`` opens
a short session per call and is what game sessions and Discord commands
hold on to.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Collection
from enum import StrEnum

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from cribbot.db.engine import get_session
from cribbot.db.models import PartyRow, PlayerRow
from cribbot.models.party import Party
from cribbot.models.player import PartyMembership, PartyRole, PlayerEconomy

logger = logging.getLogger(__name__)


class LeaderboardKind(StrEnum):
    WALLET = "wallet"
    BANK = "bank"
    STARS = "stars"


class Repository:
    """Async repository for all database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # --- Players ---

    async def get_player(self, player_id: str) -> PlayerEconomy | None:
        row = await self.session.get(PlayerRow, player_id)
        if row is None:
            return None
        return PlayerEconomy.model_validate(row.data)

    async def fetch_player(self, player_id: str) -> PlayerEconomy:
        """Get a player, creating the default document on first contact."""
        player = await self.get_player(player_id)
        if player is None:
            player = PlayerEconomy(id=player_id)
            await self.save_player(player)
            logger.info("player_created player=%s", player_id)
        return player

    async def save_player(self, player: PlayerEconomy) -> PlayerRow:
        row = await self.session.get(PlayerRow, player.id)
        if row is None:
            row = PlayerRow(id=player.id)
            self.session.add(row)
        row.data = player.model_dump(mode="json")
        row.wallet = player.wallet.value
        row.bank = player.bank.value
        row.stars = player.energy.value
        await self.session.flush()
        return row

    async def top_players(
        self, kind: LeaderboardKind = LeaderboardKind.WALLET, limit: int = 10
    ) -> list[PlayerEconomy]:
        column = {
            LeaderboardKind.WALLET: PlayerRow.wallet,
            LeaderboardKind.BANK: PlayerRow.bank,
            LeaderboardKind.STARS: PlayerRow.stars,
        }[kind]
        stmt = select(PlayerRow).order_by(column.desc(), PlayerRow.id).limit(limit)
        result = await self.session.execute(stmt)
        return [PlayerEconomy.model_validate(row.data) for row in result.scalars().all()]

    # --- Parties ---

    async def create_party(self, owner: PlayerEconomy, name: str = "") -> Party:
        party = Party(id=str(uuid.uuid4()), owner_id=owner.id, name=name)
        party.add_member(owner.id)
        owner.party.append(PartyMembership(id=party.id, role=PartyRole.OWNER))
        await self.save_party(party)
        await self.save_player(owner)
        return party

    async def get_party(self, party_id: str) -> Party | None:
        row = await self.session.get(PartyRow, party_id)
        if row is None:
            return None
        return Party.model_validate(row.data)

    async def get_parties(self, party_ids: Collection[str]) -> list[Party]:
        if not party_ids:
            return []
        stmt = select(PartyRow).where(PartyRow.id.in_(list(party_ids)))
        result = await self.session.execute(stmt)
        return [Party.model_validate(row.data) for row in result.scalars().all()]

    async def save_party(self, party: Party) -> PartyRow:
        row = await self.session.get(PartyRow, party.id)
        if row is None:
            row = PartyRow(id=party.id, owner_id=party.owner_id)
            self.session.add(row)
        row.data = party.model_dump(mode="json")
        await self.session.flush()
        return row


class EconomyStore:
    """Engine-backed store: one committed session per call."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    async def fetch_player(self, player_id: str) -> PlayerEconomy:
        async with get_session(self.engine) as session:
            return await Repository(session).fetch_player(player_id)

    async def save_player(self, player: PlayerEconomy) -> None:
        async with get_session(self.engine) as session:
            await Repository(session).save_player(player)

    async def save_players(self, *players: PlayerEconomy) -> None:
        """Save several documents in one transaction (e.g. both sides of a share)."""
        async with get_session(self.engine) as session:
            repo = Repository(session)
            for player in players:
                await repo.save_player(player)

    async def get_parties(self, party_ids: Collection[str]) -> list[Party]:
        async with get_session(self.engine) as session:
            return await Repository(session).get_parties(party_ids)

    async def top_players(
        self, kind: LeaderboardKind = LeaderboardKind.WALLET, limit: int = 10
    ) -> list[PlayerEconomy]:
        async with get_session(self.engine) as session:
            return await Repository(session).top_players(kind, limit)
