"""Party document: a small group of players sharing a multiplier bonus."""

from __future__ import annotations

from pydantic import BaseModel, Field

from cribbot.models.constants import PARTY_MULTIPLIER_LIMIT, PARTY_SIZE_LIMIT


class PartyMember(BaseModel):
    id: str
    coins: int = 0
    multiplier: int = 0


class Party(BaseModel):
    id: str
    owner_id: str
    name: str = ""
    prestige: int = 0
    members: list[PartyMember] = Field(default_factory=list)

    @property
    def multiplier(self) -> int:
        """Sum of member contributions, capped at the party limit."""
        return min(sum(m.multiplier for m in self.members), PARTY_MULTIPLIER_LIMIT)

    @property
    def is_full(self) -> bool:
        return len(self.members) >= PARTY_SIZE_LIMIT

    def get_member(self, member_id: str) -> PartyMember | None:
        return next((m for m in self.members if m.id == member_id), None)

    def add_member(self, member_id: str, multiplier: int = 0) -> PartyMember:
        member = self.get_member(member_id)
        if member is None:
            member = PartyMember(id=member_id, multiplier=multiplier)
            self.members.append(member)
        return member
