"""Shared test fixtures."""

from __future__ import annotations

import random
from collections import deque
from collections.abc import Collection, Iterable
from datetime import UTC, datetime, timedelta

import pytest

from cribbot.config import Settings
from cribbot.core.errors import ActionTimeout
from cribbot.core.render import Action, MessageContent
from cribbot.models.party import Party
from cribbot.models.player import PlayerEconomy

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def settings() -> Settings:
    """Test settings with defaults."""
    return Settings(cribbot_env="development", database_url="sqlite+aiosqlite:///:memory:")


class ScriptedRandom(random.Random):
    """A seeded Random whose next draws can be forced per method.

    Queued values are consumed first; once a queue is empty the seeded
    generator takes over.
    """

    def __init__(
        self,
        *,
        randoms: Iterable[float] = (),
        ints: Iterable[int] = (),
        choices: Iterable[object] = (),
        seed: int = 1234,
    ) -> None:
        super().__init__(seed)
        self.randoms = deque(randoms)
        self.ints = deque(ints)
        self.choices = deque(choices)

    def random(self) -> float:
        return self.randoms.popleft() if self.randoms else super().random()

    def getrandbits(self, k: int) -> int:
        # Keeps integer draws off random(), so they never eat queued floats.
        return super().getrandbits(k)

    def randint(self, a: int, b: int) -> int:
        return self.ints.popleft() if self.ints else super().randint(a, b)

    def choice(self, seq):  # noqa: ANN001, ANN201
        return self.choices.popleft() if self.choices else super().choice(seq)


class FakeResponder:
    """Records frames and replays scripted button presses by name.

    Each scripted entry is a component name (``"hit"``) or a ``(name,
    values)`` pair for selects. An empty script behaves like a player who
    walked away: ``await_action`` raises ``ActionTimeout``.
    """

    def __init__(self, script: Iterable[str | tuple[str, tuple[str, ...]]] = ()) -> None:
        self.script = deque(script)
        self.sent: list[MessageContent] = []
        self.edits: list[MessageContent] = []
        self.requested: list[list[str]] = []

    async def send(self, content: MessageContent) -> None:
        self.sent.append(content)

    async def edit(self, content: MessageContent) -> None:
        self.edits.append(content)

    async def await_action(self, custom_ids: Collection[str], timeout: float) -> Action:
        self.requested.append(list(custom_ids))
        if not self.script:
            raise ActionTimeout(f"No action within {timeout:g}s")
        entry = self.script.popleft()
        name, values = (entry, ()) if isinstance(entry, str) else entry
        for custom_id in custom_ids:
            if custom_id.rsplit(":", 1)[-1] == name:
                return Action(custom_id=custom_id, values=tuple(values))
        raise AssertionError(f"{name!r} is not one of {sorted(custom_ids)}")

    @property
    def last(self) -> MessageContent:
        """The most recent frame, sent or edited."""
        frames = [*self.sent, *self.edits]
        return frames[-1]

    def descriptions(self) -> list[str]:
        return [
            embed.description or ""
            for frame in [*self.sent, *self.edits]
            for embed in frame.embeds
        ]


class FakeStore:
    """In-memory ``PlayerStore``."""

    def __init__(self, parties: Iterable[Party] = ()) -> None:
        self.players: dict[str, PlayerEconomy] = {}
        self.parties = {party.id: party for party in parties}
        self.saves = 0

    async def fetch_player(self, player_id: str) -> PlayerEconomy:
        return self.players.setdefault(player_id, PlayerEconomy(id=player_id))

    async def save_player(self, player: PlayerEconomy) -> None:
        self.saves += 1
        self.players[player.id] = player

    async def get_parties(self, party_ids: Collection[str]) -> list[Party]:
        return [self.parties[pid] for pid in party_ids if pid in self.parties]


def make_player(
    player_id: str = "1001",
    *,
    wallet: int = 10_000,
    bet: int = 1_000,
    bank: int = 0,
    stars: int = 1_000,
    energy_minutes: int = 10,
) -> PlayerEconomy:
    """A player whose energy is active for ``energy_minutes`` after NOW."""
    player = PlayerEconomy(id=player_id)
    player.wallet.set_value(wallet)
    player.bet.set_value(bet)
    player.bank.set_value(bank)
    player.energy.set_value(stars)
    player.energy.set_expire(NOW + timedelta(minutes=energy_minutes))
    return player


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def player() -> PlayerEconomy:
    return make_player()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()
