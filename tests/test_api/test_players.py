"""API tests: health, player profiles, the leaderboard and the game catalogue."""

import pytest
from httpx import ASGITransport, AsyncClient

from conftest import make_player
from cribbot.config import Settings
from cribbot.db.engine import create_engine, create_tables
from cribbot.db.repository import EconomyStore
from cribbot.main import create_app


@pytest.fixture
async def app_and_engine():
    """Create test app with in-memory database."""
    settings = Settings(database_url="sqlite+aiosqlite:///:memory:")
    application = create_app(settings)
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(engine)
    application.state.engine = engine
    yield application, engine
    await engine.dispose()


@pytest.fixture
async def client(app_and_engine):
    application, _ = app_and_engine
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


class TestHealth:
    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "env": "development"}


class TestPlayers:
    async def test_unknown_player(self, client: AsyncClient):
        resp = await client.get("/api/players/nobody")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Player not found"

    async def test_player_profile(self, app_and_engine, client: AsyncClient):
        _, engine = app_and_engine
        player = make_player("55", wallet=20_000, bank=1_500, stars=1_250)
        player.stats_for("diceroll").win(800)
        await EconomyStore(engine).save_player(player)

        resp = await client.get("/api/players/55")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["wallet"] == 20_000
        assert data["net_worth"] == 21_500
        assert data["energy"] == 12
        assert data["max_bet"] == 100_000
        assert data["games"]["diceroll"]["wins"] == 1
        assert data["games"]["diceroll"]["profit"] == 800


class TestLeaderboard:
    async def test_ranks_by_kind(self, app_and_engine, client: AsyncClient):
        _, engine = app_and_engine
        store = EconomyStore(engine)
        await store.save_players(
            make_player("a", wallet=100, bank=5_000),
            make_player("b", wallet=9_000, bank=0),
        )

        resp = await client.get("/api/leaderboard")
        assert [row["id"] for row in resp.json()["data"]] == ["b", "a"]
        assert resp.json()["data"][0]["rank"] == 1

        resp = await client.get("/api/leaderboard", params={"kind": "bank", "limit": 1})
        assert [row["id"] for row in resp.json()["data"]] == ["a"]

    async def test_rejects_bad_query(self, client: AsyncClient):
        assert (await client.get("/api/leaderboard", params={"kind": "karma"})).status_code == 422
        assert (await client.get("/api/leaderboard", params={"limit": 0})).status_code == 422


class TestGames:
    async def test_catalogue(self, client: AsyncClient):
        resp = await client.get("/api/games")
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["data"]) == 6
        assert body["session_interactions"] == 60
        assert {"id": "coinflip", "name": "Coin Flip"}.items() <= body["data"][1].items()

    async def test_single_game(self, client: AsyncClient):
        resp = await client.get("/api/games/highlow")
        assert resp.json()["data"]["action_timeout"] == 10

    async def test_unknown_game(self, client: AsyncClient):
        resp = await client.get("/api/games/poker")
        assert resp.status_code == 404
