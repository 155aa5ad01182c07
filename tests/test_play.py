"""Tests for the /play flow: picker, energy prompt and session start."""

from conftest import NOW, FakeResponder, FakeStore, ScriptedRandom, make_player
from cribbot.core.games.coinflip import Side
from cribbot.core.play import choose_game, run_play
from cribbot.core.session import ComponentIds
from cribbot.models.party import Party
from cribbot.models.player import PartyMembership, PartyRole

PICK_COINFLIP = ("pick", ("coinflip",))


async def play(player, script, store=None, rng=None):
    responder = FakeResponder(script)
    ctx = await run_play(
        player=player,
        responder=responder,
        store=store or FakeStore(),
        rng=rng or ScriptedRandom(choices=[Side.HEADS], randoms=[0.5]),
        clock=lambda: NOW,
        interactions_limit=1,
        ids=ComponentIds("sess"),
    )
    return ctx, responder


class TestPicker:
    async def test_pick_then_proceed(self):
        responder = FakeResponder([PICK_COINFLIP, "proceed"])
        game = await choose_game(responder, ComponentIds("sess"))
        assert game.id == "coinflip"
        assert "Coin Flip" in responder.edits[0].embeds[0].description
        assert all(c.disabled for row in responder.edits[-1].rows for c in row)

    async def test_proceed_without_a_game_is_ignored(self):
        responder = FakeResponder(["proceed", "cancel"])
        assert await choose_game(responder, ComponentIds("sess")) is None
        assert len(responder.requested) == 2

    async def test_unknown_game_keeps_previous_choice(self):
        responder = FakeResponder([PICK_COINFLIP, ("pick", ("poker",)), "proceed"])
        game = await choose_game(responder, ComponentIds("sess"))
        assert game.id == "coinflip"

    async def test_cancel(self):
        responder = FakeResponder(["cancel"])
        assert await choose_game(responder, ComponentIds("sess")) is None

    async def test_timeout(self):
        responder = FakeResponder()
        assert await choose_game(responder, ComponentIds("sess"), timeout=1) is None
        assert "didn't pick a game" in responder.sent[-1].embeds[0].description


class TestRunPlay:
    async def test_full_session(self):
        store = FakeStore()
        ctx, responder = await play(make_player(), [PICK_COINFLIP, "proceed", "heads"], store)
        assert ctx.game.id == "coinflip"
        assert ctx.is_terminated
        assert ctx.player.wallet.value == 11_000
        assert store.saves == 1
        # Picker components belong to round 0, game buttons to round 1.
        assert responder.requested[0][0].startswith("sess:0:")
        assert responder.requested[-1][0].startswith("sess:1:")

    async def test_full_wallet_is_refused(self):
        ctx, responder = await play(make_player(wallet=100_000_000), [])
        assert ctx is None
        assert "wallet is full" in responder.sent[0].embeds[0].description

    async def test_bet_above_wallet_is_refused(self):
        ctx, responder = await play(make_player(wallet=500, bet=1_000), [])
        assert ctx is None
        assert "at least" in responder.sent[0].embeds[0].description
        assert responder.requested == []

    async def test_cancelled_picker_starts_nothing(self):
        ctx, _ = await play(make_player(), ["cancel"])
        assert ctx is None

    async def test_party_multiplier_is_applied(self):
        player = make_player()
        player.party = [PartyMembership(id="p", role=PartyRole.MEMBER)]
        party = Party(id="p", owner_id="2")
        party.add_member("2", multiplier=50)
        ctx, _ = await play(
            player, [PICK_COINFLIP, "proceed", "heads"], store=FakeStore([party])
        )
        assert ctx.multiplier == 50
        # 1,000 base win plus 50%
        assert ctx.outcome.payoff == 1_500


class TestEnergyPrompt:
    async def test_use_energy_then_play(self):
        store = FakeStore()
        player = make_player(stars=1_000, energy_minutes=-1)
        ctx, responder = await play(player, [PICK_COINFLIP, "proceed", "use", "heads"], store)
        assert ctx is not None
        assert player.energy.expire > NOW
        # 900 after the recharge, then a win adds stars back.
        assert player.energy.value == 910
        assert store.saves == 2
        assert any(frame.embeds[0].title == "Energy" for frame in responder.sent)

    async def test_cancel_keeps_energy(self):
        player = make_player(stars=1_000, energy_minutes=-1)
        ctx, _ = await play(player, [PICK_COINFLIP, "proceed", "cancel"])
        assert ctx is None
        assert player.energy.value == 1_000

    async def test_prompt_timeout(self):
        player = make_player(stars=1_000, energy_minutes=-1)
        ctx, responder = await play(player, [PICK_COINFLIP, "proceed"])
        assert ctx is None
        assert all(c.disabled for c in responder.edits[-1].rows[0])

    async def test_no_energy_left(self):
        player = make_player(stars=50, energy_minutes=-1)
        ctx, responder = await play(player, [PICK_COINFLIP, "proceed"])
        assert ctx is None
        assert "don't have any left" in responder.sent[-1].embeds[0].description
