"""Tests for the economy value models and player/party documents."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from conftest import NOW
from cribbot.models.constants import STAR_GAIN, STAR_LIMIT
from cribbot.models.outcome import GameOutcome, OutcomeKind
from cribbot.models.party import Party
from cribbot.models.player import GameStats, PartyMembership, PartyRole, PlayerEconomy
from cribbot.models.values import Bank, Bet, Energy, Multiplier, Upgrades, Wallet


class TestNumericValue:
    def test_fluent_mutators(self):
        wallet = Wallet().set_value(100).add_value(50).sub_value(30)
        assert wallet.value == 120

    def test_reset_restores_subtype_default(self):
        assert Wallet().set_value(5).reset_value().value == 10_000
        assert Bet().set_value(5).reset_value().value == 10_000
        assert Bank().set_value(5).reset_value().value == 0

    def test_subtraction_does_not_clamp(self):
        assert Wallet(value=10).sub_value(25).value == -15


class TestLimits:
    def test_wallet_limit_scales_with_mastery(self):
        assert Wallet.max_value(0) == 100_000_000
        assert Wallet.max_value(25) == 500_000_000

    def test_wallet_is_max_value(self):
        assert Wallet(value=100_000_000).is_max_value(0)
        assert not Wallet(value=99_999_999).is_max_value(0)
        assert not Wallet(value=100_000_000).is_max_value(1)

    def test_bet_limits(self):
        assert Bet.max_value(0) == 100_000
        assert Bet.min_value(0) == 100
        assert Bet.max_value(25) == 500_000
        assert Bet.min_value(25) == 500

    def test_multiplier_limit_scales_with_tier(self):
        assert Multiplier.max_value(0) == 0
        assert Multiplier.max_value(100) == 500

    def test_bank_capacity_is_space(self):
        bank = Bank(value=300)
        bank.space.set_value(1_000)
        assert bank.available_space == 700
        assert not bank.is_max_value()
        bank.add_value(700)
        assert bank.is_max_value()


class TestEnergy:
    def test_energy_is_derived_from_stars(self):
        energy = Energy(value=1_250)
        assert energy.energy == 12

    def test_star_gain_default_step(self):
        energy = Energy(value=100)
        assert energy.add_value().value == 100 + STAR_GAIN
        assert energy.sub_value().sub_value().value == 100 - STAR_GAIN

    def test_max_energy_by_tier(self):
        assert Energy.max_energy(0) == 1_000
        assert Energy.max_energy(100) == 5_000
        assert Energy(value=STAR_LIMIT).is_max_energy(0)

    def test_default_duration(self):
        assert Energy.default_duration(0) == 10
        assert Energy.default_duration(5) == 20

    def test_recharge_spends_one_energy(self):
        energy = Energy(value=1_000)
        energy.recharge(0, NOW)
        assert energy.value == 900
        assert energy.expire == NOW + timedelta(minutes=10)
        assert not energy.is_expired(NOW)
        assert energy.is_expired(NOW + timedelta(minutes=11))

    @pytest.mark.parametrize("start", [0, 100, 1_250, STAR_LIMIT])
    def test_add_then_sub_energy_restores_stars(self, start):
        assert Energy(value=start).add_energy(5).sub_energy(5).value == start

    def test_new_player_energy_is_expired(self):
        assert PlayerEconomy(id="1").energy.is_expired(NOW)


class TestMultiplier:
    def test_permanent_multiplier(self):
        assert Multiplier(value=20).effective(NOW) == 20

    def test_expired_multiplier_counts_as_zero(self):
        multiplier = Multiplier(value=20, expire=NOW - timedelta(seconds=1))
        assert multiplier.is_expired(NOW)
        assert multiplier.effective(NOW) == 0


class TestUpgrades:
    def test_bounds(self):
        with pytest.raises(ValidationError):
            Upgrades(tier=101)
        with pytest.raises(ValidationError):
            Upgrades(mastery=-1)

    def test_frozen(self):
        upgrades = Upgrades(tier=3)
        with pytest.raises(ValidationError):
            upgrades.tier = 4  # type: ignore[misc]

    def test_max_checks(self):
        assert Upgrades(tier=100, mastery=25).is_max_tier()
        assert Upgrades(tier=100, mastery=25).is_max_mastery()
        assert not Upgrades().is_max_tier()


class TestGameStats:
    def test_streaks_reset_on_other_results(self):
        stats = GameStats(id="coinflip")
        stats.win(100)
        stats.win(50)
        assert stats.wins.value == 2
        assert stats.wins.streak.value == 2
        assert stats.wins.display_streak == 1
        stats.lose(30)
        assert stats.wins.streak.value == 0
        assert stats.wins.streak.highest == 2
        assert stats.loses.display_streak == 0

    def test_highest_coins_is_the_largest_single_win(self):
        stats = GameStats(id="coinflip")
        stats.win(500)
        stats.win(300)
        assert stats.wins.coins.value == 800
        assert stats.wins.coins.highest == 500
        assert stats.wins.streak.highest == 2

    def test_profit_and_rates(self):
        stats = GameStats(id="coinflip")
        stats.win(100)
        stats.lose(30)
        stats.tie(0)
        stats.lose(10)
        assert stats.played == 4
        assert stats.profit == 60
        assert stats.win_rate == 0.25
        assert stats.lose_rate == 0.5

    def test_empty_rates(self):
        assert GameStats(id="x").win_rate == 0.0


class TestPlayerEconomy:
    def test_defaults(self):
        player = PlayerEconomy(id="1")
        assert player.wallet.value == 10_000
        assert player.bet.value == 10_000
        assert player.bank.value == 0
        assert player.energy.value == 1_000
        assert player.min_bet == 100
        assert player.max_bet == 100_000

    def test_net_worth(self):
        player = PlayerEconomy(id="1")
        player.bank.set_value(5_000)
        assert player.net_worth == 15_000

    def test_stats_for_creates_once(self):
        player = PlayerEconomy(id="1")
        stats = player.stats_for("blackjack")
        assert player.stats_for("blackjack") is stats
        assert list(player.games) == ["blackjack"]

    def test_invites_are_not_active_parties(self):
        player = PlayerEconomy(
            id="1",
            party=[
                PartyMembership(id="a", role=PartyRole.OWNER),
                PartyMembership(id="b", role=PartyRole.MEMBER),
                PartyMembership(id="c", role=PartyRole.INVITED),
            ],
        )
        assert player.party_ids == ["a", "b"]

    def test_json_document_round_trip(self):
        player = PlayerEconomy(id="1")
        player.stats_for("highlow").win(500)
        player.energy.set_expire(NOW)
        restored = PlayerEconomy.model_validate(player.model_dump(mode="json"))
        assert restored == player


class TestParty:
    def test_multiplier_is_capped(self):
        party = Party(id="p", owner_id="1")
        for member_id in ("1", "2", "3"):
            party.add_member(member_id, multiplier=50)
        assert party.multiplier == 100

    def test_add_member_is_idempotent(self):
        party = Party(id="p", owner_id="1")
        first = party.add_member("1", multiplier=5)
        assert party.add_member("1", multiplier=9) is first
        assert len(party.members) == 1

    def test_is_full(self):
        party = Party(id="p", owner_id="1")
        for member_id in range(5):
            party.add_member(str(member_id))
        assert party.is_full


class TestGameOutcome:
    def test_jackpot_is_a_win(self):
        assert GameOutcome(kind=OutcomeKind.JACKPOT, payoff=10).is_win
        assert not GameOutcome(kind=OutcomeKind.TIE).is_win
