"""Tests for spam event bookkeeping."""

import random

from cribbot.core.spam import MIN_SPAM_PRIZE, SpamEvent


def make_event(**kwargs) -> SpamEvent:
    kwargs.setdefault("host_id", 1)
    kwargs.setdefault("prize", MIN_SPAM_PRIZE)
    kwargs.setdefault("word", "Cribs")
    return SpamEvent(**kwargs)


def spam(event: SpamEvent, user_id: int, times: int, text: str = "cribs") -> None:
    for _ in range(times):
        event.record(user_id, text)


class TestJoin:
    def test_join_once(self):
        event = make_event()
        assert event.join(10)
        assert not event.join(10)
        assert list(event.players) == [10]

    def test_full_event_refuses_players(self):
        event = make_event(max_players=2)
        assert event.join(1)
        assert event.join(2)
        assert event.is_full
        assert not event.join(3)


class TestRecord:
    def test_word_match_is_case_insensitive(self):
        event = make_event()
        event.join(10)
        assert event.record(10, "CRIBS cribs")
        assert event.record(10, "go cribs go")
        assert not event.record(10, "crib")
        assert event.players[10].spams == 2

    def test_outsiders_are_not_counted(self):
        event = make_event()
        assert not event.record(99, "cribs")
        assert 99 not in event.players


class TestResults:
    def test_winners_need_enough_messages(self):
        event = make_event(min_messages=3)
        for user_id in (1, 2, 3):
            event.join(user_id)
        spam(event, 1, 3)
        spam(event, 2, 7)
        spam(event, 3, 2)
        assert [w.user_id for w in event.winners()] == [2, 1]
        assert [p.user_id for p in event.losers()] == [3]

    def test_no_winners_no_payouts(self):
        event = make_event()
        event.join(1)
        assert event.payouts(random.Random(1)) == []

    def test_payouts_split_the_whole_prize(self):
        event = make_event(min_messages=1)
        for user_id, times in ((1, 4), (2, 9), (3, 6)):
            event.join(user_id)
            spam(event, user_id, times)
        winners = event.payouts(random.Random(7))
        assert [w.user_id for w in winners] == [2, 3, 1]
        assert sum(w.won for w in winners) == MIN_SPAM_PRIZE
        assert winners[0].won == max(w.won for w in winners)
        floor = MIN_SPAM_PRIZE // 6
        assert all(w.won >= floor for w in winners)

    def test_single_winner_takes_everything(self):
        event = make_event(min_messages=1)
        event.join(5)
        spam(event, 5, 1)
        assert event.payouts(random.Random(3))[0].won == MIN_SPAM_PRIZE
