"""Closed registry of playable games, keyed by game id."""

from __future__ import annotations

from cribbot.core.games.base import Game
from cribbot.core.games.blackjack import Blackjack
from cribbot.core.games.coinflip import Coinflip
from cribbot.core.games.diceroll import DiceRoll
from cribbot.core.games.emojipair import EmojiPair
from cribbot.core.games.highlow import Highlow
from cribbot.core.games.slotmachine import SlotMachine

GAMES: dict[str, Game] = {
    game.id: game
    for game in (Blackjack(), Coinflip(), DiceRoll(), Highlow(), EmojiPair(), SlotMachine())
}


def get_game(game_id: str) -> Game | None:
    return GAMES.get(game_id)
