"""The ``/play`` flow: pick a game, top up energy if needed, then start a session."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from typing import TYPE_CHECKING

from cribbot.core.economy import effective_multiplier, recharge_energy
from cribbot.core.errors import ActionTimeout
from cribbot.core.games.registry import GAMES
from cribbot.core.render import (
    Button,
    ButtonStyle,
    Color,
    Embed,
    MessageContent,
    Select,
    SelectOption,
    bold,
    coins,
    disabled_rows,
)
from cribbot.core.session import ComponentIds, GameContext, utc_now
from cribbot.models.constants import PICKER_TIMEOUT_SECONDS, SESSION_INTERACTIONS_LIMIT
from cribbot.models.values import Energy

if TYPE_CHECKING:
    from cribbot.core.games.base import Game
    from cribbot.core.session import Clock, PlayerStore, Responder
    from cribbot.models.player import PlayerEconomy

logger = logging.getLogger(__name__)

PICK = "pick"
PROCEED = "proceed"
USE = "use"
CANCEL = "cancel"


def notice(text: str, color: Color = Color.RED) -> MessageContent:
    return MessageContent(embeds=[Embed(description=text, color=color)])


def render_picker(
    ids: ComponentIds, games: Mapping[str, Game], chosen: Game | None, ended: bool = False
) -> MessageContent:
    options = [
        SelectOption(
            label=game.name,
            value=game.id,
            description=game.description,
            emoji=game.emoji,
            default=chosen is not None and chosen.id == game.id,
        )
        for game in games.values()
    ]
    description = (
        f"You picked {bold(chosen.name)}. Ready?" if chosen else "Pick a game from the menu below."
    )
    rows = [
        [Select(custom_id=ids.create(PICK), options=options, placeholder="Select a game")],
        [
            Button(
                custom_id=ids.create(PROCEED),
                label="Play",
                style=ButtonStyle.SUCCESS,
                disabled=chosen is None,
            ),
            Button(custom_id=ids.create(CANCEL), label="Cancel", style=ButtonStyle.DANGER),
        ],
    ]
    content = MessageContent(
        embeds=[Embed(title="Game Picker", description=description, color=Color.BLURPLE)],
        rows=rows,
    )
    if ended:
        content.rows = disabled_rows(content.rows)
    return content


async def choose_game(
    responder: Responder,
    ids: ComponentIds,
    games: Mapping[str, Game] = GAMES,
    timeout: float = PICKER_TIMEOUT_SECONDS,
) -> Game | None:
    """Show the picker until the player presses Play (returns the game) or Cancel."""
    chosen: Game | None = None
    await responder.send(render_picker(ids, games, chosen))
    while True:
        try:
            action = await responder.await_action(
                [ids.create(PICK), ids.create(PROCEED), ids.create(CANCEL)], timeout
            )
        except ActionTimeout:
            await responder.edit(render_picker(ids, games, chosen, ended=True))
            await responder.send(notice("You didn't pick a game in time."))
            return None

        name = ids.name_of(action.custom_id)
        if name == PICK and action.values:
            chosen = games.get(action.values[0], chosen)
            await responder.edit(render_picker(ids, games, chosen))
        elif name == PROCEED and chosen is not None:
            await responder.edit(render_picker(ids, games, chosen, ended=True))
            return chosen
        elif name == CANCEL:
            await responder.edit(render_picker(ids, games, chosen, ended=True))
            return None


def render_energy_prompt(
    ids: ComponentIds, player: PlayerEconomy, ended: bool = False
) -> MessageContent:
    minutes = Energy.default_duration(player.upgrades.tier)
    description = (
        "Your energy has expired.\n"
        f"Use {bold('1')} of your {bold(player.energy.energy)} energy "
        f"to play for {bold(minutes)} minutes?"
    )
    rows = [
        [
            Button(custom_id=ids.create(USE), label="Use", style=ButtonStyle.SUCCESS),
            Button(custom_id=ids.create(CANCEL), label="Cancel", style=ButtonStyle.DANGER),
        ]
    ]
    content = MessageContent(
        embeds=[Embed(title="Energy", description=description, color=Color.YELLOW)], rows=rows
    )
    if ended:
        content.rows = disabled_rows(content.rows)
    return content


async def ensure_energy(
    responder: Responder,
    ids: ComponentIds,
    player: PlayerEconomy,
    store: PlayerStore,
    clock: Clock = utc_now,
    timeout: float = PICKER_TIMEOUT_SECONDS,
) -> bool:
    """Return True if the player can play now, offering a recharge if energy expired."""
    if not player.energy.is_expired(clock()):
        return True
    if player.energy.energy < 1:
        await responder.send(notice("Your energy expired and you don't have any left to use."))
        return False

    await responder.send(render_energy_prompt(ids, player))
    try:
        action = await responder.await_action([ids.create(USE), ids.create(CANCEL)], timeout)
    except ActionTimeout:
        await responder.edit(render_energy_prompt(ids, player, ended=True))
        return False

    await responder.edit(render_energy_prompt(ids, player, ended=True))
    if ids.name_of(action.custom_id) != USE:
        return False
    expire = recharge_energy(player, clock())
    await store.save_player(player)
    logger.info("energy_recharged player=%s expire=%s", player.id, expire.isoformat())
    return True


async def run_play(
    *,
    player: PlayerEconomy,
    responder: Responder,
    store: PlayerStore,
    rng: random.Random | None = None,
    clock: Clock = utc_now,
    games: Mapping[str, Game] = GAMES,
    picker_timeout: float = PICKER_TIMEOUT_SECONDS,
    interactions_limit: int = SESSION_INTERACTIONS_LIMIT,
    ids: ComponentIds | None = None,
) -> GameContext | None:
    """Run the whole ``/play`` flow. Returns the finished session, or None if it never started."""
    ids = ids or ComponentIds()
    if player.wallet.is_max_value(player.upgrades.mastery):
        await responder.send(notice("Your wallet is full! Deposit some coins before playing."))
        return None
    if player.bet.value > player.wallet.value:
        await responder.send(
            notice(f"You need at least {bold(coins(player.bet.value))} in your wallet to play.")
        )
        return None

    game = await choose_game(responder, ids, games, picker_timeout)
    if game is None:
        return None
    if not await ensure_energy(responder, ids, player, store, clock, picker_timeout):
        return None

    parties = await store.get_parties(player.party_ids) if player.party_ids else []
    ids.next_round()
    ctx = GameContext(
        game=game,
        player=player,
        responder=responder,
        store=store,
        rng=rng,
        clock=clock,
        multiplier=effective_multiplier(player, parties, clock()),
        interactions_limit=interactions_limit,
        ids=ids,
    )
    logger.info("game_session_started game=%s player=%s", game.id, player.id)
    await ctx.play()
    return ctx
