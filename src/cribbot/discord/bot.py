"""Discord bot for cribbot.

Runs alongside FastAPI using the same event loop. Slash commands load the
caller's economy document, hand it to ``cribbot.core`` and reply with
embeds; ``/play`` drives a whole game session through component buttons.

The bot is optional: if DISCORD_BOT_TOKEN is not set, nothing starts.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING

import discord
from discord import Intents, app_commands
from discord.ext import commands
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from cribbot.core.economy import deposit, set_bet, share, withdraw
from cribbot.core.errors import InvalidAmount
from cribbot.core.play import run_play
from cribbot.core.render import Color
from cribbot.core.session import Clock, utc_now
from cribbot.core.spam import MIN_SPAM_PRIZE, SpamEvent
from cribbot.db.repository import EconomyStore, LeaderboardKind
from cribbot.discord.embeds import (
    build_balance_embed,
    build_bank_embed,
    build_bet_embed,
    build_energy_embed,
    build_error_embed,
    build_party_embed,
    build_share_embed,
    build_spam_results_embed,
    build_top_embed,
)
from cribbot.discord.helpers import (
    ActiveSessions,
    PartyNotFound,
    PlayerBusy,
    db_session,
    get_player_party,
)
from cribbot.discord.views import InteractionResponder, SpamLobbyView

if TYPE_CHECKING:
    from cribbot.config import Settings

logger = logging.getLogger(__name__)

# Countdown notices posted while a spam event is running.
SPAM_COUNTDOWN_SECONDS = (30, 15, 3, 2, 1)


class CribBot(commands.Bot):
    """The cribbot Discord bot.

    Runs in-process with FastAPI. Provides slash commands for the games
    and the coin economy built around them.
    """

    def __init__(
        self,
        settings: Settings,
        engine: AsyncEngine,
        rng: random.Random | None = None,
        clock: Clock = utc_now,
    ) -> None:
        intents = Intents.default()
        intents.message_content = True  # Spam events count message text

        super().__init__(
            command_prefix="!",
            intents=intents,
            description="cribbot -- games of chance and the coins to lose on them.",
        )
        self.settings = settings
        self.engine = engine
        self.store = EconomyStore(engine)
        self.rng = rng or random.Random()
        self.clock = clock
        self.active_sessions = ActiveSessions()
        self._setup_commands()

    def _setup_commands(self) -> None:
        """Register slash commands on the bot's command tree."""

        @self.tree.command(name="play", description="Pick a game and play it")
        async def play_command(interaction: discord.Interaction) -> None:
            await self._handle_play(interaction)

        @self.tree.command(name="bet", description="Change how much you bet per game")
        @app_commands.describe(amount="A number, 'min', 'max', 'half', '30%' or '10k'")
        async def bet_command(interaction: discord.Interaction, amount: str) -> None:
            await self._handle_bet(interaction, amount)

        @self.tree.command(name="balance", description="View your wallet, bank and bet")
        @app_commands.describe(user="Whose balance to view (defaults to you)")
        async def balance_command(
            interaction: discord.Interaction,
            user: discord.User | None = None,
        ) -> None:
            await self._handle_balance(interaction, user)

        @self.tree.command(name="energy", description="View your energy and stars")
        async def energy_command(interaction: discord.Interaction) -> None:
            await self._handle_energy(interaction)

        bank = app_commands.Group(name="bank", description="Move coins in and out of your bank")

        @bank.command(name="deposit", description="Deposit coins into your bank")
        @app_commands.describe(amount="A number, 'max', 'half', '30%' or '10k'")
        async def deposit_command(interaction: discord.Interaction, amount: str) -> None:
            await self._handle_deposit(interaction, amount)

        @bank.command(name="withdraw", description="Withdraw coins from your bank")
        @app_commands.describe(amount="A number, 'max', 'half', '30%' or '10k'")
        async def withdraw_command(interaction: discord.Interaction, amount: str) -> None:
            await self._handle_withdraw(interaction, amount)

        self.tree.add_command(bank)

        @self.tree.command(name="share", description="Give coins from your wallet to someone")
        @app_commands.describe(user="Who receives the coins", amount="How many coins to give")
        async def share_command(
            interaction: discord.Interaction,
            user: discord.User,
            amount: str,
        ) -> None:
            await self._handle_share(interaction, user, amount)

        @self.tree.command(name="top", description="View the richest players")
        @app_commands.describe(kind="What to rank players by")
        @app_commands.choices(
            kind=[
                app_commands.Choice(name="Wallet", value=LeaderboardKind.WALLET.value),
                app_commands.Choice(name="Bank", value=LeaderboardKind.BANK.value),
                app_commands.Choice(name="Stars", value=LeaderboardKind.STARS.value),
            ],
        )
        async def top_command(
            interaction: discord.Interaction,
            kind: app_commands.Choice[str] | None = None,
        ) -> None:
            await self._handle_top(
                interaction, LeaderboardKind(kind.value) if kind else LeaderboardKind.WALLET
            )

        @self.tree.command(
            name="spam",
            description="Start a spam event! The top spammer gets the biggest share.",
        )
        @app_commands.describe(
            prize="Coins split between the winners",
            lock_channel="Open the channel for the event and lock it afterwards",
        )
        @app_commands.default_permissions(manage_messages=True)
        @app_commands.guild_only()
        async def spam_command(
            interaction: discord.Interaction,
            prize: app_commands.Range[int, MIN_SPAM_PRIZE],
            lock_channel: bool = True,
        ) -> None:
            await self._handle_spam(interaction, prize, lock_channel)

        party = app_commands.Group(name="party", description="Play together for a bonus")

        @party.command(name="create", description="Start a party you own")
        @app_commands.describe(name="Your party's name")
        async def party_create_command(interaction: discord.Interaction, name: str = "") -> None:
            await self._handle_party_create(interaction, name)

        @party.command(name="info", description="View your party")
        async def party_info_command(interaction: discord.Interaction) -> None:
            await self._handle_party_info(interaction)

        self.tree.add_command(party)

    async def setup_hook(self) -> None:
        """Called when the bot is ready to start. Syncs slash commands."""
        if self.settings.discord_guild_id:
            guild = discord.Object(id=int(self.settings.discord_guild_id))
            self.tree.copy_global_to(guild=guild)
            await self.tree.sync(guild=guild)
            logger.info("discord_commands_synced guild_id=%s", self.settings.discord_guild_id)
        else:
            await self.tree.sync()
            logger.info("discord_commands_synced globally")

    async def on_ready(self) -> None:
        user = self.user
        logger.info("discord_bot_ready user=%s", user.name if user else "unknown")

    # --- Shared reply helpers ---

    async def _send_error(self, interaction: discord.Interaction, message: str) -> None:
        await interaction.followup.send(embed=build_error_embed(message), ephemeral=True)

    def _display_name(self, player_id: str) -> str:
        user = self.get_user(int(player_id)) if player_id.isdigit() else None
        return user.display_name if user else f"<@{player_id}>"

    def _refuse_while_playing(self, interaction: discord.Interaction) -> None:
        if interaction.user.id in self.active_sessions:
            raise PlayerBusy("You can't do that while you're in the middle of a game.")

    # --- Games ---

    async def _handle_play(self, interaction: discord.Interaction) -> None:
        """Handle the /play slash command."""
        await interaction.response.defer()
        try:
            with self.active_sessions.claim(interaction.user.id):
                player = await self.store.fetch_player(str(interaction.user.id))
                ctx = await run_play(
                    player=player,
                    responder=InteractionResponder(interaction),
                    store=self.store,
                    rng=self.rng,
                    clock=self.clock,
                    picker_timeout=self.settings.cribbot_picker_timeout_seconds,
                    interactions_limit=self.settings.cribbot_session_interactions,
                )
        except PlayerBusy as exc:
            await self._send_error(interaction, str(exc))
            return
        except (SQLAlchemyError, discord.HTTPException):
            logger.exception("discord_play_failed user=%s", interaction.user.id)
            await self._send_error(interaction, "Something went wrong. Please try again.")
            return
        if ctx is not None:
            logger.info(
                "discord_play_finished user=%s game=%s rounds=%d",
                interaction.user.id,
                ctx.game.id,
                ctx.interactions,
            )

    # --- Economy ---

    async def _handle_bet(self, interaction: discord.Interaction, amount: str) -> None:
        """Handle the /bet slash command."""
        await interaction.response.defer()
        try:
            self._refuse_while_playing(interaction)
            player = await self.store.fetch_player(str(interaction.user.id))
            old, new = set_bet(player, amount)
            await self.store.save_player(player)
        except (PlayerBusy, InvalidAmount) as exc:
            await self._send_error(interaction, str(exc))
            return
        except SQLAlchemyError:
            logger.exception("discord_bet_failed user=%s", interaction.user.id)
            await self._send_error(interaction, "Something went wrong. Please try again.")
            return
        logger.info("bet_changed user=%s old=%d new=%d", interaction.user.id, old, new)
        await interaction.followup.send(embed=build_bet_embed(old, new))

    async def _handle_balance(
        self, interaction: discord.Interaction, user: discord.User | None
    ) -> None:
        """Handle the /balance slash command."""
        await interaction.response.defer()
        target = user or interaction.user
        try:
            player = await self.store.fetch_player(str(target.id))
        except SQLAlchemyError:
            logger.exception("discord_balance_failed user=%s", target.id)
            await self._send_error(interaction, "Something went wrong. Please try again.")
            return
        await interaction.followup.send(embed=build_balance_embed(player, target.display_name))

    async def _handle_energy(self, interaction: discord.Interaction) -> None:
        """Handle the /energy slash command."""
        await interaction.response.defer()
        try:
            player = await self.store.fetch_player(str(interaction.user.id))
        except SQLAlchemyError:
            logger.exception("discord_energy_failed user=%s", interaction.user.id)
            await self._send_error(interaction, "Something went wrong. Please try again.")
            return
        await interaction.followup.send(embed=build_energy_embed(player, self.clock()))

    async def _handle_deposit(self, interaction: discord.Interaction, amount: str) -> None:
        """Handle the /bank deposit slash command."""
        await interaction.response.defer()
        try:
            self._refuse_while_playing(interaction)
            player = await self.store.fetch_player(str(interaction.user.id))
            moved = deposit(player, amount)
            await self.store.save_player(player)
        except (PlayerBusy, InvalidAmount) as exc:
            await self._send_error(interaction, str(exc))
            return
        except SQLAlchemyError:
            logger.exception("discord_deposit_failed user=%s", interaction.user.id)
            await self._send_error(interaction, "Something went wrong. Please try again.")
            return
        logger.info("bank_deposit user=%s amount=%d", interaction.user.id, moved)
        await interaction.followup.send(embed=build_bank_embed(player, "Deposited", moved))

    async def _handle_withdraw(self, interaction: discord.Interaction, amount: str) -> None:
        """Handle the /bank withdraw slash command."""
        await interaction.response.defer()
        try:
            self._refuse_while_playing(interaction)
            player = await self.store.fetch_player(str(interaction.user.id))
            moved = withdraw(player, amount)
            await self.store.save_player(player)
        except (PlayerBusy, InvalidAmount) as exc:
            await self._send_error(interaction, str(exc))
            return
        except SQLAlchemyError:
            logger.exception("discord_withdraw_failed user=%s", interaction.user.id)
            await self._send_error(interaction, "Something went wrong. Please try again.")
            return
        logger.info("bank_withdraw user=%s amount=%d", interaction.user.id, moved)
        await interaction.followup.send(embed=build_bank_embed(player, "Withdrawn", moved))

    async def _handle_share(
        self, interaction: discord.Interaction, user: discord.User, amount: str
    ) -> None:
        """Handle the /share slash command."""
        await interaction.response.defer()
        if user.bot:
            await self._send_error(interaction, "Bots don't need coins.")
            return
        try:
            self._refuse_while_playing(interaction)
            if user.id in self.active_sessions:
                raise PlayerBusy(f"{user.display_name} is in the middle of a game.")
            sender = await self.store.fetch_player(str(interaction.user.id))
            recipient = await self.store.fetch_player(str(user.id))
            shared = share(sender, recipient, amount)
            await self.store.save_players(sender, recipient)
        except (PlayerBusy, InvalidAmount) as exc:
            await self._send_error(interaction, str(exc))
            return
        except SQLAlchemyError:
            logger.exception("discord_share_failed user=%s", interaction.user.id)
            await self._send_error(interaction, "Something went wrong. Please try again.")
            return
        logger.info(
            "coins_shared sender=%s recipient=%s amount=%d", interaction.user.id, user.id, shared
        )
        await interaction.followup.send(
            embed=build_share_embed(shared, sender, recipient, user.display_name)
        )

    async def _handle_top(self, interaction: discord.Interaction, kind: LeaderboardKind) -> None:
        """Handle the /top slash command."""
        await interaction.response.defer()
        try:
            players = await self.store.top_players(kind, limit=10)
        except SQLAlchemyError:
            logger.exception("discord_top_failed")
            await self._send_error(interaction, "Something went wrong. Please try again.")
            return
        names = {p.id: self._display_name(p.id) for p in players}
        await interaction.followup.send(embed=build_top_embed(kind, players, names))

    # --- Parties ---

    async def _handle_party_create(self, interaction: discord.Interaction, name: str) -> None:
        """Handle the /party create slash command."""
        await interaction.response.defer()
        owner_id = str(interaction.user.id)
        try:
            self._refuse_while_playing(interaction)
            async with db_session(self.engine) as repo:
                owner = await repo.fetch_player(owner_id)
                if owner.party_ids:
                    raise InvalidAmount("You're already in a party.")
                party = await repo.create_party(
                    owner, name or f"{interaction.user.display_name}'s Party"
                )
        except (PlayerBusy, InvalidAmount) as exc:
            await self._send_error(interaction, str(exc))
            return
        except SQLAlchemyError:
            logger.exception("discord_party_create_failed user=%s", owner_id)
            await self._send_error(interaction, "Something went wrong. Please try again.")
            return
        logger.info("party_created party=%s owner=%s", party.id, owner_id)
        names = {m.id: self._display_name(m.id) for m in party.members}
        await interaction.followup.send(embed=build_party_embed(party, names))

    async def _handle_party_info(self, interaction: discord.Interaction) -> None:
        """Handle the /party info slash command."""
        await interaction.response.defer()
        try:
            party = await get_player_party(self.engine, str(interaction.user.id))
        except PartyNotFound as exc:
            await self._send_error(interaction, str(exc))
            return
        except SQLAlchemyError:
            logger.exception("discord_party_info_failed user=%s", interaction.user.id)
            await self._send_error(interaction, "Something went wrong. Please try again.")
            return
        names = {m.id: self._display_name(m.id) for m in party.members}
        await interaction.followup.send(embed=build_party_embed(party, names))

    # --- Spam event ---

    async def _countdown(
        self, interaction: discord.Interaction, seconds: int, template: str
    ) -> None:
        """Post ``template`` at the countdown marks of a ``seconds`` long window."""
        elapsed = 0
        for mark in sorted((m for m in SPAM_COUNTDOWN_SECONDS if m < seconds), reverse=True):
            await asyncio.sleep(seconds - mark - elapsed)
            elapsed = seconds - mark
            unit = "second" if mark == 1 else "seconds"
            await interaction.followup.send(f"**{template.format(mark=mark, unit=unit)}**")

    async def _set_channel_open(self, channel: discord.abc.Messageable, open_: bool) -> bool:
        if not isinstance(channel, discord.TextChannel):
            return False
        try:
            await channel.set_permissions(channel.guild.default_role, send_messages=open_)
        except discord.HTTPException:
            logger.warning("spam_channel_permissions_failed channel=%s", channel.id)
            return False
        return True

    async def _collect_spam(self, event: SpamEvent, channel_id: int, seconds: float) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + seconds

        def check(message: discord.Message) -> bool:
            return message.channel.id == channel_id and message.author.id in event.players

        while (remaining := deadline - loop.time()) > 0:
            try:
                message = await self.wait_for("message", check=check, timeout=remaining)
            except TimeoutError:
                return
            event.record(message.author.id, message.content)

    async def _handle_spam(
        self, interaction: discord.Interaction, prize: int, lock_channel: bool
    ) -> None:
        """Handle the /spam slash command."""
        await interaction.response.defer()
        guild = interaction.guild
        channel = interaction.channel
        if guild is None or channel is None:
            await self._send_error(interaction, "Spam events only run in a server channel.")
            return

        settings = self.settings
        event = SpamEvent(
            host_id=interaction.user.id,
            prize=prize,
            word=guild.name,
            max_players=settings.cribbot_spam_max_players,
            min_messages=settings.cribbot_spam_min_messages,
        )
        view = SpamLobbyView(
            event,
            host_name=interaction.user.display_name,
            timeout=settings.cribbot_spam_join_seconds,
        )
        message = await interaction.followup.send(embed=view.intro_embed(), view=view, wait=True)
        logger.info("spam_event_opened host=%s prize=%d", interaction.user.id, prize)

        countdown = asyncio.create_task(
            self._countdown(
                interaction, settings.cribbot_spam_join_seconds, "Starting in {mark} {unit}..."
            )
        )
        await view.wait()
        countdown.cancel()
        if view.cancelled:
            await interaction.followup.send("The event was cancelled by the host.")
            return

        view.disable_all()
        if len(event.players) < settings.cribbot_spam_min_players:
            view.cancelled = True
            await message.edit(embed=view.intro_embed(ended=True), view=view)
            await interaction.followup.send(
                f"The event received only **{len(event.players)}** participants which "
                "isn't enough to start a spam event."
            )
            return
        await message.edit(embed=view.intro_embed(ended=True), view=view)

        opened = lock_channel and await self._set_channel_open(channel, True)
        await interaction.followup.send(
            embed=discord.Embed(
                title=event.word, description=f"Spam **{event.word}**", color=int(Color.GREEN)
            )
        )
        countdown = asyncio.create_task(
            self._countdown(
                interaction, settings.cribbot_spam_duration_seconds, "{mark} {unit} left!"
            )
        )
        await self._collect_spam(event, channel.id, settings.cribbot_spam_duration_seconds)
        countdown.cancel()
        if opened and await self._set_channel_open(channel, False):
            await interaction.followup.send("**This channel has been locked.**")

        winners = event.payouts(self.rng)
        for winner in winners:
            await self._notify(
                view.joins.get(winner.user_id),
                f"You won `{winner.won:,}` coins. "
                f"That's `{winner.won // max(winner.spams, 1):,}` for each message!\n\n"
                "The host will distribute your share shortly.",
            )
        for loser in event.losers():
            await self._notify(
                view.joins.get(loser.user_id), "You lost the battle. Better luck next time!"
            )

        await interaction.followup.send(
            embed=build_spam_results_embed(event, winners, view.names)
        )
        logger.info(
            "spam_event_finished host=%s players=%d winners=%d",
            interaction.user.id,
            len(event.players),
            len(winners),
        )

    async def _notify(self, interaction: discord.Interaction | None, text: str) -> None:
        if interaction is None:
            return
        try:
            await interaction.followup.send(text, ephemeral=True)
        except discord.HTTPException:
            logger.warning("spam_event_notify_failed user=%s", interaction.user.id)


def is_discord_enabled(settings: Settings) -> bool:
    """Check whether Discord integration should be started.

    Returns True only when discord_enabled is True, a token is set, AND the
    environment is not development, so a local server never logs in with a
    production token by accident.
    """
    if settings.cribbot_env == "development":
        logger.info("discord_bot_skipped_in_development")
        return False
    return bool(settings.discord_enabled and settings.discord_bot_token)


async def start_discord_bot(settings: Settings, engine: AsyncEngine) -> CribBot:
    """Create and start the Discord bot in the current event loop.

    Returns the bot instance so the caller can stop it during shutdown.
    The bot runs as a background task; this function returns immediately
    after starting it.
    """
    bot = CribBot(settings=settings, engine=engine)

    async def _run_bot() -> None:
        try:
            await bot.start(settings.discord_bot_token)
        except asyncio.CancelledError:
            logger.info("discord_bot_cancelled")
        except Exception:  # Last-resort handler: bot.start can raise connection and auth errors
            logger.exception("discord_bot_error")
        finally:
            if not bot.is_closed():
                await bot.close()

    asyncio.create_task(_run_bot(), name="discord-bot")
    logger.info("discord_bot_started")
    return bot
