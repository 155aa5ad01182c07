"""Discord UI views: component rows for game sessions and the spam event.

ComponentView: buttons and selects built from ``MessageContent.rows``.
InteractionResponder: the ``Responder`` a game session talks to.
SpamLobbyView: Join/Start/Stop buttons while a spam event gathers players.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection
from typing import TYPE_CHECKING, Any

import discord

from cribbot.core.errors import ActionTimeout
from cribbot.core.render import Action, Button, MessageContent, Select
from cribbot.discord.embeds import build_spam_intro_embed, to_discord_embed

if TYPE_CHECKING:
    from cribbot.core.render import Component
    from cribbot.core.spam import SpamEvent

logger = logging.getLogger(__name__)


def _build_item(component: Component, row: int) -> discord.ui.Item[Any]:
    if isinstance(component, Button):
        return discord.ui.Button(
            custom_id=component.custom_id,
            label=component.label,
            style=getattr(discord.ButtonStyle, component.style.value),
            disabled=component.disabled,
            emoji=component.emoji,
            row=row,
        )
    return discord.ui.Select(
        custom_id=component.custom_id,
        placeholder=component.placeholder,
        disabled=component.disabled,
        row=row,
        options=[
            discord.SelectOption(
                label=option.label,
                value=option.value,
                description=option.description,
                emoji=option.emoji,
                default=option.default,
            )
            for option in component.options
        ],
    )


class ComponentView(discord.ui.View):
    """Buttons and selects for one frame of a game.

    Presses from the session owner are acknowledged and pushed onto
    ``actions``. Everyone else gets an ephemeral refusal.
    """

    def __init__(
        self,
        *,
        original_user_id: int,
        rows: list[list[Component]],
        actions: asyncio.Queue[Action],
    ) -> None:
        super().__init__(timeout=300)
        self.original_user_id = original_user_id
        self.actions = actions
        for index, row in enumerate(rows):
            for component in row:
                item = _build_item(component, index)
                item.callback = self._make_callback(item)  # type: ignore[method-assign]
                self.add_item(item)

    async def _check_user(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.original_user_id:
            await interaction.response.send_message(
                "Only the player who started this game can use these buttons.",
                ephemeral=True,
            )
            return False
        return True

    def _make_callback(self, item: discord.ui.Item[Any]):  # noqa: ANN202
        async def callback(interaction: discord.Interaction) -> None:
            if not await self._check_user(interaction):
                return
            await interaction.response.defer()
            values = tuple(item.values) if isinstance(item, discord.ui.Select) else ()
            custom_id = getattr(item, "custom_id", "")
            await self.actions.put(Action(custom_id=custom_id, values=values))

        return callback


class InteractionResponder:
    """Sends game frames as interaction followups and waits for presses."""

    def __init__(self, interaction: discord.Interaction) -> None:
        self.interaction = interaction
        self.user_id = interaction.user.id
        self.actions: asyncio.Queue[Action] = asyncio.Queue()
        self.message: discord.WebhookMessage | None = None
        self.view: ComponentView | None = None

    def _render(self, content: MessageContent) -> dict[str, Any]:
        if self.view is not None:
            self.view.stop()
        self.view = None
        kwargs: dict[str, Any] = {
            "content": content.content,
            "embeds": [to_discord_embed(embed) for embed in content.embeds],
        }
        if content.rows:
            self.view = ComponentView(
                original_user_id=self.user_id, rows=content.rows, actions=self.actions
            )
            kwargs["view"] = self.view
        return kwargs

    async def send(self, content: MessageContent) -> None:
        self.message = await self.interaction.followup.send(wait=True, **self._render(content))

    async def edit(self, content: MessageContent) -> None:
        kwargs = self._render(content)
        kwargs.setdefault("view", None)
        if self.message is None:
            await self.interaction.edit_original_response(**kwargs)
        else:
            await self.message.edit(**kwargs)

    async def await_action(self, custom_ids: Collection[str], timeout: float) -> Action:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise ActionTimeout(f"No action within {timeout:g}s")
            try:
                action = await asyncio.wait_for(self.actions.get(), remaining)
            except TimeoutError as exc:
                raise ActionTimeout(f"No action within {timeout:g}s") from exc
            if action.custom_id in custom_ids:
                return action
            logger.debug("stale_action_ignored custom_id=%s", action.custom_id)


class SpamLobbyView(discord.ui.View):
    """Join/Start/Stop buttons for a spam event lobby.

    Anyone can join. Only the host can start early or cancel. The view stops
    when the event is full, started, cancelled, or the join window times out.
    """

    def __init__(self, event: SpamEvent, *, host_name: str, timeout: float) -> None:
        super().__init__(timeout=timeout)
        self.event = event
        self.host_name = host_name
        self.names: dict[int, str] = {}
        self.joins: dict[int, discord.Interaction] = {}
        self.cancelled = False

    async def _check_host(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.event.host_id:
            await interaction.response.send_message(
                "Get some help. You're not the event host.", ephemeral=True
            )
            return False
        return True

    def disable_all(self) -> None:
        for item in self.children:
            if isinstance(item, discord.ui.Button):
                item.disabled = True

    def intro_embed(self, ended: bool = False) -> discord.Embed:
        return build_spam_intro_embed(
            self.event, self.host_name, self.names, ended=ended, failed=self.cancelled
        )

    @discord.ui.button(label="Join", style=discord.ButtonStyle.primary)
    async def join(
        self,
        interaction: discord.Interaction,
        button: discord.ui.Button,  # noqa: ARG002
    ) -> None:
        user = interaction.user
        if self.event.is_full and user.id not in self.event.players:
            await interaction.response.send_message("The event is full.", ephemeral=True)
            return
        if not self.event.join(user.id):
            await interaction.response.send_message(
                "You already joined the event, weirdo.", ephemeral=True
            )
            return
        self.names[user.id] = user.display_name
        self.joins[user.id] = interaction
        await interaction.response.edit_message(embed=self.intro_embed(), view=self)
        await interaction.followup.send(
            f"You're player number {len(self.event.players)} to join!", ephemeral=True
        )
        logger.info("spam_event_joined user=%s players=%d", user.id, len(self.event.players))
        if self.event.is_full:
            self.stop()

    @discord.ui.button(label="Start", style=discord.ButtonStyle.primary)
    async def start(
        self,
        interaction: discord.Interaction,
        button: discord.ui.Button,  # noqa: ARG002
    ) -> None:
        if not await self._check_host(interaction):
            return
        await interaction.response.send_message("You started the event!", ephemeral=True)
        self.stop()

    @discord.ui.button(label="Stop", style=discord.ButtonStyle.danger)
    async def cancel(
        self,
        interaction: discord.Interaction,
        button: discord.ui.Button,  # noqa: ARG002
    ) -> None:
        if not await self._check_host(interaction):
            return
        self.cancelled = True
        self.disable_all()
        await interaction.response.edit_message(embed=self.intro_embed(ended=True), view=self)
        logger.info("spam_event_cancelled host=%s", self.event.host_id)
        self.stop()
