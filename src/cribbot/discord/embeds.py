"""Discord embed builders for cribbot.

``to_discord_embed`` converts the plain ``Embed`` data produced by games
into ``discord.Embed``. The ``build_*`` functions style the replies of the
economy commands.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import discord

from cribbot.core.render import Color, Embed, bold, code, coins
from cribbot.models.values import BankSpace, Energy, Wallet

if TYPE_CHECKING:
    from cribbot.core.spam import SpamEvent, Spammer
    from cribbot.db.repository import LeaderboardKind
    from cribbot.models.party import Party
    from cribbot.models.player import PlayerEconomy

MEDALS = ("🥇", "🥈", "🥉")


def to_discord_embed(embed: Embed) -> discord.Embed:
    result = discord.Embed(
        title=embed.title,
        description=embed.description,
        color=int(embed.color) if embed.color is not None else None,
    )
    if embed.author:
        result.set_author(name=embed.author)
    if embed.footer:
        result.set_footer(text=embed.footer)
    for field in embed.fields:
        result.add_field(name=field.name, value=field.value, inline=field.inline)
    return result


def build_error_embed(message: str) -> discord.Embed:
    return discord.Embed(description=message, color=int(Color.RED))


def build_balance_embed(player: PlayerEconomy, name: str) -> discord.Embed:
    mastery = player.upgrades.mastery
    embed = discord.Embed(title=f"{name}'s Balance", color=int(Color.DARK))
    embed.add_field(
        name="Wallet",
        value=f"{coins(player.wallet.value)} / {Wallet.max_value(mastery):,}",
        inline=True,
    )
    embed.add_field(
        name="Bank",
        value=f"{coins(player.bank.value)} / {player.bank.space.value:,}",
        inline=True,
    )
    embed.add_field(name="Net Worth", value=coins(player.net_worth), inline=True)
    embed.add_field(
        name="Bet",
        value=f"{player.bet.value:,} ({player.min_bet:,} to {player.max_bet:,})",
        inline=True,
    )
    embed.add_field(name="Multiplier", value=f"{player.multiplier.effective()}%", inline=True)
    embed.set_footer(text=f"Bank space limit: {BankSpace.max_value(mastery):,}")
    return embed


def build_bet_embed(old: int, new: int) -> discord.Embed:
    return discord.Embed(
        description=(
            f"Successfully changed your bet from {bold(f'{old:,}')} "
            f"to {bold(f'{new:,}')} coins."
        ),
        color=int(Color.GREEN),
    )


def build_bank_embed(player: PlayerEconomy, label: str, amount: int) -> discord.Embed:
    embed = discord.Embed(color=int(Color.DARK))
    embed.add_field(name=label, value=code(f"{amount:,}"), inline=False)
    embed.add_field(name="Wallet Balance", value=code(f"{player.wallet.value:,}"), inline=True)
    embed.add_field(name="Bank Balance", value=code(f"{player.bank.value:,}"), inline=True)
    return embed


def build_share_embed(
    amount: int, sender: PlayerEconomy, recipient: PlayerEconomy, recipient_name: str
) -> discord.Embed:
    return discord.Embed(
        description=(
            f"Successfully shared {bold(f'{amount:,}')} coins to {bold(recipient_name)}.\n"
            f"You now have {bold(f'{sender.wallet.value:,}')} coins, "
            f"while they have {bold(f'{recipient.wallet.value:,}')} coins."
        ),
        color=int(Color.DARK),
    )


def build_energy_embed(player: PlayerEconomy, now: datetime) -> discord.Embed:
    tier = player.upgrades.tier
    energy = player.energy
    if energy.is_expired(now):
        status = "Expired. Use `/play` to spend one energy."
    else:
        status = f"Active until {discord.utils.format_dt(energy.expire, 'T')}"
    embed = discord.Embed(title="Energy", description=status, color=int(Color.YELLOW))
    embed.add_field(
        name="Energy", value=f"{energy.energy:,} / {Energy.max_energy(tier):,}", inline=True
    )
    embed.add_field(name="Stars", value=f"{energy.value:,}", inline=True)
    embed.add_field(
        name="Duration", value=f"{Energy.default_duration(tier)} minutes each", inline=True
    )
    return embed


def build_top_embed(
    kind: LeaderboardKind, players: list[PlayerEconomy], names: dict[str, str]
) -> discord.Embed:
    values = {
        "wallet": lambda p: coins(p.wallet.value),
        "bank": lambda p: coins(p.bank.value),
        "stars": lambda p: f"⭐ {p.energy.value:,}",
    }
    render = values[str(kind)]
    lines = [
        f"{MEDALS[i] if i < len(MEDALS) else f'{i + 1}.'} {bold(render(p))} - "
        f"{names.get(p.id, p.id)}"
        for i, p in enumerate(players)
    ]
    return discord.Embed(
        title=f"Top {str(kind).title()}",
        description="\n".join(lines) or "Nobody has played yet.",
        color=int(Color.GOLD),
    )


def build_party_embed(party: Party, names: dict[str, str]) -> discord.Embed:
    members = "\n".join(
        f"{names.get(m.id, m.id)} (+{m.multiplier}%)" for m in party.members
    )
    embed = discord.Embed(
        title=party.name or "Party", description=members or "No members.", color=int(Color.BLURPLE)
    )
    embed.add_field(name="Multiplier", value=f"{party.multiplier}%", inline=True)
    embed.add_field(name="Prestige", value=str(party.prestige), inline=True)
    return embed


def build_spam_intro_embed(
    event: SpamEvent,
    host_name: str,
    names: dict[int, str],
    ended: bool = False,
    failed: bool = False,
) -> discord.Embed:
    if not ended:
        description, color = "Click the join button to join! Will start in a minute.", Color.BLURPLE
    elif failed:
        description, color = "The event has been cancelled.", Color.RED
    else:
        description, color = "The event has started! Spam as much as you can.", Color.DARK
    embed = discord.Embed(
        title=f"{event.prize:,} Spam Event", description=description, color=int(color)
    )
    players = ", ".join(names.get(uid, str(uid)) for uid in event.players)
    embed.add_field(
        name=f"Players ({len(event.players)} Players)", value=players or "No players yet."
    )
    embed.set_footer(text=f"Hosted by {host_name}")
    return embed


def build_spam_results_embed(
    event: SpamEvent, winners: list[Spammer], names: dict[int, str]
) -> discord.Embed:
    medals = [*MEDALS, *["👏"] * max(len(winners) - len(MEDALS), 0)]
    lines = [
        f"{bold(f'{medals[i]} {w.spams:,}')} - "
        f"{bold(names.get(w.user_id, str(w.user_id)))} got {bold(f'{w.won:,}')}"
        for i, w in enumerate(winners)
    ]
    lines += [
        bold(f"💀 {p.spams:,} - {names.get(p.user_id, str(p.user_id))} didn't make it")
        for p in event.losers()
    ]
    return discord.Embed(
        title=f"{len(winners):,} people managed to split {coins(event.prize)}",
        description="\n".join(lines),
        color=int(Color.GOLD),
    )
