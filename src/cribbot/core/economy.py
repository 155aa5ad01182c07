"""Economy commands that don't involve a game.

Pure operations on ``PlayerEconomy`` documents. Each one validates its
input, mutates the documents and returns the amount moved; invalid input
raises ``InvalidAmount`` with a message meant for the player. Persistence
is the caller's job.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from datetime import datetime

from cribbot.core.errors import InvalidAmount
from cribbot.models.party import Party
from cribbot.models.player import PlayerEconomy

_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

READABLE_SUFFIXES: dict[str, int] = {
    "k": 1_000,
    "m": 1_000_000,
    "b": 1_000_000_000,
    "t": 1_000_000_000_000,
}


def _to_number(text: str) -> float | None:
    text = text.strip()
    if not _NUMBER.match(text):
        return None
    number = float(text)
    return number if math.isfinite(number) else None


def parse_number(text: str, *, amount: int, minimum: int, maximum: int) -> float | None:
    """Parse a player-typed amount.

    Accepts plain numbers, ``min``/``max``/``half``/``full``, readable
    suffixes (``10k``, ``2.5m``, ``1b``, ``1t``), a percentage of ``maximum``
    (``30%``) and ``,`` or ``_`` separators. Returns ``None`` when nothing
    matches. ``half`` and ``full`` are relative to ``amount``.
    """
    text = text.strip().lower()
    number = _to_number(text)
    if number is not None:
        return number

    keywords = {
        "max": maximum,
        "min": minimum,
        "half": round(amount / 2),
        "full": amount,
    }
    if text in keywords:
        return keywords[text]

    if text and text[-1] in READABLE_SUFFIXES:
        given = _to_number(text[:-1])
        if given is not None:
            calculated = given * READABLE_SUFFIXES[text[-1]]
            if math.isfinite(calculated) and calculated.is_integer():
                return calculated

    if text.endswith("%"):
        percent = _to_number(text[:-1])
        if percent is not None:
            calculated = maximum * (percent / 100)
            if math.isfinite(calculated):
                return calculated

    for separator in (",", "_"):
        if separator in text:
            number = _to_number(text.replace(separator, ""))
            if number is not None:
                return number

    return None


def _has_decimal(number: float) -> bool:
    return math.trunc(number) != number


def _require(parsed: float | None) -> float:
    if parsed is None:
        raise InvalidAmount("It should be a valid or actual number.")
    return parsed


# --- Bet ---


def set_bet(player: PlayerEconomy, text: str) -> tuple[int, int]:
    """Change the bet. Returns ``(old, new)``."""
    parsed = _require(
        parse_number(
            text, amount=player.wallet.value, minimum=player.min_bet, maximum=player.max_bet
        )
    )
    if _has_decimal(parsed):
        raise InvalidAmount("Decimals are not allowed.")
    amount = int(parsed)
    old = player.bet.value
    if amount == old:
        raise InvalidAmount("That's already your bet.")
    validate_bet(player, amount)
    player.bet.set_value(amount)
    return old, amount


def validate_bet(player: PlayerEconomy, amount: int) -> None:
    if amount < player.min_bet or amount > player.max_bet:
        raise InvalidAmount(
            f"You can only bet between **{player.min_bet:,}** and **{player.max_bet:,}** coins."
        )


# --- Bank ---


def deposit(player: PlayerEconomy, text: str) -> int:
    if player.bank.is_max_value():
        raise InvalidAmount("Your bank is full.")
    room = player.bank.available_space
    parsed = _require(
        parse_number(
            text,
            amount=player.wallet.value,
            minimum=0,
            maximum=min(player.wallet.value, room),
        )
    )
    amount = math.trunc(parsed)
    if amount < 1:
        raise InvalidAmount("You need to deposit at least one coin.")
    if amount > room:
        raise InvalidAmount(f"You can only deposit up to **{room:,}** coins right now.")
    if amount > player.wallet.value:
        raise InvalidAmount(f"You only have **{player.wallet.value:,}** coins in your wallet.")
    player.wallet.sub_value(amount)
    player.bank.add_value(amount)
    return amount


def withdraw(player: PlayerEconomy, text: str) -> int:
    if player.bank.value < 1:
        raise InvalidAmount("You have none to withdraw.")
    parsed = _require(
        parse_number(text, amount=player.bank.value, minimum=0, maximum=player.bank.value)
    )
    amount = math.trunc(parsed)
    if amount < 1:
        raise InvalidAmount("You need to withdraw at least one coin.")
    if amount > player.bank.value:
        raise InvalidAmount(f"You only have **{player.bank.value:,}** in your bank.")
    player.wallet.add_value(amount)
    player.bank.sub_value(amount)
    return amount


# --- Share ---


def share(sender: PlayerEconomy, recipient: PlayerEconomy, text: str) -> int:
    if sender.id == recipient.id:
        raise InvalidAmount("You can't share coins with yourself.")
    if sender.wallet.value < 1:
        raise InvalidAmount("You have nothing to share!")
    parsed = parse_number(
        text, amount=sender.wallet.value, minimum=0, maximum=sender.wallet.value
    )
    if parsed is None or parsed < 1:
        raise InvalidAmount("Must be a valid number.")
    amount = math.trunc(parsed)
    if amount > sender.wallet.value:
        raise InvalidAmount(
            f"You can't share that many. You only have **{sender.wallet.value:,}** coins!"
        )
    sender.wallet.sub_value(amount)
    recipient.wallet.add_value(amount)
    return amount


# --- Energy / multiplier ---


def recharge_energy(player: PlayerEconomy, now: datetime) -> datetime:
    """Spend one energy to unlock games. Returns the new expiry."""
    if player.energy.energy < 1:
        raise InvalidAmount("You don't have any energy left to use.")
    player.energy.recharge(player.upgrades.tier, now)
    return player.energy.expire


def effective_multiplier(
    player: PlayerEconomy, parties: Iterable[Party], now: datetime | None = None
) -> int:
    """Personal multiplier (if active) plus every party the player belongs to."""
    active = set(player.party_ids)
    return player.multiplier.effective(now) + sum(p.multiplier for p in parties if p.id in active)
