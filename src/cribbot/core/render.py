"""Plain message content produced by games and the play flow.

Games never touch Discord objects. They describe what to show with these
dataclasses and the Discord layer (``cribbot.discord.embeds``) converts
them into embeds and component views.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum, StrEnum


class Color(IntEnum):
    BLURPLE = 0x5865F2
    GREEN = 0x57F287
    RED = 0xED4245
    YELLOW = 0xFEE75C
    GOLD = 0xF1C40F
    DARK = 0x2F3136


class ButtonStyle(StrEnum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    SUCCESS = "success"
    DANGER = "danger"


@dataclass(frozen=True)
class Button:
    custom_id: str
    label: str
    style: ButtonStyle = ButtonStyle.PRIMARY
    disabled: bool = False
    emoji: str | None = None


@dataclass(frozen=True)
class SelectOption:
    label: str
    value: str
    description: str | None = None
    emoji: str | None = None
    default: bool = False


@dataclass(frozen=True)
class Select:
    custom_id: str
    options: list[SelectOption]
    placeholder: str | None = None
    disabled: bool = False


Component = Button | Select


@dataclass(frozen=True)
class Field:
    name: str
    value: str
    inline: bool = False


@dataclass
class Embed:
    title: str | None = None
    description: str | None = None
    color: Color | None = None
    author: str | None = None
    footer: str | None = None
    fields: list[Field] = field(default_factory=list)


@dataclass
class MessageContent:
    content: str | None = None
    embeds: list[Embed] = field(default_factory=list)
    rows: list[list[Component]] = field(default_factory=list)


@dataclass(frozen=True)
class Action:
    """A component press delivered back from the transport."""

    custom_id: str
    values: tuple[str, ...] = ()


def bold(text: object) -> str:
    return f"**{text}**"


def code(text: object) -> str:
    return f"`{text}`"


def coins(amount: int) -> str:
    return f"⏣ {amount:,}"


def disabled_rows(rows: list[list[Component]]) -> list[list[Component]]:
    """Copy ``rows`` with every component disabled (used once a round resolves)."""
    return [[replace(component, disabled=True) for component in row] for row in rows]


def game_ended(reason: str) -> MessageContent:
    return MessageContent(
        embeds=[Embed(title="Game Ended", description=reason, color=Color.RED)]
    )
