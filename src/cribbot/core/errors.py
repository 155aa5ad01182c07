"""Exceptions raised by the game engine and the economy commands."""

from __future__ import annotations


class CribError(Exception):
    """Base class for errors the bot renders back to the player."""


class GuardFailure(CribError):
    """A session can no longer continue (energy expired, wallet empty or full...)."""


class ActionTimeout(CribError):
    """The player did not press a button before the deadline."""


class InvalidAmount(CribError, ValueError):
    """A command argument was not a usable coin amount."""
