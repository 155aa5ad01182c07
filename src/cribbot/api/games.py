"""Game catalogue API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from cribbot.api.deps import SettingsDep
from cribbot.core.games.base import Game
from cribbot.core.games.registry import GAMES, get_game

router = APIRouter(prefix="/api/games", tags=["games"])


def _summary(game: Game) -> dict:
    return {
        "id": game.id,
        "name": game.name,
        "emoji": game.emoji,
        "description": game.description,
        "action_timeout": game.action_timeout,
    }


@router.get("")
async def list_games(settings: SettingsDep) -> dict:
    """Every playable game plus the per-session round limit."""
    return {
        "data": [_summary(game) for game in GAMES.values()],
        "session_interactions": settings.cribbot_session_interactions,
    }


@router.get("/{game_id}")
async def get_game_info(game_id: str) -> dict:
    game = get_game(game_id)
    if game is None:
        raise HTTPException(404, "Game not found")
    return {"data": _summary(game)}
