"""Player profile and leaderboard API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from cribbot.api.deps import RepoDep, StoreDep
from cribbot.db.repository import LeaderboardKind
from cribbot.models.player import PlayerEconomy
from cribbot.models.values import BankSpace, Energy, Wallet

router = APIRouter(prefix="/api", tags=["players"])


def _profile(player: PlayerEconomy) -> dict:
    """Flatten a player document with its derived limits."""
    tier = player.upgrades.tier
    mastery = player.upgrades.mastery
    return {
        "id": player.id,
        "wallet": player.wallet.value,
        "wallet_limit": Wallet.max_value(mastery),
        "bank": player.bank.value,
        "bank_space": player.bank.space.value,
        "bank_space_limit": BankSpace.max_value(mastery),
        "net_worth": player.net_worth,
        "bet": player.bet.value,
        "min_bet": player.min_bet,
        "max_bet": player.max_bet,
        "energy": player.energy.energy,
        "energy_limit": Energy.max_energy(tier),
        "stars": player.energy.value,
        "energy_expire": player.energy.expire.isoformat(),
        "multiplier": player.multiplier.effective(),
        "tier": tier,
        "mastery": mastery,
        "parties": player.party_ids,
        "games": {
            game_id: {
                "played": stats.played,
                "wins": stats.wins.value,
                "loses": stats.loses.value,
                "ties": stats.ties.value,
                "win_rate": stats.win_rate,
                "profit": stats.profit,
                "win_streak": stats.wins.display_streak,
                "last_played": stats.last_played.isoformat() if stats.last_played else None,
            }
            for game_id, stats in player.games.items()
        },
        "advancements": [a.id for a in player.unlocked_advancements],
    }


@router.get("/players/{player_id}")
async def get_player(player_id: str, repo: RepoDep) -> dict:
    """Get one player's economy profile."""
    player = await repo.get_player(player_id)
    if player is None:
        raise HTTPException(404, "Player not found")
    return {"data": _profile(player)}


@router.get("/leaderboard")
async def get_leaderboard(
    store: StoreDep,
    kind: LeaderboardKind = LeaderboardKind.WALLET,
    limit: int = Query(10, ge=1, le=50),
) -> dict:
    """Top players by wallet, bank or stars."""
    players = await store.top_players(kind, limit)
    return {
        "data": [
            {
                "rank": rank,
                "id": p.id,
                "wallet": p.wallet.value,
                "bank": p.bank.value,
                "stars": p.energy.value,
            }
            for rank, p in enumerate(players, start=1)
        ]
    }
