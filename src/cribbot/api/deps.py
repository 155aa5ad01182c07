"""FastAPI dependencies: settings, the player repository and the economy store."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine

from cribbot.config import Settings
from cribbot.db.engine import get_session
from cribbot.db.repository import EconomyStore, Repository


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_engine(request: Request) -> AsyncEngine:
    """Get the database engine from app state."""
    return request.app.state.engine


async def get_repo(
    engine: Annotated[AsyncEngine, Depends(get_engine)],
) -> AsyncGenerator[Repository, None]:
    """Yield a repository bound to one request-scoped session."""
    async with get_session(engine) as session:
        yield Repository(session)


async def get_store(engine: Annotated[AsyncEngine, Depends(get_engine)]) -> EconomyStore:
    return EconomyStore(engine)


SettingsDep = Annotated[Settings, Depends(get_settings)]
RepoDep = Annotated[Repository, Depends(get_repo)]
StoreDep = Annotated[EconomyStore, Depends(get_store)]
