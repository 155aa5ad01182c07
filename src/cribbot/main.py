"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from cribbot.api.games import router as games_router
from cribbot.api.players import router as players_router
from cribbot.config import Settings
from cribbot.db.engine import create_engine, create_tables

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: create engine/tables, optionally start the Discord bot."""
    settings: Settings = app.state.settings
    engine = create_engine(settings.database_url)
    await create_tables(engine)
    app.state.engine = engine

    # Start Discord bot if configured
    discord_bot = None
    from cribbot.discord.bot import is_discord_enabled

    if is_discord_enabled(settings):
        from cribbot.discord.bot import start_discord_bot

        discord_bot = await start_discord_bot(settings, engine)
        app.state.discord_bot = discord_bot
        logger.info("discord_bot_integration_started")
    else:
        logger.info("discord_bot_integration_disabled")

    yield

    # Shutdown Discord bot if running
    if discord_bot is not None:
        await discord_bot.close()
        logger.info("discord_bot_integration_stopped")

    await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the cribbot FastAPI application."""
    settings = settings or Settings()

    logging.basicConfig(
        level=getattr(logging, settings.cribbot_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="cribbot",
        version="0.1.0",
        description="Discord casino bot: games of chance over a persistent coin economy",
        docs_url="/docs" if settings.cribbot_env != "production" else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # API routers
    app.include_router(players_router)
    app.include_router(games_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "env": settings.cribbot_env}

    return app


app = create_app()


def run() -> None:
    """Serve the API (and the bot, via the lifespan) with uvicorn."""
    settings: Settings = app.state.settings
    uvicorn.run(
        "cribbot.main:app",
        host=settings.cribbot_host,
        port=settings.cribbot_port,
        log_level=settings.cribbot_log_level.lower(),
    )
