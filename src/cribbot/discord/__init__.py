"""Discord bot integration for cribbot.

The bot runs in-process with FastAPI, sharing the same event loop. Games
and economy commands live in ``cribbot.core``; this package only turns
slash commands and component presses into calls on that core.

Optional: if DISCORD_BOT_TOKEN is not set, the app runs without Discord.
"""
