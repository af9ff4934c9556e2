"""Feature cogs. Every ``*_cog`` module here is loaded by ``src.bot.loader``."""
