"""Telegram side of the bot: update model, platform calls and handlers."""
