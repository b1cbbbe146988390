"""Telegram bot handlers package."""

from topicrelay.telegram.handlers.base import BaseHandler
from topicrelay.telegram.handlers.contact import ContactRouter
from topicrelay.telegram.handlers.settings import SettingsRegistry
from topicrelay.telegram.handlers.start import GreetingHandler

__all__ = [
    "BaseHandler",
    "ContactRouter",
    "GreetingHandler",
    "SettingsRegistry",
]
