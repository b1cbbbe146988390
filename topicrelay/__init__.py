"""Telegram bot handlers for settings chats, contact topics and greetings."""

from topicrelay.errors import (
    ContactError,
    ErrorKind,
    HandlerError,
    SettingsError,
    StartError,
)

__all__ = [
    "ContactError",
    "ErrorKind",
    "HandlerError",
    "SettingsError",
    "StartError",
]
