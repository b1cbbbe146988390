"""Named failure conditions raised by the handlers.

Every condition has one ``ErrorKind`` member. Callers branch on
``err.kind``; ``err.message`` is only meant for people.
"""

from enum import Enum
from typing import ClassVar, FrozenSet, Optional


class ErrorKind(str, Enum):
    """Closed set of handler failure conditions"""

    NO_SETTINGS_CHAT = "NO_SETTINGS_CHAT"
    NO_CONTACT_CHAT = "NO_CONTACT_CHAT"
    NO_GREETING_SET = "NO_GREETING_SET"
    NO_START_SETTINGS = "NO_START_SETTINGS"
    CHAT_NOT_SUPERGROUP = "CHAT_NOT_SUPERGROUP"
    TOPICS_NOT_ENABLED = "TOPICS_NOT_ENABLED"
    CANNOT_MANAGE_TOPICS = "CANNOT_MANAGE_TOPICS"
    CHAT_ALREADY_SETTINGS_CHAT = "CHAT_ALREADY_SETTINGS_CHAT"
    CHAT_ALREADY_CONTACT_CHAT = "CHAT_ALREADY_CONTACT_CHAT"
    NOT_CONTACT_CHAT = "NOT_CONTACT_CHAT"
    NOT_SETTINGS_CHAT = "NOT_SETTINGS_CHAT"
    NOT_TOPIC_MESSAGE = "NOT_TOPIC_MESSAGE"
    NO_TOPIC_USER = "NO_TOPIC_USER"
    NO_MESSAGE = "NO_MESSAGE"
    NOT_START_SETTINGS = "NOT_START_SETTINGS"


MESSAGES = {
    ErrorKind.NO_SETTINGS_CHAT: "The bot has no settings chat yet.",
    ErrorKind.NO_CONTACT_CHAT: "The bot has no contact chat yet.",
    ErrorKind.NO_GREETING_SET: "No greeting message has been set.",
    ErrorKind.NO_START_SETTINGS: "No greeting settings topic has been set.",
    ErrorKind.CHAT_NOT_SUPERGROUP: "This chat is not a supergroup.",
    ErrorKind.TOPICS_NOT_ENABLED: "Topics are not enabled in this chat.",
    ErrorKind.CANNOT_MANAGE_TOPICS: "The bot must be an admin allowed to manage topics.",
    ErrorKind.CHAT_ALREADY_SETTINGS_CHAT: "This chat is already the settings chat.",
    ErrorKind.CHAT_ALREADY_CONTACT_CHAT: "This chat is already the contact chat.",
    ErrorKind.NOT_CONTACT_CHAT: "This command only works in the contact chat.",
    ErrorKind.NOT_SETTINGS_CHAT: "This command only works in the settings chat.",
    ErrorKind.NOT_TOPIC_MESSAGE: "This command only works inside a topic.",
    ErrorKind.NO_TOPIC_USER: "This topic does not belong to any user.",
    ErrorKind.NO_MESSAGE: "This update carries no message.",
    ErrorKind.NOT_START_SETTINGS: "This is not the greeting settings topic.",
}


class HandlerError(Exception):
    """Base exception for handler failures"""

    kinds: ClassVar[FrozenSet[ErrorKind]] = frozenset(ErrorKind)

    def __init__(self, kind: ErrorKind, message: Optional[str] = None):
        if kind not in self.kinds:
            raise ValueError(f"{type(self).__name__} cannot carry {kind.value}")
        self.kind = kind
        self.message = message or MESSAGES[kind]
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value})"


class SettingsError(HandlerError):
    """Raised by the settings chat registry"""

    kinds = frozenset(
        {
            ErrorKind.NO_SETTINGS_CHAT,
            ErrorKind.NOT_SETTINGS_CHAT,
            ErrorKind.CHAT_NOT_SUPERGROUP,
            ErrorKind.TOPICS_NOT_ENABLED,
            ErrorKind.CANNOT_MANAGE_TOPICS,
            ErrorKind.CHAT_ALREADY_SETTINGS_CHAT,
        }
    )


class ContactError(HandlerError):
    """Raised by the contact router"""

    kinds = frozenset(
        {
            ErrorKind.NO_CONTACT_CHAT,
            ErrorKind.CHAT_NOT_SUPERGROUP,
            ErrorKind.TOPICS_NOT_ENABLED,
            ErrorKind.CANNOT_MANAGE_TOPICS,
            ErrorKind.CHAT_ALREADY_CONTACT_CHAT,
            ErrorKind.NOT_CONTACT_CHAT,
            ErrorKind.NOT_TOPIC_MESSAGE,
            ErrorKind.NO_TOPIC_USER,
        }
    )


class StartError(HandlerError):
    """Raised by the greeting handler"""

    kinds = frozenset(
        {
            ErrorKind.NO_GREETING_SET,
            ErrorKind.NO_START_SETTINGS,
            ErrorKind.NOT_START_SETTINGS,
            ErrorKind.NOT_SETTINGS_CHAT,
            ErrorKind.NOT_TOPIC_MESSAGE,
            ErrorKind.NO_MESSAGE,
        }
    )
