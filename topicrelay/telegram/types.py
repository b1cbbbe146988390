"""Platform-neutral view of the updates and chats the handlers work with."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ChatType(str, Enum):
    """Kind of chat an update comes from"""

    PRIVATE = "private"
    GROUP = "group"
    SUPERGROUP = "supergroup"
    CHANNEL = "channel"


class MemberStatus(str, Enum):
    """Role of a member inside a chat"""

    CREATOR = "creator"
    ADMINISTRATOR = "administrator"
    MEMBER = "member"
    RESTRICTED = "restricted"
    LEFT = "left"
    KICKED = "kicked"


@dataclass(frozen=True)
class Chat:
    id: int
    type: ChatType


@dataclass(frozen=True)
class Message:
    """A message as seen by the handlers"""

    id: int
    chat: Chat
    thread_id: Optional[int] = None  # Topic the message was posted in
    is_topic_message: bool = False
    text: Optional[str] = None
    sender_id: Optional[int] = None
    sender_name: Optional[str] = None


@dataclass(frozen=True)
class Update:
    """An inbound update addressed to the bot ``bot_id``"""

    bot_id: int
    chat: Optional[Chat] = None
    message: Optional[Message] = None

    @property
    def is_private_message(self) -> bool:
        return self.message is not None and self.message.chat.type is ChatType.PRIVATE

    @property
    def command(self) -> Optional[str]:
        """Bot command at the start of the message text, without the slash."""
        if not self.message or not self.message.text:
            return None
        text = self.message.text.strip()
        if not text.startswith("/"):
            return None
        # "/ban@SomeBot extra" -> "ban"
        words = text[1:].split(maxsplit=1)
        if not words:
            return None
        return words[0].split("@", 1)[0].lower() or None


@dataclass(frozen=True)
class ChatInfo:
    """Chat metadata fetched from the platform"""

    id: int
    type: ChatType
    is_forum: bool = False
    title: Optional[str] = None


@dataclass(frozen=True)
class ChatMember:
    """A member's role in a chat and whether it may manage topics"""

    status: MemberStatus
    can_manage_topics: bool = False


class GreetingRef(BaseModel):
    """Reference to the message copied to users as a greeting"""

    model_config = ConfigDict(frozen=True)

    chat_id: int
    message_id: int
