"""Telethon-backed implementation of the platform calls the handlers make."""

from typing import Any, Optional, Union

from loguru import logger
from telethon import TelegramClient, functions, types, utils
from telethon.events import NewMessage

from topicrelay.telegram.types import (
    Chat,
    ChatInfo,
    ChatMember,
    ChatType,
    MemberStatus,
    Message,
    Update,
)


def chat_type_of(entity: Any) -> ChatType:
    """Map a telethon chat entity to its chat type."""
    if isinstance(entity, types.User):
        return ChatType.PRIVATE
    if isinstance(entity, (types.Channel, types.ChannelForbidden)):
        return ChatType.SUPERGROUP if entity.megagroup else ChatType.CHANNEL
    return ChatType.GROUP


def topic_id_of(message: Any) -> Optional[int]:
    """Return the forum topic a message was posted in, if any."""
    reply_to = getattr(message, "reply_to", None)
    if not isinstance(reply_to, types.MessageReplyHeader) or not reply_to.forum_topic:
        return None
    # Replies inside a topic point at the topic through reply_to_top_id
    return reply_to.reply_to_top_id or reply_to.reply_to_msg_id


async def update_from_event(event: NewMessage.Event, bot_id: int) -> Update:
    """Convert a telethon ``NewMessage`` event into an ``Update``.

    Args:
        event: The message event
        bot_id: Id of the bot receiving the event

    Returns:
        The update with marked chat ids
    """
    chat = Chat(id=event.chat_id, type=chat_type_of(await event.get_chat()))

    message = event.message
    if message is None:
        return Update(bot_id=bot_id, chat=chat)

    sender = await event.get_sender()
    sender_name = utils.get_display_name(sender) if sender else ""
    thread_id = topic_id_of(message)

    return Update(
        bot_id=bot_id,
        chat=chat,
        message=Message(
            id=message.id,
            chat=chat,
            thread_id=thread_id,
            is_topic_message=thread_id is not None,
            text=message.message,
            sender_id=event.sender_id,
            sender_name=sender_name or None,
        ),
    )


class TelegramPlatform:
    """Chat lookups, topic creation and message copying over Telethon."""

    def __init__(self, client: TelegramClient):
        """Initialize the platform.

        Args:
            client: The Telegram client instance
        """
        self.client = client

    async def get_chat(self, chat_id: int) -> ChatInfo:
        entity = await self.client.get_entity(chat_id)
        return ChatInfo(
            id=chat_id,
            type=chat_type_of(entity),
            is_forum=bool(getattr(entity, "forum", False)),
            title=getattr(entity, "title", None),
        )

    async def get_bot_member(self, chat_id: int) -> ChatMember:
        """Return the bot's own role and topic rights in a chat."""
        return await self.get_member(chat_id, "me")

    async def get_member(self, chat_id: int, user_id: Union[int, str]) -> ChatMember:
        """Return a member's role and topic rights in a chat."""
        permissions = await self.client.get_permissions(chat_id, user_id)

        if permissions.is_creator:
            status = MemberStatus.CREATOR
        elif permissions.is_admin:
            status = MemberStatus.ADMINISTRATOR
        elif permissions.has_left:
            status = MemberStatus.LEFT
        elif permissions.is_banned:
            rights = getattr(permissions.participant, "banned_rights", None)
            if rights is not None and rights.view_messages:
                status = MemberStatus.KICKED
            else:
                status = MemberStatus.RESTRICTED
        else:
            status = MemberStatus.MEMBER

        admin_rights = getattr(permissions.participant, "admin_rights", None)
        return ChatMember(
            status=status,
            can_manage_topics=bool(admin_rights and admin_rights.manage_topics),
        )

    async def create_topic(self, chat_id: int, title: str) -> int:
        """Create a forum topic and return its id."""
        result = await self.client(
            functions.channels.CreateForumTopicRequest(channel=chat_id, title=title)
        )

        for update in getattr(result, "updates", []):
            if not isinstance(update, (types.UpdateNewChannelMessage, types.UpdateNewMessage)):
                continue
            message = update.message
            if isinstance(message, types.MessageService) and isinstance(
                message.action, types.MessageActionTopicCreate
            ):
                logger.debug(f"Created topic {message.id} in chat {chat_id}")
                return message.id

        raise RuntimeError(f"Topic creation in chat {chat_id} returned no topic")

    async def copy_message(
        self,
        to_chat_id: int,
        from_chat_id: int,
        message_id: int,
        thread_id: Optional[int] = None,
    ) -> int:
        """Send a copy of a message, optionally into a topic.

        Returns:
            Id of the new message
        """
        message = await self.client.get_messages(from_chat_id, ids=message_id)
        if message is None:
            raise ValueError(f"Message {message_id} not found in chat {from_chat_id}")

        sent = await self.client.send_message(to_chat_id, message, reply_to=thread_id)
        return sent.id

    async def send_message(
        self, chat_id: int, text: str, thread_id: Optional[int] = None
    ) -> int:
        sent = await self.client.send_message(chat_id, text, reply_to=thread_id)
        return sent.id
