"""Contact chat routing.

Every user writing to the bot in private gets a topic of their own in the
contact chat. Messages from the user are copied into that topic, and
messages posted in the topic are copied back to the user.

The topic lookup in ``resolve_topic_for_user`` is read, create, write with
no locking: two first messages from one user processed at the same time
can each create a topic.
"""

from typing import List, Optional

from topicrelay.config import render_topic_title
from topicrelay.database import keys
from topicrelay.database.kvstore import KeyValueStore
from topicrelay.errors import ContactError, ErrorKind
from topicrelay.telegram.handlers.base import BaseHandler
from topicrelay.telegram.platform import TelegramPlatform
from topicrelay.telegram.types import ChatType, Update


class ContactRouter(BaseHandler):
    """Relays messages between users and their contact chat topics."""

    error_cls = ContactError

    def __init__(
        self,
        kvstore: KeyValueStore,
        platform: TelegramPlatform,
        topic_title_template: str = "{name}",
    ):
        super().__init__(kvstore, platform)
        self.topic_title_template = topic_title_template

    async def _find_contact_chat_id(self, bot_id: int) -> Optional[int]:
        return await self.kvstore.get(keys.contact_chat_id(bot_id))

    async def get_contact_chat_id(self, bot_id: int) -> int:
        """Return the bot's contact chat.

        Raises:
            ContactError: NO_CONTACT_CHAT if none was set
        """
        contact_chat_id = await self._find_contact_chat_id(bot_id)
        if contact_chat_id is None:
            raise ContactError(ErrorKind.NO_CONTACT_CHAT)
        return contact_chat_id

    async def set_contact_chat_id(self, update: Update) -> int:
        """Make the update's chat the bot's contact chat.

        Raises:
            ContactError: CHAT_NOT_SUPERGROUP, TOPICS_NOT_ENABLED,
                CANNOT_MANAGE_TOPICS or CHAT_ALREADY_CONTACT_CHAT
        """
        chat_id = await self.validate_designation(update)

        if chat_id == await self._find_contact_chat_id(update.bot_id):
            raise ContactError(ErrorKind.CHAT_ALREADY_CONTACT_CHAT)

        await self.kvstore.set(keys.contact_chat_id(update.bot_id), chat_id)
        self.log_event("contact chat change", {"bot": update.bot_id, "chat": chat_id})
        return chat_id

    async def is_contact_chat_update(self, update: Update) -> bool:
        """Check if the update was received from the bot's contact chat."""
        if update.chat is None or update.chat.type is not ChatType.SUPERGROUP:
            return False
        return update.chat.id == await self._find_contact_chat_id(update.bot_id)

    async def resolve_topic_for_user(
        self,
        bot_id: int,
        contact_chat_id: int,
        user_chat_id: int,
        user_name: Optional[str] = None,
    ) -> int:
        """Return the user's topic, creating it on first contact."""
        topic_id = await self.kvstore.get(
            keys.topic_by_user(bot_id, contact_chat_id, user_chat_id)
        )
        if topic_id is not None:
            return topic_id

        title = render_topic_title(self.topic_title_template, user_name, user_chat_id)
        topic_id = await self.platform.create_topic(contact_chat_id, title)

        await self.kvstore.set(
            keys.topic_by_user(bot_id, contact_chat_id, user_chat_id), topic_id
        )
        await self.kvstore.set(
            keys.user_by_topic(bot_id, contact_chat_id, topic_id), user_chat_id
        )
        self.log_event(
            "topic creation",
            {"chat": contact_chat_id, "topic": topic_id, "user": user_chat_id},
        )
        return topic_id

    async def resolve_user_for_topic(
        self, bot_id: int, contact_chat_id: int, topic_id: int
    ) -> int:
        """Return the user owning a topic.

        Raises:
            ContactError: NO_TOPIC_USER if the topic has no recorded owner
        """
        user_chat_id = await self.kvstore.get(
            keys.user_by_topic(bot_id, contact_chat_id, topic_id)
        )
        if user_chat_id is None:
            raise ContactError(ErrorKind.NO_TOPIC_USER)
        return user_chat_id

    async def message_to_admin(self, update: Update) -> None:
        """Copy a user's private message into their contact chat topic.

        Non-private messages and messages from banned users are ignored.

        Raises:
            ContactError: NO_CONTACT_CHAT if the bot has no contact chat
        """
        if not update.is_private_message:
            return

        message = update.message
        user_chat_id = message.chat.id
        if await self.is_user_banned(update.bot_id, user_chat_id):
            self.logger.debug(f"Ignoring message from banned user {user_chat_id}")
            return

        contact_chat_id = await self.get_contact_chat_id(update.bot_id)
        topic_id = await self.resolve_topic_for_user(
            update.bot_id, contact_chat_id, user_chat_id, message.sender_name
        )
        await self.platform.copy_message(
            contact_chat_id, message.chat.id, message.id, thread_id=topic_id
        )
        self.log_event("message to admin", {"user": user_chat_id, "topic": topic_id})

    async def message_to_user(self, update: Update) -> None:
        """Copy a message posted in a contact chat topic to the topic's user.

        Messages outside the contact chat's topics are ignored, as is every
        message while the bot has no contact chat.

        Raises:
            ContactError: NO_TOPIC_USER if the topic has no recorded owner
        """
        message = update.message
        if message is None or message.chat.type is not ChatType.SUPERGROUP:
            return

        contact_chat_id = await self._find_contact_chat_id(update.bot_id)
        if contact_chat_id is None or message.chat.id != contact_chat_id:
            return
        if not message.is_topic_message:
            return

        user_chat_id = await self.resolve_user_for_topic(
            update.bot_id, contact_chat_id, message.thread_id
        )
        await self.platform.copy_message(user_chat_id, message.chat.id, message.id)
        self.log_event("message to user", {"topic": message.thread_id, "user": user_chat_id})

    async def _topic_user(self, update: Update) -> int:
        """Resolve the user of the contact chat topic a command was sent in."""
        contact_chat_id = await self.get_contact_chat_id(update.bot_id)

        message = update.message
        if message is None or message.chat.id != contact_chat_id:
            raise ContactError(ErrorKind.NOT_CONTACT_CHAT)
        if not message.is_topic_message:
            raise ContactError(ErrorKind.NOT_TOPIC_MESSAGE)

        return await self.resolve_user_for_topic(
            update.bot_id, contact_chat_id, message.thread_id
        )

    async def ban_user(self, update: Update) -> int:
        """Stop relaying messages from the user owning the command's topic.

        Returns:
            The banned user's chat id

        Raises:
            ContactError: NO_CONTACT_CHAT, NOT_CONTACT_CHAT,
                NOT_TOPIC_MESSAGE or NO_TOPIC_USER
        """
        user_chat_id = await self._topic_user(update)
        await self.kvstore.set(keys.banned_user(update.bot_id, user_chat_id), True)
        self.log_event("ban", {"bot": update.bot_id, "user": user_chat_id})
        return user_chat_id

    async def unban_user(self, update: Update) -> int:
        """Resume relaying messages from the user owning the command's topic.

        Returns:
            The unbanned user's chat id

        Raises:
            ContactError: NO_CONTACT_CHAT, NOT_CONTACT_CHAT,
                NOT_TOPIC_MESSAGE or NO_TOPIC_USER
        """
        user_chat_id = await self._topic_user(update)
        await self.kvstore.delete(keys.banned_user(update.bot_id, user_chat_id))
        self.log_event("unban", {"bot": update.bot_id, "user": user_chat_id})
        return user_chat_id

    async def is_user_banned(self, bot_id: int, user_chat_id: int) -> bool:
        return bool(await self.kvstore.get(keys.banned_user(bot_id, user_chat_id)))

    async def list_banned_users(self, bot_id: int) -> List[int]:
        """Return the chat ids of every banned user, in ascending order."""
        prefix = keys.banned_users(bot_id)
        return [
            key[len(prefix)]
            async for key, banned in self.kvstore.scan_items(prefix)
            if banned
        ]
