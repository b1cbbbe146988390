"""Greeting new users and configuring the greeting."""

from typing import Optional

from topicrelay.config import DEFAULT_GREETING
from topicrelay.database import keys
from topicrelay.database.kvstore import KeyValueStore
from topicrelay.errors import ErrorKind, StartError
from topicrelay.telegram.handlers.base import BaseHandler
from topicrelay.telegram.handlers.settings import SettingsRegistry
from topicrelay.telegram.platform import TelegramPlatform
from topicrelay.telegram.types import GreetingRef, Message, Update


class GreetingHandler(BaseHandler):
    """Replies to ``/start`` and keeps track of who started the bot.

    The greeting is either a default text or a copy of a message posted in
    the settings chat's greeting topic.
    """

    error_cls = StartError

    def __init__(
        self,
        kvstore: KeyValueStore,
        platform: TelegramPlatform,
        settings: SettingsRegistry,
        default_greeting: str = DEFAULT_GREETING,
    ):
        super().__init__(kvstore, platform)
        self.settings = settings
        self.default_greeting = default_greeting

    async def get_greeting(self, bot_id: int) -> GreetingRef:
        """Return the message used as greeting.

        Raises:
            StartError: NO_GREETING_SET if no greeting was configured
        """
        data = await self.kvstore.get(keys.greeting(bot_id))
        if data is None:
            raise StartError(ErrorKind.NO_GREETING_SET)
        return GreetingRef.model_validate(data)

    async def get_start_settings_thread_id(self, bot_id: int) -> int:
        """Return the settings chat topic where the greeting is configured.

        Raises:
            StartError: NO_START_SETTINGS if the topic was not designated
        """
        thread_id = await self.kvstore.get(keys.start_settings_thread_id(bot_id))
        if thread_id is None:
            raise StartError(ErrorKind.NO_START_SETTINGS)
        return thread_id

    async def _settings_chat_message(self, update: Update) -> Message:
        if update.message is None:
            raise StartError(ErrorKind.NO_MESSAGE)

        settings_chat_id = await self.settings.get_settings_chat_id(update.bot_id)
        if update.message.chat.id != settings_chat_id:
            raise StartError(ErrorKind.NOT_SETTINGS_CHAT)
        return update.message

    async def set_start_settings_thread_id(self, update: Update) -> int:
        """Designate the topic the update was sent in as greeting topic.

        Raises:
            StartError: NO_MESSAGE, NOT_SETTINGS_CHAT or NOT_TOPIC_MESSAGE
            SettingsError: NO_SETTINGS_CHAT
        """
        message = await self._settings_chat_message(update)
        if not message.is_topic_message:
            raise StartError(ErrorKind.NOT_TOPIC_MESSAGE)

        await self.kvstore.set(keys.start_settings_thread_id(update.bot_id), message.thread_id)
        self.log_event("greeting topic change", {"bot": update.bot_id, "topic": message.thread_id})
        return message.thread_id

    async def is_start_settings_update(self, update: Update) -> bool:
        """Check if the update was posted in the greeting topic."""
        message = update.message
        if message is None or not message.is_topic_message:
            return False
        if not await self.settings.is_settings_chat_update(update):
            return False
        thread_id = await self.kvstore.get(keys.start_settings_thread_id(update.bot_id))
        return thread_id is not None and message.thread_id == thread_id

    async def set_greeting(self, update: Update) -> GreetingRef:
        """Use the update's message as the greeting.

        Raises:
            StartError: NO_MESSAGE, NOT_SETTINGS_CHAT, NO_START_SETTINGS
                or NOT_START_SETTINGS
            SettingsError: NO_SETTINGS_CHAT
        """
        message = await self._settings_chat_message(update)

        thread_id = await self.get_start_settings_thread_id(update.bot_id)
        if message.thread_id != thread_id:
            raise StartError(ErrorKind.NOT_START_SETTINGS)

        greeting = GreetingRef(chat_id=message.chat.id, message_id=message.id)
        await self.kvstore.set(keys.greeting(update.bot_id), greeting.model_dump())
        self.log_event("greeting change", greeting.model_dump())
        return greeting

    async def greet(self, update: Update) -> Optional[int]:
        """Greet the user and remember them.

        Only replies to private messages.

        Returns:
            Id of the greeting message sent, if any
        """
        if not update.is_private_message:
            return None

        user_chat_id = update.message.chat.id
        self.log_event("greeting", {"user": user_chat_id})

        try:
            greeting = await self.get_greeting(update.bot_id)
        except StartError as e:
            if e.kind is not ErrorKind.NO_GREETING_SET:
                raise
            sent_id = await self.platform.send_message(user_chat_id, self.default_greeting)
        else:
            sent_id = await self.platform.copy_message(
                user_chat_id, greeting.chat_id, greeting.message_id
            )

        await self.settings.add_user(update.bot_id, user_chat_id)
        return sent_id
