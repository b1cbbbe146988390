"""Settings chat designation and the bot's user list."""

from typing import List, Optional

from topicrelay.database import keys
from topicrelay.errors import ErrorKind, SettingsError
from topicrelay.telegram.handlers.base import BaseHandler
from topicrelay.telegram.types import ChatType, Update


class SettingsRegistry(BaseHandler):
    """Per-bot settings chat and user list."""

    error_cls = SettingsError

    async def _find_settings_chat_id(self, bot_id: int) -> Optional[int]:
        return await self.kvstore.get(keys.settings_chat_id(bot_id))

    async def get_settings_chat_id(self, bot_id: int) -> int:
        """Return the bot's settings chat.

        Raises:
            SettingsError: NO_SETTINGS_CHAT if none was set
        """
        settings_chat_id = await self._find_settings_chat_id(bot_id)
        if settings_chat_id is None:
            raise SettingsError(ErrorKind.NO_SETTINGS_CHAT)
        return settings_chat_id

    async def set_settings_chat_id(self, update: Update) -> int:
        """Make the update's chat the bot's settings chat.

        Raises:
            SettingsError: CHAT_NOT_SUPERGROUP, TOPICS_NOT_ENABLED,
                CANNOT_MANAGE_TOPICS or CHAT_ALREADY_SETTINGS_CHAT
        """
        chat_id = await self.validate_designation(update)

        if chat_id == await self._find_settings_chat_id(update.bot_id):
            raise SettingsError(ErrorKind.CHAT_ALREADY_SETTINGS_CHAT)

        await self.kvstore.set(keys.settings_chat_id(update.bot_id), chat_id)
        self.log_event("settings chat change", {"bot": update.bot_id, "chat": chat_id})
        return chat_id

    async def is_settings_chat_update(self, update: Update) -> bool:
        """Check if the update was received from the bot's settings chat."""
        if update.chat is None or update.chat.type is not ChatType.SUPERGROUP:
            return False
        return update.chat.id == await self._find_settings_chat_id(update.bot_id)

    async def get_users(self, bot_id: int) -> List[int]:
        users = await self.kvstore.get(keys.users(bot_id))
        return users or []

    async def set_users(self, bot_id: int, users: List[int]) -> None:
        """Replace the bot's user list.

        Raises:
            SettingsError: NO_SETTINGS_CHAT if the bot has no settings chat
        """
        await self.get_settings_chat_id(bot_id)
        await self.kvstore.set(keys.users(bot_id), list(users))

    async def add_user(self, bot_id: int, user_chat_id: int) -> bool:
        """Append a user to the list unless already there.

        Returns:
            True if the user was added
        """
        users = await self.get_users(bot_id)
        if user_chat_id in users:
            return False

        await self.kvstore.set(keys.users(bot_id), [*users, user_chat_id])
        self.logger.info(f"Recorded user {user_chat_id} for bot {bot_id}")
        return True
