"""Base class for the bot's handlers."""

from typing import Dict, Optional, Type

from topicrelay.database.kvstore import KeyValueStore
from topicrelay.errors import ErrorKind, HandlerError
from topicrelay.telegram.platform import TelegramPlatform
from topicrelay.telegram.types import ChatType, MemberStatus, Update
from topicrelay.utils import get_logger


class BaseHandler:
    """State and helpers shared by all handlers."""

    error_cls: Type[HandlerError] = HandlerError

    def __init__(self, kvstore: KeyValueStore, platform: TelegramPlatform):
        """Initialize the handler.

        Args:
            kvstore: Store holding the handler's state
            platform: Platform used for chat lookups and message copies
        """
        self.kvstore = kvstore
        self.platform = platform
        self.logger = get_logger(type(self).__name__)

    def log_event(self, event_type: str, details: Optional[Dict] = None) -> None:
        """Log an event with optional details.

        Args:
            event_type: Type of the event
            details: Optional dictionary with additional details
        """
        log_msg = f"Handling {event_type}"
        if details:
            log_msg += f": {details}"
        self.logger.info(log_msg)

    async def validate_designation(self, update: Update) -> int:
        """Check that the update's chat can become a designated chat.

        The chat must be a supergroup with topics enabled, and the bot must
        be an admin allowed to manage topics. Checks run in that order and
        stop at the first failure.

        Returns:
            The chat id
        """
        chat = update.chat
        if chat is None or chat.type is not ChatType.SUPERGROUP:
            raise self.error_cls(ErrorKind.CHAT_NOT_SUPERGROUP)

        chat_info = await self.platform.get_chat(chat.id)
        if not chat_info.is_forum:
            raise self.error_cls(ErrorKind.TOPICS_NOT_ENABLED)

        member = await self.platform.get_bot_member(chat.id)
        if member.status is not MemberStatus.ADMINISTRATOR or not member.can_manage_topics:
            raise self.error_cls(ErrorKind.CANNOT_MANAGE_TOPICS)

        return chat.id
