"""Main Telegram bot module."""

from collections.abc import Awaitable, Callable
from typing import Dict, Optional

from telethon import TelegramClient, events

from topicrelay.config import Settings
from topicrelay.database.kvstore import KeyValueStore
from topicrelay.errors import ContactError, ErrorKind, HandlerError, SettingsError
from topicrelay.telegram.handlers import ContactRouter, GreetingHandler, SettingsRegistry
from topicrelay.telegram.platform import TelegramPlatform, update_from_event
from topicrelay.telegram.types import MemberStatus, Update
from topicrelay.utils import get_logger

Reply = Callable[[str], Awaitable[object]]


class Bot:
    """Telegram bot class."""

    def __init__(
        self,
        client: TelegramClient,
        kvstore: KeyValueStore,
        settings: Settings,
        platform: Optional[TelegramPlatform] = None,
    ):
        """Initialize the bot.

        Args:
            client: The Telegram client instance
            kvstore: Store holding the handlers' state
            settings: Application settings
            platform: Platform wrapper, built from ``client`` when omitted
        """
        self.client = client
        self.platform = platform or TelegramPlatform(client)
        self.registry = SettingsRegistry(kvstore, self.platform)
        self.contact = ContactRouter(
            kvstore, self.platform, topic_title_template=settings.topic_title_template
        )
        self.start = GreetingHandler(
            kvstore,
            self.platform,
            self.registry,
            default_greeting=settings.default_greeting,
        )
        self.bot_id: Optional[int] = None
        self.logger = get_logger(type(self).__name__)

        self.commands: Dict[str, Callable[[Update, Reply], Awaitable[None]]] = {
            "settings_chat": self._handle_settings_chat,
            "contact_chat": self._handle_contact_chat,
            "start_settings": self._handle_start_settings,
            "ban": self._handle_ban,
            "unban": self._handle_unban,
            "banned": self._handle_banned,
            "users": self._handle_users,
        }

    async def setup_handlers(self) -> None:
        """Register all message handlers."""
        me = await self.client.get_me()
        self.bot_id = me.id

        @self.client.on(events.NewMessage(func=lambda e: e.is_private))
        async def handle_private(event):
            await self.handle_private(await update_from_event(event, self.bot_id))

        @self.client.on(events.NewMessage(func=lambda e: e.is_group))
        async def handle_group(event):
            await self.handle_group(await update_from_event(event, self.bot_id), event.reply)

        self.logger.info(f"All handlers registered successfully for bot {self.bot_id}")

    async def handle_private(self, update: Update) -> None:
        """Greet on /start, relay everything else to the contact chat."""
        try:
            if update.command == "start":
                await self.start.greet(update)
            else:
                await self.contact.message_to_admin(update)
        except HandlerError as e:
            # Users never see configuration problems
            self.logger.warning(f"Private message not handled: {e!r}")

    async def handle_group(self, update: Update, reply: Reply) -> None:
        """Run commands, update the greeting or relay staff replies."""
        try:
            command = update.command
            if command is not None:
                handler = self.commands.get(command)
                if handler and await self._sent_by_admin(update):
                    self.logger.info(f"Handling command: /{command}")
                    await handler(update, reply)
                elif handler:
                    self.logger.info(
                        f"Ignoring /{command} from non-admin {update.message.sender_id}"
                    )
                return

            if await self.start.is_start_settings_update(update):
                await self.start.set_greeting(update)
                await reply("Greeting updated.")
            else:
                await self.contact.message_to_user(update)
        except HandlerError as e:
            self.logger.warning(f"Reporting {e!r} in chat {update.chat.id if update.chat else None}")
            await reply(e.message)
        except Exception as e:
            self.logger.error(f"Error handling group message: {str(e)}")
            raise

    async def _sent_by_admin(self, update: Update) -> bool:
        """Check that a command comes from an admin of its chat."""
        message = update.message
        if message is None or message.sender_id is None:
            return False
        # Anonymous admins post as the chat itself
        if message.sender_id == message.chat.id:
            return True

        member = await self.platform.get_member(message.chat.id, message.sender_id)
        return member.status in (MemberStatus.CREATOR, MemberStatus.ADMINISTRATOR)

    async def _handle_settings_chat(self, update: Update, reply: Reply) -> None:
        await self.registry.set_settings_chat_id(update)
        await reply("This chat is now the settings chat.")

    async def _handle_contact_chat(self, update: Update, reply: Reply) -> None:
        await self.contact.set_contact_chat_id(update)
        await reply("This chat is now the contact chat.")

    async def _handle_start_settings(self, update: Update, reply: Reply) -> None:
        await self.start.set_start_settings_thread_id(update)
        await reply("Greeting topic set. The next message posted here becomes the greeting.")

    async def _handle_ban(self, update: Update, reply: Reply) -> None:
        user_chat_id = await self.contact.ban_user(update)
        await reply(f"User {user_chat_id} is banned.")

    async def _handle_unban(self, update: Update, reply: Reply) -> None:
        user_chat_id = await self.contact.unban_user(update)
        await reply(f"User {user_chat_id} is no longer banned.")

    async def _handle_banned(self, update: Update, reply: Reply) -> None:
        if not await self.contact.is_contact_chat_update(update):
            raise ContactError(ErrorKind.NOT_CONTACT_CHAT)

        banned = await self.contact.list_banned_users(update.bot_id)
        if not banned:
            await reply("No banned users.")
            return
        await reply("Banned users:\n" + "\n".join(str(user) for user in banned))

    async def _handle_users(self, update: Update, reply: Reply) -> None:
        if not await self.registry.is_settings_chat_update(update):
            raise SettingsError(ErrorKind.NOT_SETTINGS_CHAT)

        users = await self.registry.get_users(update.bot_id)
        await reply(f"{len(users)} users started the bot.")


async def setup_handlers(
    client: TelegramClient, kvstore: KeyValueStore, settings: Settings
) -> Bot:
    """Set up the bot handlers.

    Args:
        client: The Telegram client instance
        kvstore: Store holding the handlers' state
        settings: Application settings
    """
    bot = Bot(client, kvstore, settings)
    await bot.setup_handlers()
    return bot


__all__ = ["Bot", "setup_handlers"]
