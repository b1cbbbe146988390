"""Tests for the bot's update dispatch."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from telethon import TelegramClient

from tests.factories import BOT_ID, CONTACT_CHAT_ID, SETTINGS_CHAT_ID, USER_ID
from topicrelay.config import DEFAULT_GREETING, Settings
from topicrelay.telegram.bot import Bot, setup_handlers
from topicrelay.telegram.types import ChatMember, MemberStatus


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        telegram_api_id=1,
        telegram_api_hash="hash",
        telegram_bot_token="token",
    )


@pytest.fixture
def mock_client():
    """Fixture for mocked TelegramClient."""
    client = MagicMock(spec=TelegramClient)
    client.get_me = AsyncMock(return_value=MagicMock(id=BOT_ID))
    return client


@pytest.fixture
def bot(mock_client, kv_store, settings, platform):
    return Bot(mock_client, kv_store, settings, platform=platform)


@pytest.fixture
def reply():
    return AsyncMock()


async def test_setup_handlers(mock_client, kv_store, settings):
    bot = await setup_handlers(mock_client, kv_store, settings)

    assert bot.bot_id == BOT_ID
    assert mock_client.on.call_count == 2


class TestPrivateMessages:
    async def test_start_greets(self, bot, platform, make_private_update):
        await bot.handle_private(make_private_update(text="/start"))

        platform.send_message.assert_awaited_once_with(USER_ID, DEFAULT_GREETING)
        platform.copy_message.assert_not_awaited()

    async def test_missing_contact_chat_is_not_reported_to_user(
        self, bot, platform, make_private_update
    ):
        await bot.handle_private(make_private_update(text="help"))

        platform.copy_message.assert_not_awaited()
        platform.send_message.assert_not_awaited()

    async def test_relays_to_contact_chat(
        self, bot, platform, reply, make_private_update, make_group_update
    ):
        await bot.handle_group(make_group_update(text="/contact_chat"), reply)
        await bot.handle_private(make_private_update(message_id=4, text="help"))

        platform.copy_message.assert_awaited_once_with(
            CONTACT_CHAT_ID, USER_ID, 4, thread_id=7
        )


class TestGroupMessages:
    async def test_contact_chat_command(self, bot, reply, make_group_update):
        update = make_group_update(text="/contact_chat")

        await bot.handle_group(update, reply)
        reply.assert_awaited_once_with("This chat is now the contact chat.")

        await bot.handle_group(update, reply)
        reply.assert_awaited_with("This chat is already the contact chat.")

    async def test_command_with_bot_mention(self, bot, reply, make_group_update):
        await bot.handle_group(make_group_update(text="/contact_chat@RelayBot now"), reply)
        assert await bot.contact.get_contact_chat_id(BOT_ID) == CONTACT_CHAT_ID

    async def test_unknown_command_is_ignored(self, bot, platform, reply, make_group_update):
        await bot.handle_group(make_group_update(text="/help"), reply)

        reply.assert_not_awaited()
        platform.copy_message.assert_not_awaited()

    async def test_staff_reply_reaches_user(
        self, bot, platform, reply, make_private_update, make_group_update
    ):
        await bot.handle_group(make_group_update(text="/contact_chat"), reply)
        await bot.handle_private(make_private_update())
        platform.copy_message.reset_mock()

        await bot.handle_group(make_group_update(message_id=20, thread_id=7), reply)

        platform.copy_message.assert_awaited_once_with(USER_ID, CONTACT_CHAT_ID, 20)

    async def test_foreign_topic_is_reported(self, bot, reply, make_group_update):
        await bot.handle_group(make_group_update(text="/contact_chat"), reply)
        await bot.handle_group(make_group_update(thread_id=99), reply)

        reply.assert_awaited_with("This topic does not belong to any user.")

    async def test_ban_commands(self, bot, platform, reply, make_private_update, make_group_update):
        await bot.handle_group(make_group_update(text="/contact_chat"), reply)
        await bot.handle_private(make_private_update())

        await bot.handle_group(make_group_update(text="/ban", thread_id=7), reply)
        reply.assert_awaited_with(f"User {USER_ID} is banned.")

        await bot.handle_group(make_group_update(text="/banned"), reply)
        reply.assert_awaited_with(f"Banned users:\n{USER_ID}")

        await bot.handle_group(make_group_update(text="/unban", thread_id=7), reply)
        reply.assert_awaited_with(f"User {USER_ID} is no longer banned.")

        await bot.handle_group(make_group_update(text="/banned"), reply)
        reply.assert_awaited_with("No banned users.")

    async def test_banned_outside_contact_chat(self, bot, reply, make_group_update):
        await bot.handle_group(make_group_update(chat_id=-300, text="/banned"), reply)
        reply.assert_awaited_once_with("This command only works in the contact chat.")

    async def test_greeting_setup(self, bot, platform, reply, make_group_update, make_private_update):
        await bot.handle_group(make_group_update(chat_id=SETTINGS_CHAT_ID, text="/settings_chat"), reply)
        await bot.handle_group(
            make_group_update(chat_id=SETTINGS_CHAT_ID, thread_id=3, text="/start_settings"), reply
        )
        await bot.handle_group(
            make_group_update(chat_id=SETTINGS_CHAT_ID, message_id=31, thread_id=3, text="Welcome!"),
            reply,
        )
        reply.assert_awaited_with("Greeting updated.")

        await bot.handle_private(make_private_update(text="/start"))
        platform.copy_message.assert_awaited_once_with(USER_ID, SETTINGS_CHAT_ID, 31)

        await bot.handle_group(make_group_update(chat_id=SETTINGS_CHAT_ID, text="/users"), reply)
        reply.assert_awaited_with("1 users started the bot.")

    async def test_users_outside_settings_chat(self, bot, reply, make_group_update):
        await bot.handle_group(make_group_update(text="/users"), reply)
        reply.assert_awaited_once_with("This command only works in the settings chat.")

    async def test_platform_errors_propagate(self, bot, platform, reply, make_group_update):
        platform.get_chat.side_effect = RuntimeError("network down")

        with pytest.raises(RuntimeError):
            await bot.handle_group(make_group_update(text="/contact_chat"), reply)
        reply.assert_not_awaited()

    async def test_commands_from_non_admins_are_ignored(
        self, bot, platform, reply, make_group_update
    ):
        await bot.handle_group(make_group_update(text="/contact_chat"), reply)
        reply.reset_mock()
        platform.get_member.return_value = ChatMember(status=MemberStatus.MEMBER)

        await bot.handle_group(make_group_update(chat_id=-999, sender_id=77, text="/contact_chat"), reply)

        platform.get_member.assert_awaited_with(-999, 77)
        reply.assert_not_awaited()
        assert await bot.contact.get_contact_chat_id(BOT_ID) == CONTACT_CHAT_ID

    async def test_anonymous_admin_commands_run(self, bot, platform, reply, make_group_update):
        platform.get_member.return_value = ChatMember(status=MemberStatus.MEMBER)

        await bot.handle_group(
            make_group_update(sender_id=CONTACT_CHAT_ID, text="/contact_chat"), reply
        )

        platform.get_member.assert_not_awaited()
        reply.assert_awaited_once_with("This chat is now the contact chat.")
