import warnings
from unittest.mock import AsyncMock

import pytest
from fakeredis.aioredis import FakeRedis

from tests.factories import create_group_update, create_private_update
from topicrelay.database.kvstore import KeyValueStore
from topicrelay.telegram.platform import TelegramPlatform
from topicrelay.telegram.types import ChatInfo, ChatMember, ChatType, MemberStatus


@pytest.fixture(autouse=True)
def ignore_resource_warnings():
    warnings.filterwarnings(
        "ignore", category=RuntimeWarning, message="coroutine.*was never awaited"
    )


@pytest.fixture
async def redis():
    """Fixture for fake Redis connection."""
    fake_redis = FakeRedis()
    yield fake_redis
    await fake_redis.flushdb()  # Clean up after tests
    await fake_redis.aclose()


@pytest.fixture
def kv_store(redis):
    """Fixture for KeyValueStore instance."""
    return KeyValueStore(redis)


@pytest.fixture
def platform():
    """Mocked platform: every chat is a forum where the bot manages topics."""
    platform = AsyncMock(spec=TelegramPlatform)
    platform.get_chat.side_effect = lambda chat_id: ChatInfo(
        id=chat_id, type=ChatType.SUPERGROUP, is_forum=True, title="Staff"
    )
    platform.get_bot_member.return_value = ChatMember(
        status=MemberStatus.ADMINISTRATOR, can_manage_topics=True
    )
    platform.get_member.return_value = ChatMember(
        status=MemberStatus.ADMINISTRATOR, can_manage_topics=False
    )
    platform.create_topic.return_value = 7
    platform.copy_message.return_value = 1000
    platform.send_message.return_value = 1001
    return platform


@pytest.fixture
def make_private_update():
    """Fixture that returns the create_private_update function"""
    return create_private_update


@pytest.fixture
def make_group_update():
    """Fixture that returns the create_group_update function"""
    return create_group_update
