import pytest

from topicrelay import dependencies
from topicrelay.config import Settings
from topicrelay.database.kvstore import KeyValueStore
from topicrelay.dependencies import Dependencies, get_kvstore


@pytest.fixture(autouse=True)
def reset_dependencies(monkeypatch):
    monkeypatch.setattr(Dependencies, "_kvstore_instance", None)
    monkeypatch.setattr(Dependencies, "_redis_instance", None)


@pytest.fixture
def fake_connection(monkeypatch, redis):
    """Route Redis.from_url to the fake Redis and use fixed settings."""
    urls = []

    def from_url(url):
        urls.append(url)
        return redis

    monkeypatch.setattr(dependencies.Redis, "from_url", from_url)
    monkeypatch.setattr(
        dependencies,
        "get_settings",
        lambda: Settings(
            _env_file=None,
            telegram_api_id=1,
            telegram_api_hash="hash",
            telegram_bot_token="token",
            kv_prefix="test:",
        ),
    )
    return urls


async def test_kvstore_is_created_on_first_use(fake_connection):
    first = await get_kvstore()
    second = await get_kvstore()

    assert isinstance(first, KeyValueStore)
    assert first is second
    assert first.prefix == "test:"
    assert fake_connection == ["redis://localhost:6379/0"]

