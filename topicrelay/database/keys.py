"""Key layout of everything the handlers persist.

Values are read back by exact key path, so these tuples must not change
between releases.
"""

from topicrelay.database.kvstore import Key

ROOT: Key = ("handy", "handlers")


def settings_chat_id(bot_id: int) -> Key:
    return (*ROOT, "settings", bot_id, "settingsChatID")


def users(bot_id: int) -> Key:
    return (*ROOT, "settings", bot_id, "users")


def contact_chat_id(bot_id: int) -> Key:
    return (*ROOT, "contact", "settings", bot_id, "contactChatID")


def topic_by_user(bot_id: int, contact_chat_id: int, user_chat_id: int) -> Key:
    return (*ROOT, "contact", "data", bot_id, contact_chat_id, "topic-by-user", user_chat_id)


def user_by_topic(bot_id: int, contact_chat_id: int, topic_id: int) -> Key:
    return (*ROOT, "contact", "data", bot_id, contact_chat_id, "user-by-topic", topic_id)


def banned_users(bot_id: int) -> Key:
    """Prefix of every ban flag of a bot."""
    return (*ROOT, "contact", "data", bot_id, "bannedUser")


def banned_user(bot_id: int, user_chat_id: int) -> Key:
    return (*banned_users(bot_id), user_chat_id)


def greeting(bot_id: int) -> Key:
    return (*ROOT, "start", "settings", bot_id, "greeting")


def start_settings_thread_id(bot_id: int) -> Key:
    return (*ROOT, "start", "settings", bot_id, "startSettingsThreadID")
