import logging

from loguru import logger

from topicrelay.telegram.handlers import ContactRouter
from topicrelay.utils import get_logger, setup_logging


def test_standard_logging_is_forwarded_to_loguru():
    setup_logging("DEBUG")
    messages = []
    sink_id = logger.add(messages.append, format="{level}|{message}")
    try:
        logging.getLogger("telethon.network").warning("connection lost")
        get_logger("tests").info("bound message")
    finally:
        logger.remove(sink_id)

    assert "WARNING|connection lost\n" in messages
    assert "INFO|bound message\n" in messages


async def test_log_lines_carry_component(kv_store, platform):
    setup_logging("DEBUG")
    messages = []
    sink_id = logger.add(messages.append, format="{extra[component]}|{message}")
    try:
        logging.getLogger("redis.connection").info("connected")
        ContactRouter(kv_store, platform).logger.info("routed")
    finally:
        logger.remove(sink_id)

    assert "redis.connection|connected\n" in messages
    assert "ContactRouter|routed\n" in messages
