import asyncio

from loguru import logger
from telethon import TelegramClient

from topicrelay.config import get_settings
from topicrelay.dependencies import Dependencies, get_kvstore
from topicrelay.telegram.bot import setup_handlers
from topicrelay.utils import setup_logging


async def run() -> None:
    """Start the client, wire the handlers and serve until disconnected."""
    settings = get_settings()
    setup_logging(settings.log_level)

    client = TelegramClient(
        settings.session_name, settings.telegram_api_id, settings.telegram_api_hash
    )
    try:
        logger.info("Starting application...")
        await client.start(bot_token=settings.telegram_bot_token)
        logger.info("Telegram client started")

        kvstore = await get_kvstore()

        await setup_handlers(client, kvstore, settings)
        logger.info("Application startup complete")

        await client.run_until_disconnected()
    finally:
        logger.info("Starting shutdown sequence...")
        await client.disconnect()
        await Dependencies.cleanup()
        logger.info("Application shutdown complete")


def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Application stopped by user")


if __name__ == "__main__":
    main()
