import inspect
import logging
import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | "
    "<level>{message}</level>"
)

# Libraries that log through the standard library
BRIDGED_LOGGERS = ("telethon", "redis")


class LoguruBridge(logging.Handler):
    """Forward standard library records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Report the library call site, not the logging module
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).bind(
            component=record.name
        ).log(level, record.getMessage())


def setup_logging(level: str = "INFO"):
    """Send loguru output and bridged library logs to stdout at `level`."""
    logger.remove()
    logger.configure(extra={"component": "topicrelay"})
    logger.add(sys.stdout, format=LOG_FORMAT, level=level, colorize=True, enqueue=True)

    logging.basicConfig(handlers=[LoguruBridge()], level=0, force=True)
    for name in BRIDGED_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.handlers = [LoguruBridge()]
        library_logger.propagate = False

    return logger
