from loguru import logger

from .logging import setup_logging


def get_logger(name: str) -> "logger":
    """Return the shared loguru logger labelled with a component name."""
    return logger.bind(component=name)


__all__ = ["setup_logging", "get_logger"]
