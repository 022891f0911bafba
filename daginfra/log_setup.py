"""
Logging setup for dagscope.

Library modules only create loggers (logging.getLogger(__name__)); this
module is the one place handlers are attached. Applications call
configure_logging() once at startup.
"""
import logging
from typing import Optional

from daginfra.config import LoggingConfig, get_config

LOGGER_NAMES = ("dagcore", "daginfra")

_HANDLER_NAME = "dagscope"


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Attach a stream handler to the dagscope loggers.

    Safe to call repeatedly: the previous dagscope handler is replaced,
    never duplicated.

    Args:
        config: Logging settings. Defaults to get_config().logging.
    """
    if config is None:
        config = get_config().logging

    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        logging.getLogger(__name__).warning(
            f"Unknown log level {config.level!r}, using WARNING"
        )
        level = logging.WARNING

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(config.format))

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for existing in list(logger.handlers):
            if existing.get_name() == _HANDLER_NAME:
                logger.removeHandler(existing)
        logger.addHandler(handler)
        logger.setLevel(level)
