"""Logging configuration for the reminder bot.

Everything goes to a dated file under LOG_DIR; a console handler is added
when attached to a terminal. Library loggers (discord, apscheduler) share the
same handlers at a quieter level.
"""

import logging
import sys
from datetime import datetime

from config import LOG_DIR, LOG_LEVEL

NOISY_LIBRARIES = ("discord", "apscheduler", "httpx")


def _build_handlers(level: int) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []

    log_file = LOG_DIR / f"reminders-{datetime.now().strftime('%Y-%m-%d')}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    handlers.append(file_handler)

    if sys.stdout is not None and sys.stdout.isatty():
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(message)s",
            datefmt="%H:%M:%S"
        ))
        handlers.append(console_handler)

    return handlers


def setup_logging(level_name: str = LOG_LEVEL) -> logging.Logger:
    """Configure the bot logger and attach library loggers to its handlers."""
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handlers = _build_handlers(level)

    bot_logger = logging.getLogger("reminder_bot")
    bot_logger.setLevel(level)
    bot_logger.handlers.clear()
    for handler in handlers:
        bot_logger.addHandler(handler)
    bot_logger.propagate = False

    for name in NOISY_LIBRARIES:
        lib_logger = logging.getLogger(name)
        lib_logger.setLevel(max(level, logging.WARNING))
        lib_logger.handlers.clear()
        for handler in handlers:
            lib_logger.addHandler(handler)
        lib_logger.propagate = False

    return bot_logger


# Global logger instance
logger = setup_logging()
