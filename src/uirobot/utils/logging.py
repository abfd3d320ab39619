"""Logging setup utilities for uirobot.

Configures the 'uirobot' logger from the logging section of the
settings. Every module logs through ``logging.getLogger(__name__)``, so
one call here covers the session, transport, API and CLI.
"""

from __future__ import annotations

import logging
import sys

from uirobot.config.settings import LoggingConfig

_HANDLER_MARK = "_uirobot_handler"


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure logging for the uirobot application.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        config: Logging configuration. If None, uses defaults
                (INFO level, stderr output).
    """
    if config is None:
        config = LoggingConfig()

    app_logger = logging.getLogger("uirobot")
    app_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    for handler in [h for h in app_logger.handlers if getattr(h, _HANDLER_MARK, False)]:
        app_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(logging.FileHandler(config.file))

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARK, True)
        app_logger.addHandler(handler)

    app_logger.info("Logging initialized at %s level", config.level)
