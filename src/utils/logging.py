"""Logging helper shared by the projection package and its CLI.

Wraps Python's standard logging module so every module logs with the
same format.  Loggers are configured once; calling `get_logger` again
with the same name returns the already configured instance.
"""

import logging


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Return a logger with a stream handler and preset format."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='[%(asctime)s] [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(level)
        # Every logger carries its own handler.
        logger.propagate = False
    return logger


def set_level(level: int, prefix: str = "src") -> None:
    """Change the level of every logger whose name starts with `prefix`."""
    for name, logger in logging.root.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and name.startswith(prefix):
            logger.setLevel(level)
