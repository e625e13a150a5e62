"""
Logging configuration for the scxforge command line.

Library modules only create loggers; handlers are installed here, once, by
the entry point.
"""

import logging
import sys
from typing import Optional, TextIO, Union


class ColoredFormatter(logging.Formatter):
    """Console formatter that colours the level name."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None,
                 use_color: bool = True):
        super().__init__(fmt, datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        if not self.use_color:
            return formatted
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]
        if record.levelname in formatted:
            formatted = formatted.replace(record.levelname, f"{color}{record.levelname}{reset}", 1)
        return formatted


CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"


def parse_level(level: Union[int, str]) -> int:
    """Accept 'debug', 'INFO', 20 ... and return the numeric level."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def configure_logging(level: Union[int, str] = "WARNING", stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Install a console handler on the scxforge logger.

    Calling it again replaces the previous handler instead of stacking a
    second one.
    """
    stream = stream if stream is not None else sys.stderr
    logger = logging.getLogger("scxforge")
    logger.setLevel(parse_level(level))

    for handler in list(logger.handlers):
        if getattr(handler, "_scxforge_console", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler._scxforge_console = True
    use_color = hasattr(stream, "isatty") and stream.isatty()
    handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, use_color=use_color))
    logger.addHandler(handler)

    logging.getLogger("PIL").setLevel(logging.INFO)
    return logger
