"""
Leveled diagnostics for the lexer and parser.

Debugger filters messages by a verbosity level supplied by the caller and
forwards them to a standard library logger. `fatal` is the single abort path
used by the parser: it logs the error and raises it.

Author: xwest
"""

import logging
from typing import NoReturn, Optional

LOGGER_NAME = "scopelang"


class Debugger:
    """
    Leveled tracing on top of `logging`.

    A message with level `n` is emitted only when `n <= self.level`, so a
    Debugger built with level 0 emits nothing at all; fatal still raises.
    """

    def __init__(self, level: int = 0, logger: Optional[logging.Logger] = None,
                 component: Optional[str] = None):
        self.level = level
        if logger is None:
            name = LOGGER_NAME if component is None else f"{LOGGER_NAME}.{component}"
            logger = logging.getLogger(name)
        self.logger = logger

    def enabled(self, level: int) -> bool:
        return level <= self.level

    def debug(self, message: str, level: int = 1) -> None:
        if self.enabled(level):
            self.logger.debug("[debug:%d] %s", level, message)

    def error(self, message: str, level: int = 1) -> None:
        if self.enabled(level):
            self.logger.error("[error:%d] %s", level, message)

    def fatal(self, error: Exception, level: int = 1) -> NoReturn:
        """Log `error` and raise it. The raise is unconditional."""
        if self.enabled(level):
            self.logger.critical("[fatal:%d] %s", level, getattr(error, "message", error))
        raise error


def configure_logging(verbosity: int) -> None:
    """Attach a stderr handler for command line use."""
    level = logging.DEBUG if verbosity > 0 else logging.WARNING
    logging.basicConfig(level=level, format="%(name)s: %(message)s")
    logging.getLogger(LOGGER_NAME).setLevel(level)
