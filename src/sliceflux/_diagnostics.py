"""Level-gated logging for a single store.

Every store logs to the "sliceflux.store" logger, but only what its own
options allow: nothing at all in production, otherwise records at or above
the store's threshold. Swallowed exceptions are reported twice: a one-line
WARN naming the error, and the full traceback at DEBUG, which a store only
surfaces when it runs verbose (development, or log_level DEBUG).
"""

from __future__ import annotations

import logging
import sys

from sliceflux.options import LogLevel, StoreOptions

logger = logging.getLogger("sliceflux.store")


class Diagnostics:
    __slots__ = ("_options", "_logger")

    def __init__(self, options: StoreOptions, log: logging.Logger = logger) -> None:
        self._options = options
        self._logger = log

    def enabled_for(self, level: LogLevel) -> bool:
        if self._options.production:
            return False
        return level >= self._options.threshold

    def log(self, level: LogLevel, msg: str, *args, exc_info: bool = False) -> None:
        if not self.enabled_for(level):
            return
        self._logger.log(int(level), msg, *args, exc_info=exc_info)

    def debug(self, msg: str, *args) -> None:
        self.log(LogLevel.DEBUG, msg, *args)

    def info(self, msg: str, *args) -> None:
        self.log(LogLevel.INFO, msg, *args)

    def warning(self, msg: str, *args) -> None:
        self.log(LogLevel.WARN, msg, *args)

    def error(self, msg: str, *args) -> None:
        self.log(LogLevel.ERROR, msg, *args)

    def ignored(self, msg: str, *args) -> None:
        """Report the exception being handled: summary at WARN, traceback at DEBUG.

        Must be called from inside an except block.
        """
        error = sys.exc_info()[1]
        self.log(LogLevel.WARN, msg + ": %r", *args, error)
        self.log(LogLevel.DEBUG, msg, *args, exc_info=True)
