"""Store configuration.

Options arrive either as a StoreOptions instance or as a plain mapping, the
way a caller would spell them inline:

    create_store({}, {"development": True, "log_level": "INFO"})

Recognized keys are development, production and log_level (logLevel is
accepted as an alias). Anything else is rejected when the store is created,
not on first use.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass

from sliceflux.errors import InvalidOptionError


class LogLevel(enum.IntEnum):
    """Minimum severity a store surfaces. Values match the logging module."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR

    @classmethod
    def parse(cls, value: LogLevel | str | int) -> LogLevel:
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, str):
            name = value.strip().upper()
            if name == "WARNING":
                name = "WARN"
            try:
                return cls[name]
            except KeyError:
                raise InvalidOptionError(f"Unknown log level {value!r}") from None
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise InvalidOptionError(f"Unknown log level {value!r}") from None
        raise InvalidOptionError(f"Unknown log level {value!r}")


_ALIASES = {"logLevel": "log_level"}
_KNOWN = frozenset({"development", "production", "log_level"})


@dataclass(frozen=True)
class StoreOptions:
    development: bool = False
    log_level: LogLevel | None = None
    production: bool = False

    def __post_init__(self) -> None:
        if self.log_level is not None and not isinstance(self.log_level, LogLevel):
            object.__setattr__(self, "log_level", LogLevel.parse(self.log_level))

    @property
    def threshold(self) -> LogLevel:
        """Effective minimum level: explicit log_level, else by verbosity."""
        if self.log_level is not None:
            return self.log_level
        return LogLevel.DEBUG if self.development else LogLevel.WARN

    @classmethod
    def from_value(cls, value: StoreOptions | Mapping | None) -> StoreOptions:
        if value is None:
            return cls()
        if isinstance(value, StoreOptions):
            return value
        if not isinstance(value, Mapping):
            raise InvalidOptionError(
                f"Store options must be a mapping or StoreOptions, got {type(value).__name__}"
            )
        kwargs = {}
        for key, item in value.items():
            name = _ALIASES.get(key, key)
            if name not in _KNOWN:
                raise InvalidOptionError(f"Unknown store option {key!r}")
            kwargs[name] = item
        return cls(
            development=bool(kwargs.get("development", False)),
            log_level=kwargs.get("log_level"),
            production=bool(kwargs.get("production", False)),
        )
