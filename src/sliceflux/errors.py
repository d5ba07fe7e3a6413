"""Exceptions raised by sliceflux.

Only configuration mistakes surface as exceptions. Failures inside reducers,
subscribers, callbacks and effects are caught and logged by the store.
"""


class SliceFluxError(Exception):
    """Base class for all sliceflux errors."""


class InvalidSubscriptionError(SliceFluxError, TypeError):
    """subscribe() was given something that is not callable."""


class InvalidOptionError(SliceFluxError, ValueError):
    """Store options contain an unknown key or an invalid value."""


class SchedulerError(SliceFluxError, RuntimeError):
    """A refresh could not be posted to the host's task queue."""
