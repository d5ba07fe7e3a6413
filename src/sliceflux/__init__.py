"""sliceflux: reducer-driven state slices with batched, deferred refreshes."""

from importlib.metadata import version as _version

__version__ = _version("sliceflux")

from sliceflux.callbacks import NO_KEY, CallbackQueue
from sliceflux.effects import EffectManager, Phase
from sliceflux.errors import (
    InvalidOptionError,
    InvalidSubscriptionError,
    SchedulerError,
    SliceFluxError,
)
from sliceflux.options import LogLevel, StoreOptions
from sliceflux.reducers import ReducerRegistry
from sliceflux.scheduler import ManualScheduler, RefreshScheduler, call_soon
from sliceflux.store import BoundDispatch, Store, create_store
# textual is not auto-imported; opt-in only

__all__ = [
    "Store",
    "create_store",
    "BoundDispatch",
    "StoreOptions",
    "LogLevel",
    "ReducerRegistry",
    "RefreshScheduler",
    "ManualScheduler",
    "call_soon",
    "CallbackQueue",
    "NO_KEY",
    "EffectManager",
    "Phase",
    "SliceFluxError",
    "InvalidSubscriptionError",
    "InvalidOptionError",
    "SchedulerError",
]
