"""Store: named state slices, batched refreshes, subscribers and effects.

Each slice is owned by a reducer. dispatch() runs the reducer against the
pending state and asks for a refresh; any number of dispatches before that
refresh runs are published together. A refresh promotes pending to current,
notifies subscribers in registration order, sweeps effects that were not
declared this cycle, then hands each queued dispatch callback the freshly
published value of its slice.

Nothing a reducer, subscriber, effect or callback raises escapes the store:
the failure is logged and the rest of the cycle carries on.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Generic, Hashable, TypeVar

from sliceflux._container import StateContainer, StoreState
from sliceflux._diagnostics import Diagnostics
from sliceflux.callbacks import NO_KEY, CallbackQueue, DispatchCallback
from sliceflux.effects import EffectFn, EffectManager, Phase
from sliceflux.errors import InvalidSubscriptionError
from sliceflux.options import StoreOptions
from sliceflux.reducers import ReducerRegistry
from sliceflux.scheduler import Post, RefreshScheduler

A = TypeVar("A")
S = TypeVar("S")

Subscription = Callable[[StoreState], None]
Unsubscribe = Callable[[], None]


class BoundDispatch(Generic[A, S]):
    """dispatch() with the slice key filled in.

    Usage:
        count, dispatch = store.use_reducer("counter", counter_reducer, 0)
        dispatch({"type": "inc"})
        dispatch({"type": "inc"}, callback=print)
        dispatch({"type": "reset"}, "other-counter")
    """

    __slots__ = ("_store", "_key")

    def __init__(self, store: Store, key: Hashable) -> None:
        self._store = store
        self._key = key

    @property
    def key(self) -> Hashable:
        return self._key

    def __call__(
        self,
        action: A,
        key: Hashable | None = None,
        callback: Callable[[S | None], None] | None = None,
    ) -> None:
        self._store.dispatch(action, self._key if key is None else key, callback)

    def __repr__(self) -> str:
        return f"BoundDispatch({self._key!r})"


class Store:
    """In-memory reducer store with batched, deferred publication."""

    def __init__(
        self,
        initial_state: Mapping | None = None,
        options: StoreOptions | Mapping | None = None,
        *,
        scheduler: Post | None = None,
    ) -> None:
        self._options = StoreOptions.from_value(options)
        self._log = Diagnostics(self._options)
        self._container = StateContainer(initial_state)
        self._reducers = ReducerRegistry()
        self._scheduler = RefreshScheduler(scheduler)
        self._subscriptions: list[Subscription] = []
        self._callbacks = CallbackQueue()
        self._effects = EffectManager(self._log)
        self._deferred_mounts: list[Callable[[], None]] = []
        self._phase = Phase.IDLE

    # --- Read access ---

    @property
    def state(self) -> StoreState:
        return self._container.current

    @property
    def pending_state(self) -> StoreState:
        return self._container.pending

    @property
    def options(self) -> StoreOptions:
        return self._options

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def refresh_scheduled(self) -> bool:
        return self._scheduler.scheduled

    def get_state(self) -> StoreState:
        return self._container.current

    def get_pending_state(self) -> StoreState:
        return self._container.pending

    def get_options(self) -> StoreOptions:
        return self._options

    # --- Slices ---

    def register(self, key: Hashable, reducer: Callable[[A, S], S], initial_state: S) -> None:
        """Give key its reducer and initial value. Re-registering is ignored.

        A value already supplied through the store's initial state is kept;
        initial_state only fills slices that have no value yet.
        """
        if not self._reducers.add(key, reducer):
            self._log.warning("Redundant register call for <%s> was ignored", key)
            return
        if not self._container.seed(key, initial_state):
            self._log.debug("Registered <%s> over its existing value", key)

    def use_reducer(
        self, key: Hashable, reducer: Callable[[A, S], S], initial_state: S
    ) -> tuple[S, BoundDispatch[A, S]]:
        """Declare a slice and get its published value plus a bound dispatcher.

        Safe to call every render: after the first call the reducer and
        initial_state arguments are ignored and the existing value comes back.
        """
        if key not in self._reducers:
            self.register(key, reducer, initial_state)
        return self._container.current.get(key), BoundDispatch(self, key)

    # --- Dispatch ---

    def dispatch(
        self,
        action: Any,
        key: Hashable,
        callback: DispatchCallback | None = None,
    ) -> None:
        """Run key's reducer on the pending state and schedule a refresh.

        callback, if given, receives key's published value at the end of the
        refresh that follows, even if the reducer fails.
        """
        self._log.debug(
            "DISPATCH: <%s> %r with%s callback", key, action, "" if callback else "out"
        )
        if callback is not None:
            self._callbacks.push(key, callback)

        error_while_dispatching = False
        reducer = self._reducers.get(key)
        if reducer is None:
            error_while_dispatching = True
            self._log.warning("No reducer registered for <%s>; dispatch ignored", key)
        else:
            prior = self._container.read_pending(key)
            try:
                next_state = reducer(action, prior)
            except Exception:
                error_while_dispatching = True
                self._log.ignored("Ignored error while dispatching to <%s>", key)
            else:
                if next_state is prior:
                    return
                self._container.write_pending(key, next_state)

        if error_while_dispatching and callback is None:
            return
        self._scheduler.request(self._refresh)

    # --- Subscriptions ---

    def subscribe(self, fn: Subscription) -> Unsubscribe:
        """Call fn with the published state after every refresh.

        Returns a function that removes the subscription.
        """
        if not callable(fn):
            raise InvalidSubscriptionError(
                f"Subscription must be callable, got {type(fn).__name__}"
            )
        self._subscriptions.append(fn)
        self._log.debug("Added subscription %r", fn)

        def _unsubscribe() -> None:
            try:
                self._subscriptions.remove(fn)
            except ValueError:
                pass  # already removed

        return _unsubscribe

    # --- Effects ---

    def use_effect(self, name: Hashable, effect: EffectFn, *, delay: bool = False) -> None:
        """Keep effect mounted for as long as name is declared every refresh.

        Only valid from inside a subscription. With delay, the setup is queued
        as a callback for the next refresh, which this refresh schedules; if
        that refresh no longer declares name, the setup never runs.
        """
        if self._phase is not Phase.NOTIFYING:
            self._log.warning("use_effect(<%s>) called outside of a subscription; ignored", name)
            return
        self._effects.use(name, effect, defer=self._deferred_mounts.append if delay else None)

    # --- Refresh ---

    def refresh(self) -> None:
        """Publish and notify right now, bypassing the scheduler."""
        if self._phase is not Phase.IDLE:
            self._log.warning("refresh() called during a refresh (%s); ignored", self._phase.value)
            return
        self._refresh()

    def _refresh(self) -> None:
        self._log.debug("REFRESHING")
        current = self._container.publish()

        self._phase = Phase.NOTIFYING
        try:
            for subscription in list(self._subscriptions):
                try:
                    subscription(current)
                except Exception:
                    self._log.ignored("Ignored error in subscription %r", subscription)

            self._phase = Phase.SWEEPING_EFFECTS
            self._effects.sweep()

            self._phase = Phase.DRAINING_CALLBACKS
            for key, callback in self._callbacks.take():
                try:
                    callback(None if key is NO_KEY else current.get(key))
                except Exception:
                    self._log.ignored("Ignored error while executing callback for <%s>", key)
            self._queue_deferred_mounts()
        finally:
            self._phase = Phase.IDLE

    def _queue_deferred_mounts(self) -> None:
        if not self._deferred_mounts:
            return
        mounts, self._deferred_mounts = self._deferred_mounts, []
        for mount in mounts:
            self._callbacks.push(NO_KEY, lambda _, mount=mount: mount())
        self._scheduler.request(self._refresh)

    # --- Lifecycle ---

    def dispose(self) -> None:
        """Unmount every effect and drop all subscriptions."""
        self._effects.dispose()
        self._subscriptions.clear()

    def __repr__(self) -> str:
        return f"Store(slices={len(self._reducers)}, phase={self._phase.value})"


def create_store(
    initial_state: Mapping | None = None,
    options: StoreOptions | Mapping | None = None,
    *,
    scheduler: Post | None = None,
) -> Store:
    """Build a Store.

    Usage:
        store = create_store({}, {"development": True})
        store.subscribe(lambda state: print(state))
        count, dispatch = store.use_reducer("counter", lambda a, n: n + 1, 0)
        dispatch("inc")  # published on the next event-loop tick
    """
    return Store(initial_state, options, scheduler=scheduler)
