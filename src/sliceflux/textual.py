"""Textual integration for sliceflux. Opt-in; requires textual.

Bridges a Store to a Textual app: refreshes run on the app's message loop,
render subscriptions are skipped while the widget tree is being swapped,
and dispatches from worker threads are marshaled onto the app thread so the
store itself stays single-threaded.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

# id(app) -> number of open pause() blocks. Nothing is set on the app itself.
_pause_depth: dict[int, int] = {}


@contextmanager
def pause(app):
    """Hold back guarded renders while widgets are being replaced.

    Pauses nest: rendering resumes once the outermost block exits.
    """
    key = id(app)
    _pause_depth[key] = _pause_depth.get(key, 0) + 1
    try:
        yield
    finally:
        remaining = _pause_depth.pop(key) - 1
        if remaining:
            _pause_depth[key] = remaining


def is_safe(app) -> bool:
    """True when app is running and no pause() block is open for it."""
    return bool(app.is_running) and id(app) not in _pause_depth


def scheduler(app):
    """Post function that runs store refreshes on app's message loop.

    Usage:
        store = create_store({}, scheduler=stx.scheduler(app))
    """

    def _post(fn):
        app.call_later(fn)

    return _post


def subscribe(app, store, render):
    """store.subscribe() that only renders while app is safe to query.

    NoMatches raised by widget queries inside render is swallowed; the
    widget it looked for is simply not mounted yet. Returns the unsubscribe
    function.
    """

    def _guarded(state):
        if not is_safe(app):
            return
        try:
            render(state)
        except NoMatches:
            pass

    return store.subscribe(_guarded)


def bind_dispatch(app, dispatch):
    """Wrap a dispatcher so calls from worker threads hop to the app thread."""
    _main = threading.get_ident()

    def _dispatch(*args, **kwargs):
        if threading.get_ident() != _main:
            app.call_from_thread(dispatch, *args, **kwargs)
        else:
            dispatch(*args, **kwargs)

    return _dispatch
