"""Effects: side effects mounted and unmounted by mark-and-sweep.

Subscribers declare effects while rendering, every cycle, by name:

    def render(state):
        if state["app"]["show_clock"]:
            store.use_effect("clock", start_clock)

An effect's setup runs the first cycle its name is declared and its cleanup
runs the first cycle it is not. The caller never tracks whether it was
mounted before: declaring the name again is what keeps it alive.
"""

from __future__ import annotations

import enum
from typing import Callable, Hashable

from sliceflux._diagnostics import Diagnostics

Cleanup = Callable[[], None]
EffectFn = Callable[[], "Cleanup | None"]


class Phase(enum.Enum):
    """Where a store is in its refresh cycle."""

    IDLE = "idle"
    NOTIFYING = "notifying"
    SWEEPING_EFFECTS = "sweeping_effects"
    DRAINING_CALLBACKS = "draining_callbacks"


class _Registration:
    __slots__ = ("cleanup", "mounted", "removed")

    def __init__(self) -> None:
        self.cleanup: Cleanup | None = None
        self.mounted = False
        self.removed = False


class EffectManager:
    """Registry of live effects plus the set touched in the current cycle."""

    __slots__ = ("_registrations", "_touched", "_diagnostics")

    def __init__(self, diagnostics: Diagnostics) -> None:
        self._registrations: dict[Hashable, _Registration] = {}
        self._touched: set[Hashable] = set()
        self._diagnostics = diagnostics

    def __contains__(self, name: Hashable) -> bool:
        return name in self._registrations

    def __len__(self) -> int:
        return len(self._registrations)

    def is_mounted(self, name: Hashable) -> bool:
        reg = self._registrations.get(name)
        return reg is not None and reg.mounted

    def use(
        self,
        name: Hashable,
        effect: EffectFn,
        *,
        defer: Callable[[Callable[[], None]], None] | None = None,
    ) -> None:
        """Touch name; mount the effect if it is not already registered.

        With defer, the setup is handed to defer() to run later instead of
        now. The registration exists immediately, so touching the name again
        before the setup runs does not mount it twice.
        """
        self._touched.add(name)
        if name in self._registrations:
            return
        reg = _Registration()
        self._registrations[name] = reg
        if defer is None:
            self._mount(name, reg, effect)
        else:
            defer(lambda: self._mount(name, reg, effect))

    def _mount(self, name: Hashable, reg: _Registration, effect: EffectFn) -> None:
        if reg.removed:
            self._diagnostics.debug("Skipped deferred effect <%s>: unmounted before setup", name)
            return
        reg.mounted = True
        try:
            cleanup = effect()
        except Exception:
            self._diagnostics.ignored("Ignored error while mounting effect <%s>", name)
            return
        if callable(cleanup):
            reg.cleanup = cleanup
        self._diagnostics.debug("Mounted effect <%s>", name)

    def sweep(self) -> list[Hashable]:
        """Unmount every effect not touched this cycle. Returns the removed names."""
        stale = [name for name in self._registrations if name not in self._touched]
        for name in stale:
            self._unmount(name)
        self._touched.clear()
        return stale

    def _unmount(self, name: Hashable) -> None:
        reg = self._registrations.pop(name)
        reg.removed = True
        self._diagnostics.debug("Unmounting effect <%s>", name)
        if reg.cleanup is None:
            return
        cleanup, reg.cleanup = reg.cleanup, None
        try:
            cleanup()
        except Exception:
            self._diagnostics.ignored("Ignored error while cleaning up effect <%s>", name)

    def dispose(self) -> None:
        """Unmount everything regardless of what was touched."""
        for name in list(self._registrations):
            self._unmount(name)
        self._touched.clear()
