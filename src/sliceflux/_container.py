"""State container: the two state mappings every store owns.

`current` is what subscribers and get_state() see. `pending` accumulates
reducer output between refreshes. publish() promotes pending by reference,
so right after a refresh both names point at the same dict. The first write
after that copies the mapping (never the slice values) so `current` stays
stable until the next publish.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Hashable

StoreState = dict[Hashable, object]


class StateContainer:
    """Owns the published and pending state mappings of one store."""

    __slots__ = ("current", "pending")

    def __init__(self, initial: Mapping | None = None) -> None:
        self.current: StoreState = dict(initial) if initial else {}
        self.pending: StoreState = self.current

    def __contains__(self, key: Hashable) -> bool:
        return key in self.pending

    def seed(self, key: Hashable, value: object) -> bool:
        """Set a slice in both mappings unless it already holds a value.

        Returns False when the key was present, e.g. from the initial state.
        """
        if key in self.pending:
            return False
        self.current[key] = value
        self.pending[key] = value
        return True

    def read_pending(self, key: Hashable) -> object:
        return self.pending.get(key)

    def write_pending(self, key: Hashable, value: object) -> None:
        if self.pending is self.current:
            self.pending = dict(self.current)
        self.pending[key] = value

    def publish(self) -> StoreState:
        """Promote pending to current. Returns the published mapping."""
        self.current = self.pending
        return self.current
