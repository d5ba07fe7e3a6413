"""One-shot completion callbacks attached to dispatch calls."""

from __future__ import annotations

from typing import Callable, Hashable, Iterator


class _NoKey:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_KEY"


# Entries queued under NO_KEY receive None instead of a slice value.
NO_KEY = _NoKey()

DispatchCallback = Callable[[object], None]


class CallbackQueue:
    """FIFO of (key, callback) pairs, each consumed exactly once."""

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: list[tuple[Hashable, DispatchCallback]] = []

    def push(self, key: Hashable, callback: DispatchCallback) -> None:
        self._entries.append((key, callback))

    def take(self) -> Iterator[tuple[Hashable, DispatchCallback]]:
        """Detach the current entries. Anything pushed afterwards stays queued."""
        entries, self._entries = self._entries, []
        return iter(entries)

    def __len__(self) -> int:
        return len(self._entries)
