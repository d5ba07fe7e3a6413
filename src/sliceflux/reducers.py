"""Reducer registry: slice key to transition function, first write wins."""

from __future__ import annotations

from typing import Any, Callable, Hashable, TypeVar

A = TypeVar("A")
S = TypeVar("S")

Reducer = Callable[[Any, Any], Any]


class ReducerRegistry:
    """Maps each slice key to the one reducer allowed to update it.

    Registration is sticky: once a key has a reducer, later add() calls for
    the same key are refused so re-declaring a slice every render cycle never
    swaps the reducer out from under existing state.
    """

    __slots__ = ("_reducers",)

    def __init__(self) -> None:
        self._reducers: dict[Hashable, Reducer] = {}

    def add(self, key: Hashable, reducer: Callable[[A, S], S]) -> bool:
        """Register reducer for key. Returns False if key was already taken."""
        if key in self._reducers:
            return False
        self._reducers[key] = reducer
        return True

    def get(self, key: Hashable) -> Reducer | None:
        return self._reducers.get(key)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._reducers

    def __len__(self) -> int:
        return len(self._reducers)
