"""Store — a minimal host for derived state.

The store owns the current raw snapshot (a plain dict) and replaces it with
a new dict on every update. Readers and listeners never see the raw dict:
get_state() and every listener notification go through the store's
SnapshotCache, so derived fields are resolved transparently and the same
snapshot always yields the same view.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Union

from memostate.cache import SnapshotCache
from memostate.view import StateView, raw_state

logger = logging.getLogger("memostate.store")

Listener = Callable[[StateView, StateView], None]
Update = Union[Mapping, Callable[[StateView], Mapping]]


class Store:
    """Snapshot store with computed fields and change listeners."""

    def __init__(self, initial: Mapping | Callable[[Store], Mapping]) -> None:
        self._cache = SnapshotCache()
        self._listeners: list[Listener] = []
        self._batch_depth = 0
        self._batch_start: dict | None = None
        self._state: dict = {}
        if callable(initial):
            initial = initial(self)
        self._state = self._coerce(initial)

    @staticmethod
    def _coerce(update: Any) -> dict:
        partial = raw_state(update)
        if not isinstance(partial, Mapping):
            raise TypeError(f"state update must be a mapping, got {type(partial).__name__}")
        return dict(partial)

    def get_state(self) -> StateView:
        """The current state, with derived fields resolved on read."""
        return self._cache.view_of(self._state)

    def view_of(self, raw: Mapping) -> StateView:
        """View any raw snapshot of this store through the store's cache."""
        return self._cache.view_of(raw)

    def set_state(self, update: Update, replace: bool = False) -> None:
        """Merge update into the state (or replace it) and notify listeners.

        update may be a mapping or a function of the current state view
        returning one. Merging copies the raw snapshot, so derived fields
        carry over as nodes and keep their caches.
        """
        if callable(update):
            update = update(self.get_state())
        partial = raw_state(update)
        previous = self._state
        if replace:
            if partial is previous:
                return
            self._state = self._coerce(partial)
            logger.debug("Replaced state with %d keys", len(self._state))
        else:
            self._state = {**previous, **self._coerce(partial)}
        self._notify(previous)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener(state, previous_state) after every change.

        Returns a function that removes the listener. Calling it twice is a
        no-op.
        """
        self._listeners.append(listener)
        logger.debug("Subscribed %r (%d listeners)", listener, len(self._listeners))

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                return
            logger.debug("Unsubscribed %r (%d listeners)", listener, len(self._listeners))

        return unsubscribe

    def _notify(self, previous: dict) -> None:
        if self._batch_depth > 0:
            return
        state = self.get_state()
        previous_state = self._cache.view_of(previous)
        for listener in list(self._listeners):
            listener(state, previous_state)

    def _begin_batch(self) -> None:
        if self._batch_depth == 0:
            self._batch_start = self._state
        self._batch_depth += 1

    def _end_batch(self) -> None:
        self._batch_depth -= 1
        if self._batch_depth == 0:
            start, self._batch_start = self._batch_start, None
            if start is not None and start is not self._state:
                self._notify(start)

    def __repr__(self) -> str:
        return f"Store({sorted(self._state)!r}, listeners={len(self._listeners)})"
