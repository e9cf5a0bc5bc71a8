"""Snapshot cache — one StateView per raw snapshot.

Derivation nodes take their fast path when they are resolved against the
very same view object they saw last time. Handing out a fresh view for
every get_state() call or listener notification would defeat that, so the
cache returns the existing view for a snapshot whenever one is alive.

Entries are keyed by id(raw) and held weakly through the view. A view keeps
its snapshot alive, so an id cannot be reused while its entry exists, and
the entry disappears once nothing (reader, listener, or derivation node)
holds the view any more.
"""

from __future__ import annotations

import weakref
from collections.abc import Mapping

from memostate.view import StateView


class SnapshotCache:
    """Maps raw snapshots (by identity) to their StateView."""

    __slots__ = ("_views",)

    def __init__(self) -> None:
        self._views: weakref.WeakValueDictionary[int, StateView] = weakref.WeakValueDictionary()

    def view_of(self, raw: Mapping) -> StateView:
        """Return the view for raw, building it on first use.

        Passing a view returns it unchanged.
        """
        if isinstance(raw, StateView):
            return raw
        view = self._views.get(id(raw))
        if view is None:
            view = StateView(raw)
            self._views[id(raw)] = view
        return view

    def __len__(self) -> int:
        return len(self._views)

    def __contains__(self, raw: object) -> bool:
        view = self._views.get(id(raw))
        return view is not None and view._raw is raw


_default_cache = SnapshotCache()


def view_of(raw: Mapping) -> StateView:
    """View a raw snapshot through the process-wide default cache."""
    return _default_cache.view_of(raw)
