"""Actions and transactions — batched state updates.

Wrapping several set_state() calls in `with transaction(store)` or an
@action(store) function defers listener notification until the outermost
scope exits. Listeners then see a single (state, previous_state) pair
spanning the whole batch, never the intermediate snapshots.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Callable, Iterator, ParamSpec, TypeVar

from memostate.store import Store

P = ParamSpec("P")
R = TypeVar("R")


@contextmanager
def transaction(store: Store) -> Iterator[Store]:
    """Context manager for batching updates.

    Usage:
        with transaction(store):
            store.set_state({"a": 1})
            store.set_state({"b": 2})
            # listeners fire here, once, after both are set
    """
    store._begin_batch()
    try:
        yield store
    finally:
        store._end_batch()


def action(store: Store) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator factory: batch every update fn makes to store.

    Usage:
        @action(store)
        def swap():
            s = store.get_state()
            store.set_state({"a": s.b, "b": s.a})
    """

    def decorate(fn: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with transaction(store):
                return fn(*args, **kwargs)

        return wrapper

    return decorate
