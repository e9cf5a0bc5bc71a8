"""Reactions — side effects driven by a selected slice of store state.

reaction(store, data_fn, effect_fn) subscribes to the store, evaluates
data_fn against each new state view, and calls effect_fn with the result
only when it differs from the previous result. Because data_fn reads
through the store's views, derived fields it touches stay memoized.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from memostate._tracking import same_value
from memostate.store import Store
from memostate.view import StateView

T = TypeVar("T")


class Reaction(Generic[T]):
    """Disposable subscription running effect_fn when data_fn's result changes."""

    __slots__ = ("_data_fn", "_effect_fn", "_last_value", "_unsubscribe", "_disposed")

    def __init__(self, store: Store, data_fn: Callable[[StateView], T], effect_fn: Callable[[T], None]) -> None:
        self._data_fn = data_fn
        self._effect_fn = effect_fn
        self._last_value = data_fn(store.get_state())
        self._disposed = False
        self._unsubscribe = store.subscribe(self._on_change)

    def _on_change(self, state: StateView, previous_state: StateView) -> None:
        if self._disposed:
            return
        new_value = self._data_fn(state)
        if not same_value(self._last_value, new_value):
            self._last_value = new_value
            self._effect_fn(new_value)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Stop this reaction and unsubscribe from the store."""
        self._disposed = True
        self._unsubscribe()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        name = getattr(self._data_fn, "__name__", "<fn>")
        return f"Reaction({name}, {state})"


def reaction(
    store: Store,
    data_fn: Callable[[StateView], T],
    effect_fn: Callable[[T], None],
    *,
    fire_immediately: bool = False,
) -> Reaction[T]:
    """Track data_fn over store updates; call effect_fn when the result changes.

    Returns the reaction (call .dispose() to stop).

    Usage:
        store = Store({"first": "Alice", "last": "Smith", "age": 30})
        names = []
        r = reaction(
            store,
            lambda s: f"{s.first} {s.last}",
            names.append,
        )
        store.set_state({"first": "Bob"})
        # names == ["Bob Smith"]
        store.set_state({"age": 31})
        # names == ["Bob Smith"], the name did not change
        r.dispose()
    """
    r = Reaction(store, data_fn, effect_fn)
    if fire_immediately:
        effect_fn(r._last_value)
    return r
