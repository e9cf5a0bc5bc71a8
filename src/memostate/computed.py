"""Computed fields — derived state with automatic dependency tracking.

A Computed wraps a function of the state. When a StateView reads a field
holding a Computed, the view calls resolve() with itself. The node records
which fields the function read (and the values it saw) and caches the
result. On later reads it recomputes only if one of those fields now holds
a different value.

Computed fields are lazy — they only compute when read.

All node state lives on the node, never in the state dict, so the raw
snapshot is not mutated by resolution.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from memostate._tracking import DependencyRecord, tracking, untracked

if TYPE_CHECKING:
    from memostate.view import StateView

T = TypeVar("T")

_UNSET = object()


class Derivation:
    """Tag for field values that a StateView resolves instead of returning."""

    __slots__ = ()

    def resolve(self, view: StateView) -> object:
        """Return this field's value for view. Subclasses must override."""
        raise NotImplementedError


class Computed(Derivation, Generic[T]):
    """A derived field that auto-tracks the fields it reads and caches the result."""

    __slots__ = ("_fn", "_previous_input", "_previous_record", "_previous_output")

    def __init__(self, fn: Callable[[StateView], T]) -> None:
        self._fn = fn
        self._previous_input: StateView | None = None
        self._previous_record: DependencyRecord | None = None
        self._previous_output: T | object = _UNSET

    def resolve(self, view: StateView) -> T:
        """Return the value for this view, recomputing only if a dependency changed."""
        if view is self._previous_input:
            return self._previous_output

        if self._previous_record is not None:
            # Nested derivations may resolve while checking; keep those
            # reads out of whoever is resolving us.
            with untracked():
                unchanged = self._previous_record.is_current(view._read)
            if unchanged:
                self._previous_input = view
                return self._previous_output

        record = DependencyRecord()
        with tracking(record):
            output = self._fn(view)

        self._previous_record = record
        self._previous_output = output
        self._previous_input = view
        return output

    @property
    def dependencies(self) -> list:
        """Keys read on the last computation, in read order."""
        if self._previous_record is None:
            return []
        return self._previous_record.keys()

    def __repr__(self) -> str:
        name = getattr(self._fn, "__name__", "<fn>")
        if self._previous_record is None:
            return f"Computed({name}, pending)"
        return f"Computed({name}, cached={self._previous_output!r})"


def computed(fn: Callable[[StateView], T]) -> T:
    """Decorator/factory to mark a state field as computed.

    The return type is declared as the computed value's type so the field
    can sit in a typed state dict next to plain values. Read it through a
    StateView; on the raw dict it is the Computed node itself.

    Usage:
        store = Store({
            "a": 1,
            "squared": computed(lambda s: s.a * s.a),
        })

        store.get_state().squared  # 1
        store.set_state({"a": 3})
        store.get_state().squared  # 9
    """
    return Computed(fn)  # type: ignore[return-value]
