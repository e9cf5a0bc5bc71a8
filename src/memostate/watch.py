"""watch() — a derived field with an explicit dependency selector.

Where computed() infers its dependencies from the fields it happens to read,
watch() splits the work in two: selector(state) picks out what matters, and
compute(selection) turns it into the field's value. The node recomputes only
when eq(previous_selection, next_selection) is false, no matter how many
fields compute touches along the way.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from memostate._tracking import same_value, untracked
from memostate.computed import Derivation

if TYPE_CHECKING:
    from memostate.view import StateView

S = TypeVar("S")
T = TypeVar("T")

_UNSET = object()


class Watch(Derivation, Generic[S, T]):
    """A derived field recomputed when its selection changes under eq."""

    __slots__ = ("_selector", "_fn", "_eq", "_previous_input", "_previous_selection", "_previous_output")

    def __init__(
        self,
        selector: Callable[[StateView], S],
        fn: Callable[[S], T],
        eq: Callable[[S, S], bool] | None = None,
    ) -> None:
        self._selector = selector
        self._fn = fn
        self._eq = eq if eq is not None else same_value
        self._previous_input: StateView | None = None
        self._previous_selection: S | object = _UNSET
        self._previous_output: T | object = _UNSET

    def resolve(self, view: StateView) -> T:
        if view is self._previous_input:
            return self._previous_output

        # Selector reads are recorded by an enclosing derivation, if any.
        selection = self._selector(view)

        if self._previous_selection is _UNSET or not self._eq(self._previous_selection, selection):
            with untracked():
                self._previous_output = self._fn(selection)

        self._previous_selection = selection
        self._previous_input = view
        return self._previous_output

    def __repr__(self) -> str:
        name = getattr(self._fn, "__name__", "<fn>")
        if self._previous_selection is _UNSET:
            return f"Watch({name}, pending)"
        return f"Watch({name}, selection={self._previous_selection!r})"


def watch(
    selector: Callable[[StateView], S],
    fn: Callable[[S], T],
    eq: Callable[[S, S], bool] | None = None,
) -> T:
    """Mark a state field as derived from an explicit selection.

    eq defaults to identity-or-equality, so tuples and lists compare by
    contents. Pass a custom eq to compare selections your own way.

    Usage:
        store = Store({
            "a": 1,
            "b": 2,
            "noise": 0,
            "total": watch(lambda s: (s.a, s.b), lambda ab: sum(ab)),
        })
        # "total" recomputes when a or b changes, never for noise
    """
    return Watch(selector, fn, eq)  # type: ignore[return-value]
