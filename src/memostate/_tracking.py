"""Dependency tracking engine — the heart of memostate.

Uses a contextvar holding a stack of open DependencyRecords. While a
derivation evaluates, every field read through a StateView is appended to
the record on top of the stack. Each thread and asyncio task sees its own
stack, so independent evaluations never share frames.

untrack() pushes an isolated frame (None) that swallows reads. A derivation
resolved inside it pushes its own record above that frame, so it still
tracks its own dependencies; only the enclosing caller is shielded.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

T = TypeVar("T")

# Marks a key that was looked up with .get() and found absent.
MISSING: Any = object()

# Open frames, innermost last. None is a suppressed (untracked) frame.
_stack: contextvars.ContextVar[tuple[DependencyRecord | None, ...]] = contextvars.ContextVar(
    "memostate_tracking_stack", default=()
)


def same_value(old: object, new: object) -> bool:
    """Identity first, then equality. Default eq for watch selections."""
    return old is new or old == new


class DependencyRecord:
    """The (key, value) pairs read during one evaluation of a derivation.

    Keys are unique; the first read of a key wins. Insertion order is read
    order, which only matters for the short-circuit in is_current().
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[Any, Any] = {}

    def add(self, key: Any, value: Any) -> None:
        if key not in self._entries:
            self._entries[key] = value

    def is_current(self, read: Callable[[Any], Any]) -> bool:
        """True if read(key) is still the very object recorded for every key.

        Identity only: an equal but different object counts as a change.
        """
        for key, value in self._entries.items():
            if value is not read(key):
                return False
        return True

    def keys(self) -> list:
        return list(self._entries)

    def items(self) -> list[tuple[Any, Any]]:
        return list(self._entries.items())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __repr__(self) -> str:
        return f"DependencyRecord({self.keys()!r})"


@contextmanager
def tracking(record: DependencyRecord | None) -> Iterator[DependencyRecord | None]:
    """Open a frame for one evaluation. The frame is closed on every exit path."""
    token = _stack.set(_stack.get() + (record,))
    try:
        yield record
    finally:
        _stack.reset(token)


def record(key: Any, value: Any) -> None:
    """Add a read to the innermost frame. No-op outside derivations or when untracked."""
    stack = _stack.get()
    if stack:
        top = stack[-1]
        if top is not None:
            top.add(key, value)


def is_tracking() -> bool:
    """Whether a read right now would be recorded somewhere."""
    stack = _stack.get()
    return bool(stack) and stack[-1] is not None


@contextmanager
def untracked() -> Iterator[None]:
    """Context manager: reads inside the block are not recorded by the caller.

    Usage:
        @computed
        def label(state):
            with untracked():
                locale = state.locale  # not a dependency
            return f"{state.count} ({locale})"
    """
    with tracking(None):
        yield


def untrack(fn: Callable[[], T]) -> T:
    """Run fn with its reads hidden from the enclosing derivation.

    Usage:
        total = computed(lambda s: s.price * untrack(lambda: s.rate))
        # recomputes when price changes, ignores changes to rate
    """
    with untracked():
        return fn()


def get_tracking_depth() -> int:
    """Number of open frames on this context's stack. Useful for testing."""
    return len(_stack.get())
