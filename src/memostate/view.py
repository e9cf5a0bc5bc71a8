"""StateView — the read-intercepting façade over one raw state snapshot.

Every field read goes through _read(): derived fields are resolved against
the view itself (so reads made by the derivation are intercepted too) and
the resolved value is recorded on the tracking stack. A reader cannot tell
a derived field from a plain one.

Reading a derived field on the raw dict instead returns the Derivation node
itself. That is a caller error and is not detected; always read through a
view (Store.get_state(), listener arguments, view_of()).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterator

from memostate._tracking import MISSING, record
from memostate.computed import Derivation


class StateView(Mapping):
    """Read-only Mapping over a raw state dict that resolves derived fields.

    Fields are available by key (view["a"]) and as attributes (view.a).
    Keys that start with an underscore or collide with Mapping methods
    (get, items, keys, values) are only reachable by key.
    """

    __slots__ = ("_raw", "__weakref__")

    def __init__(self, raw: Mapping) -> None:
        object.__setattr__(self, "_raw", raw)

    def _read(self, key: Any) -> Any:
        """Resolve and record one field. Returns MISSING for absent keys."""
        value = self._raw.get(key, MISSING)
        if isinstance(value, Derivation):
            value = value.resolve(self)
        record(key, value)
        return value

    def __getitem__(self, key: Any) -> Any:
        value = self._read(key)
        if value is MISSING:
            raise KeyError(key)
        return value

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        value = self._read(name)
        if value is MISSING:
            raise AttributeError(f"{type(self).__name__!s} has no field {name!r}")
        return value

    def get(self, key: Any, default: Any = None) -> Any:
        value = self._read(key)
        return default if value is MISSING else value

    # Membership and iteration look at keys only; they are not recorded.

    def __contains__(self, key: object) -> bool:
        return key in self._raw

    def __iter__(self) -> Iterator:
        return iter(self._raw)

    def __len__(self) -> int:
        return len(self._raw)

    def to_dict(self) -> dict:
        """A plain dict with every derived field resolved."""
        return {key: self[key] for key in self._raw}

    def __setattr__(self, name: str, value: Any) -> None:
        raise TypeError(f"{type(self).__name__} is read-only; use Store.set_state()")

    def __setitem__(self, key: Any, value: Any) -> None:
        raise TypeError(f"{type(self).__name__} is read-only; use Store.set_state()")

    def __repr__(self) -> str:
        return f"StateView({self.to_dict()!r})"


def raw_state(state: Mapping) -> Mapping:
    """The raw snapshot under a view, or the argument itself if it is not a view.

    Use this to copy or merge a state without resolving its derived fields.
    """
    if isinstance(state, StateView):
        return state._raw
    return state
