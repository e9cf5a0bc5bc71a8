"""Tests for Store."""

import logging

import pytest

from memostate import Computed, StateView, Store, computed, raw_state


class TestStore:
    def test_creation_from_mapping(self):
        s = Store({"x": 10, "y": "hello"})
        assert s.get_state().x == 10
        assert s.get_state()["y"] == "hello"

    def test_creation_from_initializer(self):
        def init(store):
            def bump():
                store.set_state(lambda s: {"count": s.count + 1})

            return {"count": 0, "bump": bump}

        s = Store(init)
        s.get_state().bump()
        s.get_state().bump()
        assert s.get_state().count == 2

    def test_get_state_returns_same_view(self):
        s = Store({"x": 1})
        assert isinstance(s.get_state(), StateView)
        assert s.get_state() is s.get_state()

    def test_set_state_merges(self):
        s = Store({"x": 0, "y": 0})
        s.set_state({"x": 42})
        assert s.get_state() == {"x": 42, "y": 0}

    def test_set_state_makes_new_snapshot(self):
        s = Store({"x": 0})
        before = s.get_state()
        s.set_state({"x": 1})
        assert s.get_state() is not before
        assert before.x == 0

    def test_set_state_with_function(self):
        s = Store({"x": 2})
        s.set_state(lambda state: {"x": state.x * 5})
        assert s.get_state().x == 10

    def test_replace(self):
        s = Store({"x": 1, "y": 2})
        s.set_state({"z": 3}, replace=True)
        assert s.get_state() == {"z": 3}

    def test_non_mapping_update_raises(self):
        s = Store({"x": 1})
        with pytest.raises(TypeError, match="mapping"):
            s.set_state(42)
        with pytest.raises(TypeError):
            Store([1, 2])

    def test_merge_keeps_nodes_unresolved(self):
        s = Store({"x": 1, "double": computed(lambda st: st.x * 2)})
        assert s.get_state().double == 2
        s.set_state({"x": 4})
        assert isinstance(raw_state(s.get_state())["double"], Computed)
        assert s.get_state().double == 8

    def test_update_from_view_is_unwrapped(self):
        s = Store({"x": 1, "double": computed(lambda st: st.x * 2)})
        other = Store({"x": 5})
        other.set_state(s.get_state(), replace=True)
        assert isinstance(raw_state(other.get_state())["double"], Computed)
        assert other.get_state().double == 2


class TestSubscribe:
    def test_listener_receives_views(self):
        s = Store({"a": 1, "squared": computed(lambda st: st.a * st.a)})
        log = []
        s.subscribe(lambda state, prev: log.append((state, prev)))
        s.set_state({"a": 3})

        [(state, prev)] = log
        assert isinstance(state, StateView)
        assert isinstance(prev, StateView)
        assert state is s.get_state()
        assert state.squared == 9
        assert prev.squared == 1

    def test_unsubscribe(self):
        s = Store({"x": 0})
        log = []
        unsubscribe = s.subscribe(lambda state, prev: log.append(state.x))
        s.set_state({"x": 1})
        unsubscribe()
        unsubscribe()  # second call is a no-op
        s.set_state({"x": 2})
        assert log == [1]

    def test_replace_with_same_snapshot_does_not_notify(self):
        s = Store({"x": 0})
        log = []
        s.subscribe(lambda state, prev: log.append(state))
        s.set_state(s.get_state(), replace=True)
        assert log == []

    def test_listener_error_propagates(self):
        s = Store({"x": 0})

        def bad(state, prev):
            raise RuntimeError("listener failed")

        s.subscribe(bad)
        with pytest.raises(RuntimeError, match="listener failed"):
            s.set_state({"x": 1})
        assert s.get_state().x == 1  # state was committed before notify

    def test_subscribe_logs_debug(self, caplog):
        s = Store({"x": 0})
        with caplog.at_level(logging.DEBUG, logger="memostate.store"):
            unsubscribe = s.subscribe(lambda state, prev: None)
            unsubscribe()
        assert "Subscribed" in caplog.text
        assert "Unsubscribed" in caplog.text

    def test_repr(self):
        s = Store({"b": 1, "a": 2})
        assert repr(s) == "Store(['a', 'b'], listeners=0)"
