"""Tests for Reaction and create_effect."""

import pytest

from reactree import (
    DuplicateKey,
    Reaction,
    create_effect,
    create_mutable,
    drain_pending,
    run_reaction,
)
from reactree.context import TrackingContext, current_context


class TestCreateEffect:
    def test_runs_immediately(self, root):
        m = create_mutable(root, 10)
        log = []
        create_effect(root, lambda cx: log.append(m.get(cx)))
        assert log == [10]

    def test_reruns_on_change(self, root):
        m = create_mutable(root, 10)
        log = []
        create_effect(root, lambda cx: log.append(m.get(cx)))
        m.set(20)
        drain_pending()
        assert log == [10, 20]

    def test_destroy_stops(self, root):
        m = create_mutable(root, 10)
        log = []
        r = create_effect(root, lambda cx: log.append(m.get(cx)))
        r.destroy()
        m.set(20)
        drain_pending()
        assert log == [10]

    def test_context_is_bound_to_reaction(self, root):
        seen = []
        r = create_effect(root, lambda cx: seen.append(cx))
        cx = seen[0]
        assert isinstance(cx, TrackingContext)
        assert cx.tracking
        assert cx.owner == r
        assert current_context.get() is None  # restored after the run

    def test_owns_what_its_action_builds(self, root):
        built = []
        r = create_effect(root, lambda cx: built.append(cx.owner.create_child()))
        assert r.children == built
        r.destroy()
        assert not built[0].alive

    def test_first_run_error_propagates_but_reaction_survives(self, root):
        items = create_mutable(root, ["a", "a"])
        log = []

        def unique(cx):
            values = items.get(cx)
            if len(set(values)) != len(values):
                raise DuplicateKey(values[0], 0, 1)
            log.append(values)

        with pytest.raises(DuplicateKey):
            create_effect(root, unique)
        (reaction,) = root.children[1:]
        assert reaction.alive
        items.set(["a", "b"])
        drain_pending()
        assert log == [["a", "b"]]

    def test_nested_effects(self, root):
        outer_source = create_mutable(root, 0)
        inner_source = create_mutable(root, 0)
        log = []

        def outer(cx):
            log.append(("outer", outer_source.get(cx)))
            create_effect(cx.owner, lambda icx: log.append(("inner", inner_source.get(icx))))

        create_effect(root, outer)
        inner_source.set(1)
        drain_pending()
        assert log == [("outer", 0), ("inner", 0), ("inner", 1)]


class TestRun:
    def test_run_now(self, root):
        log = []
        r = create_effect(root, lambda cx: log.append(1))
        run_reaction(r)
        r.run()
        assert log == [1, 1, 1]

    def test_run_clears_pending(self, root):
        m = create_mutable(root, 0)
        log = []
        r = create_effect(root, lambda cx: log.append(m.get(cx)))
        m.set(1)
        assert r.pending
        r.run()
        assert not r.pending
        assert drain_pending() == 0
        assert log == [0, 1]

    def test_reaction_destroying_itself(self, root):
        m = create_mutable(root, 0)

        def self_destruct(cx):
            if m.get(cx):
                cx.owner.destroy()
                m.get(cx)  # reading after teardown records nothing

        r = create_effect(root, self_destruct)
        m.set(1)
        drain_pending()
        assert not r.alive

    def test_repr(self, root):
        def named(cx):
            pass

        r = create_effect(root, named)
        assert repr(r) == f"Reaction({r.id}, named, alive)"
        assert isinstance(r, Reaction)
