"""Tests for Signal and derived signals."""

import pytest

from reactree import (
    Signal,
    SignalKind,
    create_derived,
    create_effect,
    create_mutable,
    drain_pending,
    get_pending_count,
    signal,
)


class TestConstant:
    def test_get(self):
        s = Signal.constant(3)
        assert s.kind is SignalKind.CONSTANT
        assert s.get() == 3
        assert s.map(lambda v: v * 2) == 6

    def test_records_nothing(self, root):
        s = Signal.constant(3)
        reaction = create_effect(root, lambda cx: s.get(cx))
        assert len(reaction.scope) == 0

    def test_read_only(self):
        s = Signal.constant(3)
        assert not s.writable
        with pytest.raises(TypeError):
            s.set(4)
        with pytest.raises(TypeError):
            s.update(lambda v: v)


class TestFromCell:
    def test_delegates_read_and_write(self, root):
        m = create_mutable(root, "a")
        s = signal(m)
        assert s.writable
        s.set("b")
        assert m.get() == "b"
        s.update(str.upper)
        assert s.get() == "B"

    def test_read_records_the_cell(self, root):
        m = create_mutable(root, 1)
        s = signal(m)
        log = []
        create_effect(root, lambda cx: log.append(s.map(lambda v: v + 1, cx)))
        m.set(2)
        drain_pending()
        assert log == [2, 3]


class TestDerived:
    def test_recomputes_on_every_read(self, root):
        calls = []
        m = create_mutable(root, 2)

        def square(cx):
            calls.append(1)
            return m.get(cx) ** 2

        d = create_derived(square)
        assert d.get() == 4
        assert d.get() == 4
        assert len(calls) == 2  # not memoized

    def test_dependencies_flatten_into_caller(self, root):
        first = create_mutable(root, "Ada")
        last = create_mutable(root, "Lovelace")
        full = create_derived(lambda cx: f"{first.get(cx)} {last.get(cx)}")
        log = []
        reaction = create_effect(root, lambda cx: log.append(full.get(cx)))
        assert set(reaction.scope.keys()) == {first.key, last.key}

        last.set("Byron")
        drain_pending()
        assert log == ["Ada Lovelace", "Ada Byron"]

    def test_derived_of_derived(self, root):
        m = create_mutable(root, 3)
        doubled = create_derived(lambda cx: m.get(cx) * 2)
        quadrupled = create_derived(lambda cx: doubled.get(cx) * 2)
        log = []
        create_effect(root, lambda cx: log.append(quadrupled.get(cx)))
        m.set(5)
        drain_pending()
        assert log == [12, 20]

    def test_implicit_context_inside_reaction(self, root):
        m = create_mutable(root, 1)
        d = create_derived(lambda cx: m.get() + 1)  # ignores cx, still tracked
        create_effect(root, lambda cx: d.get())
        m.set(2)
        assert get_pending_count() == 1

    def test_conditional_dependencies(self, root):
        flag = create_mutable(root, True)
        a = create_mutable(root, "a")
        b = create_mutable(root, "b")
        pick = create_derived(lambda cx: a.get(cx) if flag.get(cx) else b.get(cx))
        reaction = create_effect(root, lambda cx: pick.get(cx))
        assert b.key not in reaction.scope
        flag.set(False)
        drain_pending()
        assert b.key in reaction.scope
        assert a.key not in reaction.scope


class TestOf:
    def test_conversions(self, root):
        m = create_mutable(root, 1)
        s = Signal.constant(2)
        assert Signal.of(s) is s
        assert Signal.of(m).kind is SignalKind.MUTABLE
        assert Signal.of(lambda cx: 3).kind is SignalKind.DERIVED
        assert Signal.of(4).kind is SignalKind.CONSTANT
        assert Signal.of([1, 2]).get() == [1, 2]

    def test_repr(self):
        assert "constant" in repr(Signal.constant(1))
