"""Tests for Mutable cells."""

import threading

import pytest

from reactree import (
    Signal,
    SignalKind,
    Mutable,
    StaleHandle,
    create_effect,
    create_mutable,
    create_root,
    drain_pending,
    get_store,
    set_dispatcher,
)
from reactree import _tracking


class TestMutable:
    def test_get_set(self, root):
        m = create_mutable(root, 42)
        assert m.get() == 42
        m.set(100)
        assert m.get() == 100

    def test_initial_value_at_version_zero(self, root):
        m = create_mutable(root, "a")
        assert get_store().read(m.key) == ("a", 0)
        m.set("b")
        assert get_store().version(m.key) == 1

    def test_every_set_notifies(self, root):
        """Writes are never deduplicated; each one bumps the version."""
        m = create_mutable(root, 42)
        log = []
        create_effect(root, lambda cx: log.append(m.get(cx)))
        m.set(42)
        drain_pending()
        assert log == [42, 42]

    def test_update_is_read_modify_write(self, root):
        m = create_mutable(root, 1)
        m.update(lambda v: v + 1)
        assert m.get() == 2

    def test_update_inside_reaction_is_not_tracked(self, root):
        counter = create_mutable(root, 0)
        trigger = create_mutable(root, 0)
        reaction = create_effect(root, lambda cx: (trigger.get(cx), counter.update(lambda v: v + 1)))
        assert counter.key not in reaction.scope
        trigger.set(1)
        assert drain_pending() == 1  # no self-dirtying
        assert counter.get() == 2

    def test_map(self, root):
        m = create_mutable(root, [1, 2, 3])
        log = []
        create_effect(root, lambda cx: log.append(m.map(len, cx)))
        m.set([1])
        drain_pending()
        assert log == [3, 1]

    def test_signal(self, root):
        m = create_mutable(root, 5)
        s = m.signal()
        assert isinstance(s, Signal)
        assert s.kind is SignalKind.MUTABLE
        assert s.get() == 5

    def test_handles_are_copyable_values(self, root):
        m = create_mutable(root, 1)
        other = Mutable(m.id)
        other.set(9)
        assert m.get() == 9
        assert other == m
        assert len({m, other}) == 1

    def test_stale_after_owner_destroyed(self, root):
        holder = root.create_child()
        m = create_mutable(holder, 1)
        holder.destroy()
        with pytest.raises(StaleHandle) as info:
            m.get()
        assert info.value.kind == "mutable"
        with pytest.raises(StaleHandle):
            m.update(lambda v: v)
        assert "destroyed" in repr(m)

    def test_repr(self, root):
        assert "Mutable" in repr(create_mutable(root, 5))
        assert "5" in repr(create_mutable(root, 5))


class TestDispatcher:
    def test_background_writes_are_marshaled(self, root):
        m = create_mutable(root, 0)
        queued = []
        set_dispatcher(queued.append)

        worker = threading.Thread(target=lambda: m.set(7))
        worker.start()
        worker.join()

        assert m.get() == 0  # not applied yet
        assert len(queued) == 1
        queued[0]()
        assert m.get() == 7

    def test_reset_turns_marshaling_off(self):
        queued = []
        set_dispatcher(queued.append)
        _tracking.reset()

        m = create_mutable(create_root(), 0)
        worker = threading.Thread(target=lambda: m.set(7))
        worker.start()
        worker.join()

        assert queued == []
        assert m.get() == 7

    def test_host_thread_writes_stay_synchronous(self, root):
        m = create_mutable(root, 0)
        queued = []
        set_dispatcher(queued.append)
        m.set(3)
        assert m.get() == 3
        assert queued == []
