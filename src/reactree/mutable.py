"""Mutable cells — owner-scoped read/write state kept in the store.

A Mutable is a node of the ownership tree whose value lives in the store
under ("mutable", node_id). Reading it through a tracking context records a
dependency; writing it bumps the key's version and lets the scheduler queue
every reaction that read the old version. Destroying the owner reclaims the
storage, after which the handle raises StaleHandle.

Thread safety: call set_dispatcher() once from the host thread. After that,
any .set() from a background thread is auto-marshaled. Host-thread .set()
remains synchronous.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from reactree import _anchor
from reactree.context import UNTRACKED, ReadContext, resolve
from reactree.node import Handle, attach

if TYPE_CHECKING:
    from reactree.signal import Signal

T = TypeVar("T")
U = TypeVar("U")

# ─── Auto-marshal ────────────────────────────────────────────────────────────
_dispatcher = None
_dispatcher_thread = None


def set_dispatcher(dispatch: Callable[[Callable[[], None]], object] | None) -> None:
    """Set how writes from background threads reach the host thread.

    Call once from the host thread:
        reactree.set_dispatcher(app.call_from_thread)

    After this, any Mutable.set() from another thread is handed to dispatch.
    Passing None turns marshaling off.
    """
    global _dispatcher, _dispatcher_thread
    _dispatcher = dispatch
    _dispatcher_thread = threading.current_thread() if dispatch is not None else None


class Mutable(Handle, Generic[T]):
    """A store-backed, owner-scoped read/write handle."""

    __slots__ = ()

    kind = _anchor.MUTABLE

    @property
    def key(self) -> tuple[str, int]:
        self._check()
        return _anchor.cell_keys[self._id]

    def get(self, cx: ReadContext | None = None) -> T:
        """Read the value. Inside a reaction, the read is recorded."""
        self._check()
        return resolve(cx).read(_anchor.cell_keys[self._id])

    def set(self, value: T) -> None:
        """Write a new value. Auto-marshals from background threads."""
        self._check()
        if _dispatcher is not None and threading.current_thread() != _dispatcher_thread:
            _dispatcher(lambda v=value: self._set_direct(v))
        else:
            self._set_direct(value)

    def _set_direct(self, value: T) -> None:
        self._check()
        _anchor.store.write(_anchor.cell_keys[self._id], value)

    def update(self, fn: Callable[[T], T]) -> None:
        """Read-modify-write. The read is never tracked."""
        self.set(fn(self.get(UNTRACKED)))

    def map(self, fn: Callable[[T], U], cx: ReadContext | None = None) -> U:
        """Apply fn to the current value; tracked exactly like get()."""
        return fn(self.get(cx))

    def signal(self) -> Signal[T]:
        from reactree.signal import Signal

        return Signal.from_cell(self)

    def __repr__(self) -> str:
        if not self.alive:
            return f"Mutable({self._id}, destroyed)"
        return f"Mutable({self._id}, {self.get(UNTRACKED)!r})"


def create_mutable(owner: Handle, initial: T) -> Mutable[T]:
    """Allocate a cell owned by owner, holding initial at version 0."""
    node_id = attach(owner, _anchor.MUTABLE)
    key = (_anchor.MUTABLE, node_id)
    _anchor.cell_keys[node_id] = key
    _anchor.store.write(key, initial)
    return Mutable(node_id)
