"""Read contexts and tracking scopes.

A TrackingScope is the dependency set of one reaction: a mapping from store
key to the version observed when the key was last read. A TrackingContext
records into a scope on every read; a ReadContext reads without recording.

Uses contextvars to remember the context of the reaction currently running,
so reads that are not handed an explicit context still land in the right
scope.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import TYPE_CHECKING

from reactree import _anchor

if TYPE_CHECKING:
    from reactree.reaction import Reaction
    from reactree.store import Key

MISSING = object()

# The context of the reaction currently running, if any.
current_context: contextvars.ContextVar[ReadContext | None] = contextvars.ContextVar(
    "current_context", default=None
)


class TrackingScope:
    """The dependency set of one reaction. Thin handle over _anchor.scopes."""

    __slots__ = ("_id",)

    def __init__(self, reaction_id: int) -> None:
        self._id = reaction_id

    def record(self, key: Key, version: int | None) -> None:
        """Record a read. Re-reading a key updates its version in place."""
        deps = _anchor.scopes.get(self._id)
        if deps is None:
            return  # the reaction was destroyed by its own run
        deps[key] = version
        _anchor.subscribers.setdefault(key, set()).add(self._id)

    def clear(self) -> None:
        """Drop every record. The only way a dependency is ever removed."""
        deps = _anchor.scopes.get(self._id)
        if not deps:
            return
        for key in deps:
            readers = _anchor.subscribers.get(key)
            if readers is not None:
                readers.discard(self._id)
                if not readers:
                    del _anchor.subscribers[key]
        deps.clear()

    def version_of(self, key: Key) -> int | None:
        return _anchor.scopes[self._id][key]

    def is_stale(self) -> bool:
        store = _anchor.store
        return any(
            store.changed_since(key, version)
            for key, version in _anchor.scopes.get(self._id, {}).items()
        )

    def keys(self) -> list[Key]:
        return list(_anchor.scopes.get(self._id, ()))

    def __contains__(self, key: Key) -> bool:
        return key in _anchor.scopes.get(self._id, ())

    def __len__(self) -> int:
        return len(_anchor.scopes.get(self._id, ()))

    def __repr__(self) -> str:
        return f"TrackingScope({self._id}, {self.keys()!r})"


class ReadContext:
    """Non-tracking read handle."""

    __slots__ = ()

    tracking = False

    def read(self, key: Key, default: object = MISSING) -> object:
        """Read a store value. Raises KeyError for a missing key without default."""
        try:
            value, _ = _anchor.store.read(key)
        except KeyError:
            if default is MISSING:
                raise
            return default
        return value

    def __repr__(self) -> str:
        return "ReadContext()"


class TrackingContext(ReadContext):
    """Reactive context handed to a reaction's action. Every read is recorded."""

    __slots__ = ("scope", "owner")

    tracking = True

    def __init__(self, scope: TrackingScope, owner: Reaction) -> None:
        self.scope = scope
        self.owner = owner

    def read(self, key: Key, default: object = MISSING) -> object:
        try:
            value, version = _anchor.store.read(key)
        except KeyError:
            # Subscribe anyway so the first write wakes us up.
            self.scope.record(key, None)
            if default is MISSING:
                raise
            return default
        self.scope.record(key, version)
        return value

    def __repr__(self) -> str:
        return f"TrackingContext(owner={self.owner!r})"


UNTRACKED = ReadContext()


def resolve(cx: ReadContext | None) -> ReadContext:
    """Pick the context for a read: explicit, else the running reaction's, else untracked."""
    if cx is not None:
        return cx
    active = current_context.get()
    return active if active is not None else UNTRACKED


@contextmanager
def untracked():
    """Make reads inside the block non-tracking.

    Usage:
        with untracked():
            total = counter.get()  # not recorded by the running reaction
    """
    token = current_context.set(UNTRACKED)
    try:
        yield UNTRACKED
    finally:
        current_context.reset(token)
