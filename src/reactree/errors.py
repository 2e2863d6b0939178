"""Exceptions raised by reactree."""

from __future__ import annotations


class ReactreeError(Exception):
    """Base exception for all reactree errors."""


class StaleHandle(ReactreeError):
    """Raised when a handle is used after its node was destroyed."""

    def __init__(self, kind: str, node_id: int):
        self.kind = kind
        self.node_id = node_id
        super().__init__(f"{kind} {node_id} has been destroyed")


class DuplicateKey(ReactreeError):
    """Raised when two items of one keyed-list evaluation share a key."""

    def __init__(self, key: object, first: int, second: int):
        self.key = key
        self.first = first
        self.second = second
        super().__init__(f"Duplicate key {key!r} at positions {first} and {second}")


class UnboundedDirtyingCycle(ReactreeError):
    """Raised when a drain pass keeps re-dirtying reactions past its limit."""

    def __init__(self, limit: int, remaining: int):
        self.limit = limit
        self.remaining = remaining
        super().__init__(
            f"Drain pass aborted after {limit} reaction runs; {remaining} still pending"
        )


class InvariantViolation(ReactreeError):
    """Raised when the runtime's own bookkeeping is inconsistent. Not recoverable."""


# Failures local to one operation; the runtime stays usable.
RECOVERABLE = (StaleHandle, DuplicateKey)
