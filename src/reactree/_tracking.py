"""Scheduler — the heart of reactree.

The active store notifies on_write() of every write. Each reaction whose
scope recorded that key at an older version is marked dirty; dirty reactions
wait in an insertion-ordered pending set until the host calls drain_pending()
at its tick boundary. Reactions re-run during a drain may dirty others, which
join the same pass. The pass ends when nothing is pending, or fails loudly
once it has run more reactions than the drain limit allows.
"""

from __future__ import annotations

import logging

from reactree import _anchor
from reactree.errors import RECOVERABLE, InvariantViolation, UnboundedDirtyingCycle
from reactree.mutable import set_dispatcher
from reactree.store import Key, MemoryStore, StoreAdapter

logger = logging.getLogger("reactree.scheduler")

DEFAULT_DRAIN_LIMIT = 10_000

_drain_limit: int = DEFAULT_DRAIN_LIMIT
_draining: bool = False
_unsubscribe_store = None


def set_store(store: StoreAdapter) -> None:
    """Install the store every read and write goes through.

    Call once during host setup, before building anything: mutables created
    against the previous store keep their values there.
    """
    global _unsubscribe_store
    if _unsubscribe_store is not None:
        _unsubscribe_store()
    _anchor.store = store
    _unsubscribe_store = store.subscribe(on_write)


def get_store() -> StoreAdapter:
    return _anchor.store


def set_drain_limit(limit: int) -> None:
    """Set the maximum number of reaction runs allowed in one drain pass."""
    global _drain_limit
    if limit < 1:
        raise ValueError(f"drain limit must be positive, got {limit}")
    _drain_limit = limit


def on_write(key: Key) -> None:
    """Store listener: mark every reaction that read a now-stale version of key."""
    readers = _anchor.subscribers.get(key)
    if not readers:
        return
    store = _anchor.store
    for reaction_id in sorted(readers):
        if store.changed_since(key, _anchor.scopes[reaction_id].get(key)):
            mark_dirty(reaction_id)


def mark_dirty(reaction_id: int) -> None:
    """Queue a live reaction. Re-dirtying a pending reaction keeps its place."""
    if reaction_id in _anchor.reactions and reaction_id not in _anchor.pending:
        _anchor.pending[reaction_id] = None


def drain_pending() -> int:
    """Run pending reactions until none are left. Returns the number of runs.

    Recoverable failures (StaleHandle, DuplicateKey) are logged, kept on the
    reaction and do not stop the pass. Anything else aborts the pass and
    leaves the remaining reactions pending for the next call.
    """
    global _draining
    if _draining:
        raise InvariantViolation("drain_pending() called from inside a drain pass")
    _draining = True
    ran = 0
    try:
        while _anchor.pending:
            if ran >= _drain_limit:
                logger.error(
                    "Drain pass exceeded %d runs; %d reactions still pending",
                    _drain_limit, len(_anchor.pending),
                )
                raise UnboundedDirtyingCycle(_drain_limit, len(_anchor.pending))
            reaction_id = next(iter(_anchor.pending))
            del _anchor.pending[reaction_id]
            reaction = _anchor.reactions.get(reaction_id)
            if reaction is None:
                continue
            ran += 1
            try:
                reaction._run()
            except RECOVERABLE as exc:
                logger.warning("Reaction %d failed: %s", reaction_id, exc)
    finally:
        _draining = False
    if ran:
        logger.debug("Drained %d reaction runs", ran)
    return ran


def get_pending_count() -> int:
    """Number of reactions waiting to run. Useful for testing."""
    return len(_anchor.pending)


def reset() -> None:
    """Drop every node, turn marshaling off and install a fresh MemoryStore.

    For test isolation.
    """
    global _drain_limit, _draining
    _anchor.reset()
    set_dispatcher(None)
    _drain_limit = DEFAULT_DRAIN_LIMIT
    _draining = False
    set_store(MemoryStore())


set_store(MemoryStore())
