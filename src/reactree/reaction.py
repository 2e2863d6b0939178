"""Reactions — actions re-run when the store keys they read change.

A reaction runs once when created, recording every read into its tracking
scope. When a recorded key is written, the scheduler queues the reaction;
the next drain_pending() clears the scope and runs the action again, so the
dependency set always matches the latest run.

A reaction is also a node: whatever its action builds under cx.owner is
destroyed with it.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

from typing import Callable

from reactree import _anchor
from reactree._tracking import mark_dirty
from reactree.context import TrackingContext, TrackingScope, current_context
from reactree.errors import RECOVERABLE
from reactree.node import Handle, Node, attach

Action = Callable[[TrackingContext], None]


class Reaction(Node):
    """A tracking scope bound to a re-runnable action."""

    __slots__ = ()

    kind = _anchor.REACTION

    @property
    def scope(self) -> TrackingScope:
        self._check()
        return TrackingScope(self._id)

    @property
    def error(self) -> BaseException | None:
        """The recoverable failure of the last run, or None if it succeeded."""
        return _anchor.errors.get(self._id)

    @property
    def pending(self) -> bool:
        return self._id in _anchor.pending

    def run(self) -> None:
        """Re-run now, outside any drain pass."""
        self._check()
        _anchor.pending.pop(self._id, None)
        self._run()

    def invalidate(self) -> None:
        """Queue for the next drain pass without any store write."""
        self._check()
        mark_dirty(self._id)

    def _run(self) -> None:
        """Clear the scope, then run the action with a context bound to it."""
        if self._id not in _anchor.reactions:
            return
        scope = TrackingScope(self._id)
        scope.clear()
        _anchor.errors.pop(self._id, None)

        cx = TrackingContext(scope, self)
        token = current_context.set(cx)
        try:
            _anchor.actions[self._id](cx)
        except RECOVERABLE as exc:
            if self._id in _anchor.reactions:
                _anchor.errors[self._id] = exc
            raise
        finally:
            current_context.reset(token)

    def __repr__(self) -> str:
        state = "alive" if self.alive else "destroyed"
        action = _anchor.actions.get(self._id)
        name = getattr(action, "__name__", type(action).__name__)
        return f"Reaction({self._id}, {name}, {state})"


def create_effect(owner: Handle, action: Action) -> Reaction:
    """Create a reaction owned by owner and run it immediately.

    Errors from this first run propagate to the caller. The reaction stays
    alive and subscribed to whatever it read, so a later write can recover it.

    Usage:
        root = create_root()
        counter = create_mutable(root, 0)
        log = []

        create_effect(root, lambda cx: log.append(counter.get(cx)))
        # log == [0] — ran immediately

        counter.set(1)
        drain_pending()
        # log == [0, 1]

        root.destroy()
        # reaction gone; further writes to counter are impossible
    """
    reaction_id = attach(owner, _anchor.REACTION)
    reaction = Reaction(reaction_id)
    _anchor.actions[reaction_id] = action
    _anchor.scopes[reaction_id] = {}
    _anchor.reactions[reaction_id] = reaction
    reaction._run()
    return reaction


def run_reaction(reaction: Reaction) -> None:
    reaction.run()
