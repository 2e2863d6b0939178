"""Callbacks — invocable units owned by a node.

Same lifetime rule as reactions, but no tracking scope: a callback runs only
when invoked, and reads inside it are never recorded by whatever reaction
happens to be running.
"""

from __future__ import annotations

from typing import Callable

from reactree import _anchor
from reactree.context import untracked
from reactree.node import Handle, attach


class Callback(Handle):
    """Handle to an owned callable."""

    __slots__ = ()

    kind = _anchor.CALLBACK

    def run(self, *args, **kwargs):
        """Invoke the callable. Raises StaleHandle once the owner is destroyed."""
        self._check()
        fn = _anchor.callbacks[self._id]
        with untracked():
            return fn(*args, **kwargs)

    def __call__(self, *args, **kwargs):
        return self.run(*args, **kwargs)


def create_callback(owner: Handle, fn: Callable) -> Callback:
    node_id = attach(owner, _anchor.CALLBACK)
    _anchor.callbacks[node_id] = fn
    return Callback(node_id)


def run_callback(callback: Callback, *args, **kwargs):
    return callback.run(*args, **kwargs)
