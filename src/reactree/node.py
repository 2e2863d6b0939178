"""Ownership tree — every node has one owner; destroying a node destroys its subtree.

Reactions, mutables, callbacks and built output nodes are all nodes of the
same tree. Destruction is depth-first and synchronous: when destroy() returns,
every descendant is gone, reactions are unscheduled, mutable storage is
reclaimed and callbacks are uninvokable.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from reactree import _anchor
from reactree.errors import InvariantViolation, StaleHandle

logger = logging.getLogger("reactree.tree")

_UNSET = object()


class Handle:
    """Base for every handle into the arena. Equal when the ids are equal."""

    __slots__ = ("_id",)

    kind = _anchor.NODE

    def __init__(self, node_id: int) -> None:
        self._id = node_id

    @property
    def id(self) -> int:
        return self._id

    @property
    def alive(self) -> bool:
        return self._id in _anchor.kinds

    @property
    def parent(self) -> Node | None:
        self._check()
        parent_id = _anchor.parents[self._id]
        return None if parent_id is None else Node(parent_id)

    def destroy(self) -> None:
        destroy(self)

    def _check(self) -> None:
        if self._id not in _anchor.kinds:
            raise StaleHandle(self.kind, self._id)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Handle) and other._id == self._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        state = "alive" if self.alive else "destroyed"
        return f"{type(self).__name__}({self._id}, {state})"


class Node(Handle):
    """A node of the ownership tree that can own other nodes."""

    __slots__ = ()

    @property
    def children(self) -> list[Node]:
        self._check()
        return [Node(child) for child in _anchor.children[self._id]]

    @property
    def payload(self) -> object:
        """The host's output object for this node, if any."""
        self._check()
        return _anchor.payloads.get(self._id)

    @payload.setter
    def payload(self, value: object) -> None:
        self._check()
        _anchor.payloads[self._id] = value

    def create_child(self, payload: object = None) -> Node:
        return create_child(self, payload)

    def on_destroy(self, fn: Callable[[], None]) -> None:
        on_destroy(self, fn)

    def provide(self, key: object, value: object) -> None:
        """Make value visible to this node and its descendants under key."""
        self._check()
        _anchor.provided.setdefault(self._id, {})[key] = value

    def inherited(self, key: object, default: object = None) -> object:
        """Look key up on this node, then on each ancestor in turn."""
        self._check()
        node_id = self._id
        while node_id is not None:
            values = _anchor.provided.get(node_id)
            if values is not None:
                value = values.get(key, _UNSET)
                if value is not _UNSET:
                    return value
            node_id = _anchor.parents[node_id]
        return default


def attach(owner: Handle | None, kind: str) -> int:
    """Allocate a node of the given kind under owner (None makes a root)."""
    if owner is not None:
        owner._check()
    node_id = _anchor.new_id()
    _anchor.kinds[node_id] = kind
    _anchor.parents[node_id] = None if owner is None else owner._id
    _anchor.children[node_id] = []
    if owner is not None:
        _anchor.children[owner._id].append(node_id)
    return node_id


def create_root(payload: object = None) -> Node:
    """Create a node with no owner. Its lifetime is the caller's business."""
    node = Node(attach(None, _anchor.NODE))
    if payload is not None:
        _anchor.payloads[node._id] = payload
    return node


def create_child(owner: Handle, payload: object = None) -> Node:
    node = Node(attach(owner, _anchor.NODE))
    if payload is not None:
        _anchor.payloads[node._id] = payload
    return node


def on_destroy(node: Handle, fn: Callable[[], None]) -> None:
    """Run fn when node is destroyed, after its children are gone."""
    node._check()
    _anchor.finalizers.setdefault(node._id, []).append(fn)


def reorder_children(node: Handle, order: Iterable[Handle | int]) -> None:
    """Replace node's child order with a permutation of its current children."""
    node._check()
    ids = [child if isinstance(child, int) else child._id for child in order]
    current = _anchor.children[node._id]
    if len(ids) != len(current) or set(ids) != set(current):
        raise InvariantViolation(
            f"reorder of node {node._id} is not a permutation of its children"
        )
    _anchor.children[node._id] = ids


def destroy(node: Handle) -> None:
    """Destroy node and its whole subtree, depth-first, before returning."""
    if node._id not in _anchor.kinds:
        raise InvariantViolation(f"node {node._id} destroyed twice")
    count = _destroy(node._id)
    logger.debug("Destroyed node %d (%d nodes)", node._id, count)


def _destroy(node_id: int) -> int:
    count = 1
    # Last created first, so later siblings never outlive what they were built from.
    for child in reversed(list(_anchor.children[node_id])):
        count += _destroy(child)

    for fn in _anchor.finalizers.pop(node_id, ()):
        try:
            fn()
        except Exception as exc:
            raise InvariantViolation(f"finalizer of node {node_id} failed: {exc!r}") from exc
    # Checked after finalizers: one may have attached a new child.
    if _anchor.children[node_id]:
        raise InvariantViolation(f"node {node_id} still has children after teardown")

    kind = _anchor.kinds.pop(node_id)
    if kind == _anchor.REACTION:
        for key in _anchor.scopes.pop(node_id, {}):
            readers = _anchor.subscribers.get(key)
            if readers is not None:
                readers.discard(node_id)
                if not readers:
                    del _anchor.subscribers[key]
        _anchor.pending.pop(node_id, None)
        _anchor.reactions.pop(node_id, None)
        _anchor.actions.pop(node_id, None)
        _anchor.errors.pop(node_id, None)
    elif kind == _anchor.MUTABLE:
        _anchor.store.remove(_anchor.cell_keys.pop(node_id))
    elif kind == _anchor.CALLBACK:
        _anchor.callbacks.pop(node_id, None)

    _anchor.payloads.pop(node_id, None)
    _anchor.provided.pop(node_id, None)
    del _anchor.children[node_id]
    parent_id = _anchor.parents.pop(node_id)
    if parent_id is not None:
        try:
            _anchor.children[parent_id].remove(node_id)
        except (KeyError, ValueError):
            raise InvariantViolation(
                f"node {node_id} is missing from its parent {parent_id}"
            ) from None
    return count
