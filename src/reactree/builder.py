"""Builder — the creation surface for one parent node.

A builder function runs once with a Builder and creates mutables, reactions,
callbacks and child nodes under the builder's parent. Ownership is the only
lifetime mechanism: everything created here dies with the parent.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from reactree.callback import Callback, create_callback
from reactree.context import ReadContext, untracked
from reactree.mutable import Mutable, create_mutable
from reactree.node import Node, create_child, create_root
from reactree.reaction import Action, Reaction, create_effect
from reactree.signal import Signal, create_derived

T = TypeVar("T")

BuildFn = Callable[["Builder"], None]


class Builder:
    """Creates nodes, state and reactions owned by one parent."""

    __slots__ = ("_parent",)

    def __init__(self, parent: Node) -> None:
        self._parent = parent

    @property
    def parent(self) -> Node:
        return self._parent

    def spawn(self, payload: object = None, children: BuildFn | None = None) -> Node:
        """Create a child node; if children is given, build into it right away."""
        node = create_child(self._parent, payload)
        if children is not None:
            children(Builder(node))
        return node

    def create_mutable(self, initial: T) -> Mutable[T]:
        return create_mutable(self._parent, initial)

    def create_effect(self, action: Action) -> Reaction:
        return create_effect(self._parent, action)

    def create_callback(self, fn: Callable) -> Callback:
        return create_callback(self._parent, fn)

    def create_derived(self, fn: Callable[[ReadContext], T]) -> Signal[T]:
        """Derived signals have no owner; nothing is kept alive by this call."""
        return create_derived(fn)

    def on_destroy(self, fn: Callable[[], None]) -> None:
        self._parent.on_destroy(fn)

    def provide(self, key: object, value: object) -> None:
        self._parent.provide(key, value)

    def use_inherited(self, key: object, default: object = None) -> object:
        """Nearest value provided under key by the parent or one of its ancestors."""
        return self._parent.inherited(key, default)

    def __repr__(self) -> str:
        return f"Builder({self._parent!r})"


def build_child(owner: Node, fn: Callable, *args) -> Node:
    """Create a child of owner and run fn(Builder(child), *args) untracked.

    If fn raises, the half-built child is destroyed before the error propagates.
    """
    child = create_child(owner)
    try:
        with untracked():
            fn(Builder(child), *args)
    except Exception:
        if child.alive:
            child.destroy()
        raise
    return child


def mount(build: BuildFn, payload: object = None) -> Node:
    """Create a root node and run build once against it.

    Usage:
        def app(b):
            count = b.create_mutable(0)
            b.create_effect(lambda cx: print(count.get(cx)))

        root = mount(app)
        ...
        root.destroy()
    """
    root = create_root(payload)
    build(Builder(root))
    return root
