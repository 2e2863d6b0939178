"""Indexed list reconciliation — for_index().

Position is identity: child i always renders item i. A changed item is
updated in place through the caller's update function, new trailing items
are built and appended, and surplus trailing children are destroyed. No
moves are ever detected and no reordering happens.
"""

from __future__ import annotations

import operator
from typing import Callable

from reactree.builder import Builder, build_child
from reactree.context import TrackingContext, untracked
from reactree.node import Node
from reactree.reaction import Reaction, create_effect
from reactree.signal import Signal

ItemFn = Callable[[Builder, object, int], None]


class _IndexedList:
    __slots__ = ("_items", "_each", "_update", "_fallback", "_cmp", "_values", "_nodes", "_placeholder")

    def __init__(self, items: Signal, each: ItemFn, update: ItemFn, fallback, cmp) -> None:
        self._items = items
        self._each = each
        self._update = update
        self._fallback = fallback
        self._cmp = cmp
        self._values: list = []
        self._nodes: list[Node] = []
        self._placeholder: Node | None = None

    def __call__(self, cx: TrackingContext) -> None:
        items = list(self._items.get(cx))
        owner = cx.owner

        if items and self._placeholder is not None:
            placeholder, self._placeholder = self._placeholder, None
            placeholder.destroy()

        for index in range(min(len(items), len(self._values))):
            item = items[index]
            if not self._cmp(self._values[index], item):
                with untracked():
                    self._update(Builder(self._nodes[index]), item, index)
                self._values[index] = item

        for index in range(len(self._values), len(items)):
            item = items[index]
            self._nodes.append(build_child(owner, self._each, item, index))
            self._values.append(item)

        while len(self._nodes) > len(items):
            self._values.pop()
            self._nodes.pop().destroy()

        if not items and self._placeholder is None and self._fallback is not None:
            self._placeholder = build_child(owner, self._fallback)


def for_index(
    owner: Node,
    items: object,
    each: ItemFn,
    update: ItemFn,
    fallback: Callable | None = None,
    cmp: Callable[[object, object], bool] | None = None,
) -> Reaction:
    """Build one child per position; update changed positions in place.

    each(builder, item, index) builds the node for a new position.
    update(builder, item, index) refreshes an existing node whose item
    changed (cmp(old, new) is false; cmp defaults to ==). The builder passed
    to update is bound to the existing node.

    Usage:
        scores = b.create_mutable([1, 2, 3])

        def show(b, score, i):
            b.parent.payload = score

        for_index(b.parent, scores, show, show)
        scores.set([1, 5])
        # after the next drain: child 1 shows 5 (same node), child 2 destroyed
    """
    return create_effect(
        owner, _IndexedList(Signal.of(items), each, update, fallback, cmp or operator.eq)
    )
