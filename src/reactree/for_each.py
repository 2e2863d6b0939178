"""Keyed list reconciliation — for_each() and for_each_cmp().

The list is a reaction whose children are one node per item, in source
order. Each run evaluates the source (tracked), then:

1. items whose key was present last time keep their node untouched,
2. items with a new key get a freshly built node,
3. nodes whose key disappeared are destroyed,
4. the children are reordered to match the source.

An empty source shows the fallback instead; it is replaced whole as soon as
the source has items again.
"""

from __future__ import annotations

from typing import Callable

from reactree.builder import build_child
from reactree.context import TrackingContext
from reactree.errors import DuplicateKey
from reactree.node import Node, reorder_children
from reactree.reaction import Reaction, create_effect
from reactree.signal import Signal

EachFn = Callable[..., None]


def _identity(item):
    return item


class _KeyedList:
    """Previous (key, node) entries plus the placeholder shown when empty."""

    __slots__ = ("_items", "_each", "_fallback", "_key", "_entries", "_placeholder")

    def __init__(self, items: Signal, each: EachFn, fallback, key) -> None:
        self._items = items
        self._each = each
        self._fallback = fallback
        self._key = key
        self._entries: list[tuple[object, Node]] = []
        self._placeholder: Node | None = None

    # --- Key matching ---

    def _check_unique(self, keys: list) -> None:
        seen: dict = {}
        for index, key in enumerate(keys):
            if key in seen:
                raise DuplicateKey(key, seen[key], index)
            seen[key] = index

    def _index(self, entries):
        return dict(entries)

    def _take(self, old, key) -> Node | None:
        return old.pop(key, None)

    def _leftovers(self, old) -> list[tuple[object, Node]]:
        return list(old.items())

    # --- Reconciliation ---

    def __call__(self, cx: TrackingContext) -> None:
        items = list(self._items.get(cx))
        keys = [self._key(item) for item in items]
        self._check_unique(keys)
        owner = cx.owner

        if not items:
            entries, self._entries = self._entries, []
            for _, node in reversed(entries):
                node.destroy()
            if self._placeholder is None and self._fallback is not None:
                self._placeholder = build_child(owner, self._fallback)
            return

        if self._placeholder is not None:
            placeholder, self._placeholder = self._placeholder, None
            placeholder.destroy()

        old = self._index(self._entries)
        entries: list[tuple[object, Node]] = []
        try:
            for key, item in zip(keys, items):
                node = self._take(old, key)
                if node is None:
                    node = build_child(owner, self._each, item)
                entries.append((key, node))
        except Exception:
            # Keep every live node accounted for so the next run can diff.
            self._entries = entries + self._leftovers(old)
            raise

        for _, node in self._leftovers(old):
            node.destroy()
        self._entries = entries
        reorder_children(owner, [node for _, node in entries])


class _ComparedList(_KeyedList):
    """Items are their own keys, matched with a caller-supplied equivalence."""

    __slots__ = ("_cmp",)

    def __init__(self, items: Signal, cmp, each: EachFn, fallback) -> None:
        super().__init__(items, each, fallback, _identity)
        self._cmp = cmp

    def _check_unique(self, keys: list) -> None:
        for index, key in enumerate(keys):
            for earlier in range(index):
                if self._cmp(keys[earlier], key):
                    raise DuplicateKey(key, earlier, index)

    def _index(self, entries):
        return list(entries)

    def _take(self, old, key) -> Node | None:
        for index, (old_key, node) in enumerate(old):
            if self._cmp(old_key, key):
                del old[index]
                return node
        return None

    def _leftovers(self, old) -> list[tuple[object, Node]]:
        return list(old)


def for_each(
    owner: Node,
    items: object,
    each: EachFn,
    fallback: Callable | None = None,
    key: Callable | None = None,
) -> Reaction:
    """Build one child per item, keyed by key(item) (the item itself by default).

    Keys must be hashable and unique within one evaluation; a repeated key
    fails the run with DuplicateKey. each(builder, item) builds an item's node.

    Usage:
        todos = b.create_mutable(["milk", "eggs"])
        for_each(b.parent, todos, lambda b, name: b.spawn(name))
        todos.set(["eggs", "bread"])
        # after the next drain: "eggs" node reused, "bread" built, "milk" destroyed
    """
    return create_effect(owner, _KeyedList(Signal.of(items), each, fallback, key or _identity))


def for_each_cmp(
    owner: Node,
    items: object,
    cmp: Callable[[object, object], bool],
    each: EachFn,
    fallback: Callable | None = None,
) -> Reaction:
    """Like for_each, but items are matched with cmp(old, new).

    cmp must be an equivalence relation. Matching is linear per item, so this
    suits short lists of unhashable items.
    """
    return create_effect(owner, _ComparedList(Signal.of(items), cmp, each, fallback))
