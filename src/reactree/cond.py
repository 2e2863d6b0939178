"""Conditional reconciliation — cond() and switch().

The slot is a reaction. Each run evaluates the discriminant (tracked) into a
tag. Same tag as last time: nothing happens, and the built branch keeps its
own reactions. New tag: the old branch is destroyed, then the arm for the
new tag is built into a fresh child of the slot, synchronously.
"""

from __future__ import annotations

from typing import Callable, Iterable

from reactree.builder import BuildFn, build_child
from reactree.context import TrackingContext
from reactree.node import Node
from reactree.reaction import Reaction, create_effect
from reactree.signal import Signal

_UNSET = object()

FALLBACK = "fallback"


class _Slot:
    """Which tag is built, and the branch node built for it."""

    __slots__ = ("_tag", "_branch")

    def __init__(self) -> None:
        self._tag = _UNSET
        self._branch: Node | None = None

    def _select(self, cx: TrackingContext) -> tuple[object, BuildFn | None]:
        raise NotImplementedError

    def __call__(self, cx: TrackingContext) -> None:
        tag, arm = self._select(cx)
        if self._tag is not _UNSET and tag == self._tag:
            return
        if self._branch is not None:
            branch, self._branch = self._branch, None
            branch.destroy()
        self._tag = _UNSET
        if arm is not None:
            self._branch = build_child(cx.owner, arm)
        self._tag = tag


class _CondSlot(_Slot):
    __slots__ = ("_test", "_pos", "_neg")

    def __init__(self, test: Signal, pos: BuildFn | None, neg: BuildFn | None) -> None:
        super().__init__()
        self._test = test
        self._pos = pos
        self._neg = neg

    def _select(self, cx):
        if self._test.get(cx):
            return True, self._pos
        return False, self._neg


class _SwitchSlot(_Slot):
    __slots__ = ("_value", "_cases", "_fallback")

    def __init__(self, value: Signal, cases: list, fallback: BuildFn | None) -> None:
        super().__init__()
        self._value = value
        self._cases = cases
        self._fallback = fallback

    def _select(self, cx):
        value = self._value.get(cx)
        # First matching arm wins.
        for index, (pattern, arm) in enumerate(self._cases):
            matched = pattern(value) if callable(pattern) else pattern == value
            if matched:
                return index, arm
        if self._fallback is not None:
            return FALLBACK, self._fallback
        return None, None


def cond(
    owner: Node,
    test: object,
    pos: BuildFn | None,
    neg: BuildFn | None = None,
) -> Reaction:
    """Build pos or neg depending on test; rebuild only when the answer flips.

    test is anything Signal.of() accepts: a Signal, a Mutable, a function of
    the context, or a constant. The branch builders receive a Builder bound to
    the branch node. Returns the slot reaction, whose only child is the
    current branch.

    Usage:
        open_ = b.create_mutable(False)
        cond(
            b.parent,
            open_,
            lambda b: b.spawn("dialog"),
            lambda b: b.spawn("button"),
        )
    """
    return create_effect(owner, _CondSlot(Signal.of(test), pos, neg))


def switch(
    owner: Node,
    value: object,
    cases: Iterable[tuple[object, BuildFn]],
    fallback: BuildFn | None = None,
) -> Reaction:
    """Build the arm of the first case matching value.

    A case pattern that is callable is a predicate over the value; anything
    else matches by equality. With no match, fallback is built, or the slot is
    left empty when there is none.
    """
    return create_effect(owner, _SwitchSlot(Signal.of(value), list(cases), fallback))
