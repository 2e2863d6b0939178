"""Signals — one read interface over constant, mutable and derived values.

A Signal is a closed tagged variant. Callers read it with get()/map() and
never need to know which kind they hold:

- CONSTANT: a plain value. Never stale, records nothing.
- MUTABLE: delegates to a Mutable. Reads record the cell's key; writable.
- DERIVED: a function of a context, re-run on every read. It has no scope
  of its own, so whatever it reads lands in the caller's scope. Nothing is
  cached.
"""

from __future__ import annotations

import enum
from typing import Callable, Generic, TypeVar

from reactree.context import ReadContext, resolve
from reactree.mutable import Mutable

T = TypeVar("T")
U = TypeVar("U")


class SignalKind(enum.Enum):
    CONSTANT = "constant"
    MUTABLE = "mutable"
    DERIVED = "derived"


class Signal(Generic[T]):
    """Uniform read interface over constant, mutable and derived values."""

    __slots__ = ("kind", "_value")

    def __init__(self, kind: SignalKind, value: object) -> None:
        self.kind = kind
        self._value = value

    @classmethod
    def constant(cls, value: T) -> Signal[T]:
        return cls(SignalKind.CONSTANT, value)

    @classmethod
    def from_cell(cls, cell: Mutable[T]) -> Signal[T]:
        return cls(SignalKind.MUTABLE, cell)

    @classmethod
    def derived(cls, fn: Callable[[ReadContext], T]) -> Signal[T]:
        return cls(SignalKind.DERIVED, fn)

    @classmethod
    def of(cls, value: object) -> Signal:
        """Convert anything signal-like into a Signal.

        Signals pass through, mutables are wrapped, other callables become
        derived signals and everything else is a constant.
        """
        if isinstance(value, Signal):
            return value
        if isinstance(value, Mutable):
            return cls.from_cell(value)
        if callable(value):
            return cls.derived(value)
        return cls.constant(value)

    @property
    def writable(self) -> bool:
        return self.kind is SignalKind.MUTABLE

    def get(self, cx: ReadContext | None = None) -> T:
        if self.kind is SignalKind.CONSTANT:
            return self._value
        if self.kind is SignalKind.MUTABLE:
            return self._value.get(cx)
        return self._value(resolve(cx))

    def map(self, fn: Callable[[T], U], cx: ReadContext | None = None) -> U:
        return fn(self.get(cx))

    def set(self, value: T) -> None:
        if self.kind is not SignalKind.MUTABLE:
            raise TypeError(f"{self.kind.value} signal is read-only")
        self._value.set(value)

    def update(self, fn: Callable[[T], T]) -> None:
        if self.kind is not SignalKind.MUTABLE:
            raise TypeError(f"{self.kind.value} signal is read-only")
        self._value.update(fn)

    def __repr__(self) -> str:
        return f"Signal({self.kind.value}, {self._value!r})"


def signal(cell: Mutable[T]) -> Signal[T]:
    return Signal.from_cell(cell)


def create_derived(fn: Callable[[ReadContext], T]) -> Signal[T]:
    """Create a signal computed by fn(cx) on every read.

    Usage:
        first = create_mutable(root, "Ada")
        last = create_mutable(root, "Lovelace")
        full = create_derived(lambda cx: f"{first.get(cx)} {last.get(cx)}")

        create_effect(root, lambda cx: log.append(full.get(cx)))
        # the effect now depends on both first and last
    """
    return Signal.derived(fn)
