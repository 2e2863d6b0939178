"""Store adapter — the versioned key/value substrate reactions read from.

The runtime only needs four things from a store: read a value with its
version, write a value (bumping the version and notifying listeners in the
same call), answer changed_since(), and reclaim a key. MemoryStore is the
in-process implementation; a host with its own storage implements
StoreAdapter and installs it with reactree.set_store().
"""

from __future__ import annotations

from typing import Callable, Hashable, Iterator, Protocol

Key = Hashable
Listener = Callable[[Key], None]
Disposer = Callable[[], None]


class StoreAdapter(Protocol):
    def read(self, key: Key) -> tuple[object, int]: ...

    def write(self, key: Key, value: object) -> None: ...

    def changed_since(self, key: Key, version: int | None) -> bool: ...

    def remove(self, key: Key) -> None: ...

    def subscribe(self, listener: Listener) -> Disposer: ...


class MemoryStore:
    """Versioned in-memory key/value store.

    Each key's version starts at 0 on its first write and goes up by one on
    every later write, equal value or not. A missing key has version None.
    Removing a key keeps its last version, so a later write continues from
    there and never repeats a version a reader may have recorded.
    """

    def __init__(self, initial: dict | None = None) -> None:
        self._values: dict[Key, object] = {}
        self._versions: dict[Key, int] = {}
        self._listeners: list[Listener] = []
        if initial:
            for key, value in initial.items():
                self.write(key, value)

    def read(self, key: Key) -> tuple[object, int]:
        """Return (value, version). Raises KeyError for a missing key."""
        if key not in self._values:
            raise KeyError(key)
        return self._values[key], self._versions[key]

    def get(self, key: Key, default: object = None) -> object:
        return self._values.get(key, default)

    def version(self, key: Key) -> int | None:
        if key not in self._values:
            return None
        return self._versions[key]

    def write(self, key: Key, value: object) -> None:
        """Store value, bump the key's version, then notify every listener."""
        version = self._versions.get(key)
        self._versions[key] = 0 if version is None else version + 1
        self._values[key] = value
        for listener in list(self._listeners):
            listener(key)

    def update(self, values: dict) -> None:
        for key, value in values.items():
            self.write(key, value)

    def changed_since(self, key: Key, version: int | None) -> bool:
        return self.version(key) != version

    def remove(self, key: Key) -> None:
        """Reclaim a key's value. Listeners are not notified."""
        self._values.pop(key, None)

    def subscribe(self, listener: Listener) -> Disposer:
        """Register a write listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass  # already removed

        return _unsubscribe

    def keys(self):
        return self._values.keys()

    def __contains__(self, key: Key) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Key]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"MemoryStore({len(self._values)} keys)"
